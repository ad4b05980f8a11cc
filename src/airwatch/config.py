# Airwatch: scheduled air quality alerts and on-demand checks
# Copyright (C) 2025 Ruaraidh Dobson, South London Scientific

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Runtime configuration.

Settings are read once at startup from the environment, after loading a
.env file if one is present. Secrets are kept out of the dataclass repr.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from .exceptions import ConfigError
from .locations import parse_locations
from .types import Location

REQUIRED = ("IQAIR_API_KEY", "TELEGRAM_TOKEN", "TELEGRAM_CHANNEL")

DEFAULTS = {
    "CITIES": "Ban Suan",
    "STATE": "Chon Buri",
    "COUNTRY": "Thailand",
    "CRON_SCHEDULE": "0 0 8,12,18 * * *",
    "TIMEZONE": "Asia/Bangkok",
    "AIR_QUALITY_SOURCE": "IQAIR",
    "LOG_LEVEL": "INFO",
}


@dataclass(frozen=True)
class Config:
    iqair_api_key: str = field(repr=False)
    telegram_token: str = field(repr=False)
    telegram_channel: str
    cities: str = DEFAULTS["CITIES"]
    state: str = DEFAULTS["STATE"]
    country: str = DEFAULTS["COUNTRY"]
    cron_schedule: str = DEFAULTS["CRON_SCHEDULE"]
    timezone: str = DEFAULTS["TIMEZONE"]
    source: str = DEFAULTS["AIR_QUALITY_SOURCE"]
    log_level: str = DEFAULTS["LOG_LEVEL"]

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        required: tuple[str, ...] = REQUIRED,
        dotenv_path: str | None = None,
    ) -> "Config":
        """
        Build a Config from environment variables.

        Args:
            env: Mapping to read instead of os.environ (no .env loading)
            required: Variables that must be set and non-empty
            dotenv_path: Explicit .env file; by default one is searched for

        Raises:
            ConfigError: If a required variable is missing or the time zone
                is unknown
        """
        if env is None:
            load_dotenv(dotenv_path)
            env = os.environ

        missing = [name for name in required if not env.get(name, "").strip()]
        if missing:
            raise ConfigError(f"Missing required settings: {', '.join(missing)}")

        def get(name: str) -> str:
            return env.get(name, "").strip() or DEFAULTS[name]

        config = cls(
            iqair_api_key=env.get("IQAIR_API_KEY", "").strip(),
            telegram_token=env.get("TELEGRAM_TOKEN", "").strip(),
            telegram_channel=env.get("TELEGRAM_CHANNEL", "").strip(),
            cities=get("CITIES"),
            state=get("STATE"),
            country=get("COUNTRY"),
            cron_schedule=get("CRON_SCHEDULE"),
            timezone=get("TIMEZONE"),
            source=get("AIR_QUALITY_SOURCE"),
            log_level=get("LOG_LEVEL").upper(),
        )
        config.tzinfo()  # fail early on an unknown zone
        return config

    @property
    def locations(self) -> tuple[Location, ...]:
        return parse_locations(self.cities, self.state, self.country)

    def tzinfo(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigError(f"Unknown time zone: {self.timezone}") from e
