"""
Tests for config.py - reading settings from the environment.
"""

import pytest

from airwatch.config import Config
from airwatch.exceptions import ConfigError

BASE_ENV = {
    "IQAIR_API_KEY": "iqair-key",
    "TELEGRAM_TOKEN": "123:telegram-secret",
    "TELEGRAM_CHANNEL": "@airwatch",
}


class TestFromEnv:
    def test_defaults(self):
        config = Config.from_env(BASE_ENV)

        assert config.telegram_channel == "@airwatch"
        assert config.cities == "Ban Suan"
        assert config.state == "Chon Buri"
        assert config.country == "Thailand"
        assert config.cron_schedule == "0 0 8,12,18 * * *"
        assert config.timezone == "Asia/Bangkok"
        assert config.source == "IQAIR"
        assert config.log_level == "INFO"

    def test_overrides(self):
        env = {
            **BASE_ENV,
            "CITIES": "Phan Thong, Bang Saen",
            "CRON_SCHEDULE": "0 9 * * *",
            "TIMEZONE": "UTC",
            "LOG_LEVEL": "debug",
        }
        config = Config.from_env(env)

        assert config.cron_schedule == "0 9 * * *"
        assert config.timezone == "UTC"
        assert config.log_level == "DEBUG"

    def test_blank_values_fall_back_to_defaults(self):
        config = Config.from_env({**BASE_ENV, "CITIES": "  ", "TIMEZONE": ""})
        assert config.cities == "Ban Suan"
        assert config.timezone == "Asia/Bangkok"

    def test_missing_required(self):
        env = {"TELEGRAM_TOKEN": "x"}
        with pytest.raises(ConfigError, match="IQAIR_API_KEY, TELEGRAM_CHANNEL"):
            Config.from_env(env)

    def test_blank_required_counts_as_missing(self):
        with pytest.raises(ConfigError, match="IQAIR_API_KEY"):
            Config.from_env({**BASE_ENV, "IQAIR_API_KEY": "   "})

    def test_required_can_be_narrowed(self):
        config = Config.from_env({"IQAIR_API_KEY": "k"}, required=("IQAIR_API_KEY",))
        assert config.telegram_token == ""

    def test_unknown_timezone(self):
        with pytest.raises(ConfigError, match="Unknown time zone"):
            Config.from_env({**BASE_ENV, "TIMEZONE": "Mars/Olympus_Mons"})

    def test_reads_dotenv_file(self, tmp_path, monkeypatch):
        for name in ("IQAIR_API_KEY", "TELEGRAM_TOKEN", "TELEGRAM_CHANNEL", "CITIES"):
            monkeypatch.delenv(name, raising=False)
        dotenv = tmp_path / ".env"
        dotenv.write_text(
            "IQAIR_API_KEY=from-file\n"
            "TELEGRAM_TOKEN=1:file\n"
            "TELEGRAM_CHANNEL=@file\n"
            "CITIES=Bang Saen\n"
        )

        try:
            config = Config.from_env(dotenv_path=str(dotenv))
        finally:
            for name in ("IQAIR_API_KEY", "TELEGRAM_TOKEN", "TELEGRAM_CHANNEL", "CITIES"):
                monkeypatch.delenv(name, raising=False)

        assert config.iqair_api_key == "from-file"
        assert config.cities == "Bang Saen"


class TestConfig:
    def test_repr_hides_secrets(self):
        text = repr(Config.from_env(BASE_ENV))
        assert "iqair-key" not in text
        assert "telegram-secret" not in text
        assert "@airwatch" in text

    def test_locations(self):
        config = Config.from_env({**BASE_ENV, "CITIES": "Ban Suan, ,Phan Thong"})
        locations = config.locations

        assert [location.name for location in locations] == ["Ban Suan", "Phan Thong"]
        assert not locations[1].is_coordinates

    def test_tzinfo(self):
        assert Config.from_env(BASE_ENV).tzinfo().key == "Asia/Bangkok"
