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
Check-and-notify use cases.

CheckAirQuality turns a Location into AirQualityData through any repository;
NotifyAirQuality formats AirQualityData and hands it to any gateway. Neither
handles errors: LookupFailed and SendFailed reach the caller, and the dispatch
layer decides what to do with them. A reading the data model rejects (such as
a negative AQI) is reported as LookupFailed like any other failed lookup.

Both classes hold only references set at construction, so one instance can
be shared by the scheduler and the command listener.
"""

from datetime import datetime

from .exceptions import LookupFailed
from .levels import AirQualityLevel
from .types import AirQualityData, AirQualityRepository, Location, NotificationGateway

DEFAULT_COUNTRY = "Thailand"

TIMESTAMP_FORMAT = "%d/%m/%Y %H:%M"


class CheckAirQuality:
    """
    Fetch a reading for one location.

    Args:
        repository: Any object with fetch(location) -> RawMeasurement
        country: Country attached to the resolved location
    """

    def __init__(self, repository: AirQualityRepository, country: str = DEFAULT_COUNTRY):
        self.repository = repository
        self.country = country

    def execute(self, location: Location) -> AirQualityData:
        """
        Raises:
            LookupFailed: Propagated from the repository, or raised when the
                reported reading is out of range
        """
        raw = self.repository.fetch(location)
        try:
            return AirQualityData.from_measurement(raw, self.country)
        except ValueError as e:
            raise LookupFailed(location, f"invalid reading: {e}") from e


class NotifyAirQuality:
    """
    Format a reading and deliver it.

    Args:
        gateway: Any object with send(channel_id, text)
    """

    def __init__(self, gateway: NotificationGateway):
        self.gateway = gateway

    def execute(
        self,
        channel_id: str,
        data: AirQualityData,
        timestamp: datetime | None = None,
    ) -> None:
        """
        Send one reading to a channel.

        Args:
            channel_id: Destination chat or channel
            data: Reading to send
            timestamp: When set, appended to the message (broadcast variant)

        Raises:
            SendFailed: Propagated from the gateway
        """
        self.gateway.send(channel_id, format_message(data, timestamp))


def format_message(data: AirQualityData, timestamp: datetime | None = None) -> str:
    """
    Render a reading as a Markdown message.

    Example output:

        🟡 *ปานกลาง (Moderate)*

        📍 Ban Suan, Chon Buri
        AQI *75* · PM2.5 23 µg/m³
        🌡️ 30°C · 💧 60%

        ⚠️ คนไวต่ออากาศควรระวัง
    """
    level = AirQualityLevel.from_aqi(data.aqi)

    message = (
        f"{level.emoji} *{level.description}*\n\n"
        f"📍 {escape_markdown(data.location.display_name())}\n"
        f"AQI *{data.aqi}* · PM2.5 {data.pm25} µg/m³\n"
        f"🌡️ {data.temperature}°C · 💧 {data.humidity}%\n\n"
        f"{level.health_warning}"
    )

    if timestamp is not None:
        message += f"\n\n🕐 {timestamp.strftime(TIMESTAMP_FORMAT)}"

    return message


def escape_markdown(text: str) -> str:
    """Escape characters that Telegram's legacy Markdown treats as markup."""
    for char in ("_", "*", "`", "["):
        text = text.replace(char, "\\" + char)
    return text
