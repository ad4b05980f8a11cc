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

"""Air quality checks and Telegram alerts"""

from .conversion import estimate_pm25_from_aqi
from .exceptions import AirwatchError, ConfigError, LookupFailed, SendFailed
from .levels import AirQualityLevel
from .locations import resolve_location
from .types import AirQualityData, CityQuery, Coordinates, Location, RawMeasurement
from .use_cases import CheckAirQuality, NotifyAirQuality

__version__ = "0.1.0"

__all__ = [
    "AirQualityData",
    "AirQualityLevel",
    "AirwatchError",
    "CheckAirQuality",
    "CityQuery",
    "ConfigError",
    "Coordinates",
    "Location",
    "LookupFailed",
    "NotifyAirQuality",
    "RawMeasurement",
    "SendFailed",
    "estimate_pm25_from_aqi",
    "resolve_location",
]
