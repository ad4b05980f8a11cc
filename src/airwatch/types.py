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
Core type definitions for Airwatch.

This module defines the value types passed through the check-and-notify
pipeline and the two interfaces the pipeline consumes: a repository that
produces raw measurements and a gateway that delivers messages.
"""

from dataclasses import dataclass
from typing import Protocol, Union

from .conversion import estimate_pm25_from_aqi

# =============================================================================
# Location
# =============================================================================


@dataclass(frozen=True)
class CityQuery:
    """Name-based query: a city within a state and country."""

    city: str
    state: str
    country: str


@dataclass(frozen=True)
class Coordinates:
    """
    Coordinate-based query in decimal degrees.

    Raises:
        ValueError: If latitude is outside [-90, 90] or longitude is outside
            [-180, 180]
    """

    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range [-90, 90]: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(
                f"Longitude out of range [-180, 180]: {self.longitude}"
            )


LocationQuery = Union[CityQuery, Coordinates]


@dataclass(frozen=True)
class Location:
    """
    A place to query, either by name or by coordinate.

    Attributes:
        name: Display name
        query: Exactly one of CityQuery or Coordinates
    """

    name: str
    query: LocationQuery

    @classmethod
    def from_city(cls, city: str, state: str, country: str) -> "Location":
        return cls(name=city, query=CityQuery(city, state, country))

    @classmethod
    def from_coordinates(cls, latitude: float, longitude: float) -> "Location":
        coordinates = Coordinates(latitude, longitude)
        return cls(name=f"{latitude:.2f},{longitude:.2f}", query=coordinates)

    @property
    def is_coordinates(self) -> bool:
        return isinstance(self.query, Coordinates)

    def city_state(self) -> tuple[str, str]:
        """Return (city, state), or (name, "") for a coordinate location."""
        if isinstance(self.query, CityQuery):
            return self.query.city, self.query.state
        return self.name, ""

    def display_name(self) -> str:
        """Return "city, state", or just the city when state is empty."""
        city, state = self.city_state()
        if not state:
            return city
        return f"{city}, {state}"


# =============================================================================
# Measurements
# =============================================================================


@dataclass(frozen=True)
class RawMeasurement:
    """A single reading as reported by a data source."""

    city: str  # Resolved city, may differ from the query
    state: str  # Resolved state, may differ from the query
    aqi: int  # US EPA composite AQI
    temperature: int  # °C
    humidity: int  # %


@dataclass(frozen=True)
class AirQualityData:
    """
    A fully-formed reading ready for notification.

    Use from_measurement() to build one; pm25 is always derived from aqi.
    """

    location: Location
    aqi: int
    pm25: int
    temperature: int
    humidity: int

    def __post_init__(self):
        if self.pm25 != estimate_pm25_from_aqi(self.aqi):
            raise ValueError(
                f"pm25={self.pm25} does not match the estimate for aqi={self.aqi}"
            )

    @classmethod
    def from_measurement(cls, raw: RawMeasurement, country: str) -> "AirQualityData":
        return cls(
            location=Location.from_city(raw.city, raw.state, country),
            aqi=raw.aqi,
            pm25=estimate_pm25_from_aqi(raw.aqi),
            temperature=raw.temperature,
            humidity=raw.humidity,
        )


# =============================================================================
# Interfaces
# =============================================================================


class AirQualityRepository(Protocol):
    """Anything that can turn a Location into a RawMeasurement."""

    def fetch(self, location: Location) -> RawMeasurement:
        """
        Fetch the current measurement for a location.

        Raises:
            LookupFailed: If no measurement can be produced
        """
        ...


class NotificationGateway(Protocol):
    """Anything that can deliver a text message to a channel."""

    def send(self, channel_id: str, text: str) -> None:
        """
        Deliver text to a channel or chat.

        Raises:
            SendFailed: If delivery fails
        """
        ...
