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
Repository base with the location-fallback retrieval policy.

Concrete data sources subclass FallbackRepository and implement the two
lookups their API offers. The base class decides which to call:

1. A coordinate location is looked up by coordinate, with no fallback.
2. A city location is looked up by name first.
3. If the name lookup fails and the city has a known alias, exactly one
   coordinate lookup is made and its outcome is final.
4. Without an alias, the original failure is raised unchanged.

There is no retry loop: a fetch makes at most two upstream calls.
"""

from abc import ABC, abstractmethod
from logging import getLogger

from .exceptions import LookupFailed
from .locations import lookup_alias
from .types import CityQuery, Coordinates, Location, RawMeasurement

logger = getLogger(__name__)


class FallbackRepository(ABC):
    """
    Base class for data sources that support name and coordinate lookups.

    Args:
        aliases: Alias table (lower-cased name -> (lat, lon)). Defaults to
            airwatch.locations.CITY_ALIASES.
    """

    def __init__(self, aliases: dict[str, tuple[float, float]] | None = None):
        self.aliases = aliases

    @abstractmethod
    def fetch_by_city(self, location: Location, query: CityQuery) -> RawMeasurement:
        """Look up a measurement by city name. Raises LookupFailed."""

    @abstractmethod
    def fetch_by_coordinates(
        self, location: Location, query: Coordinates
    ) -> RawMeasurement:
        """Look up the measurement nearest a coordinate. Raises LookupFailed."""

    def fetch(self, location: Location) -> RawMeasurement:
        """
        Fetch the current measurement for a location.

        Args:
            location: City or coordinate location

        Returns:
            RawMeasurement: The reading reported upstream

        Raises:
            LookupFailed: If neither the lookup nor the single fallback hop
                produced a measurement
        """
        query = location.query
        if location.is_coordinates:
            return self.fetch_by_coordinates(location, query)

        try:
            return self.fetch_by_city(location, query)
        except LookupFailed as original:
            fallback = lookup_alias(query.city, self.aliases)
            if fallback is None:
                raise

            logger.info(
                f"Name lookup for {location.name} failed ({original.status}), "
                f"retrying at {fallback.name}"
            )
            try:
                return self.fetch_by_coordinates(location, fallback.query)
            except LookupFailed as e:
                raise e from original
