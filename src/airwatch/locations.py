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
Location resolution.

Turns free text (a chat command argument or a configured entry) into a
Location. Resolution never fails: anything that is not a valid
"latitude,longitude" pair is taken to be a place name.

The module also holds the alias table used by repositories when a place name
is not indexed by the upstream source.
"""

import math

from .types import Location

# Lower-cased place names the upstream source does not index by name, mapped
# to (latitude, longitude). Used for the single coordinate fallback.
CITY_ALIASES: dict[str, tuple[float, float]] = {
    "phan thong": (13.4667, 101.0950),
    "ban suan": (13.3617, 100.9830),
    "bang saen": (13.2836, 100.9236),
    "nong mon": (13.3083, 100.9361),
    "ang sila": (13.3333, 100.9333),
}


def _parse_coordinate(text: str, limit: float) -> float | None:
    """Parse a single coordinate, returning None if invalid or out of range."""
    try:
        value = float(text.strip())
    except ValueError:
        return None

    if math.isnan(value) or not -limit <= value <= limit:
        return None
    return value


def resolve_location(text: str, default_state: str, default_country: str) -> Location:
    """
    Resolve free text into a Location.

    Args:
        text: Either "latitude,longitude" or a place name
        default_state: State used when text is a place name
        default_country: Country used when text is a place name

    Returns:
        Location: Coordinate location when text is a valid in-range pair,
            otherwise a city location named after the text

    Example:
        >>> resolve_location("13.46,101.09", "Chon Buri", "Thailand").name
        '13.46,101.09'
        >>> resolve_location("Ban Suan", "Chon Buri", "Thailand").query.state
        'Chon Buri'
    """
    parts = text.split(",", 1)

    if len(parts) == 2:
        latitude = _parse_coordinate(parts[0], 90.0)
        longitude = _parse_coordinate(parts[1], 180.0)
        if latitude is not None and longitude is not None:
            return Location.from_coordinates(latitude, longitude)

    return Location.from_city(text.strip(), default_state, default_country)


def parse_locations(cities: str, state: str, country: str) -> tuple[Location, ...]:
    """
    Build the configured location list from a comma-separated string.

    Every entry is a place name in the given state and country. Blank entries
    are skipped and order is preserved.

    Example:
        >>> [loc.name for loc in parse_locations("Ban Suan, Phan Thong", "Chon Buri", "Thailand")]
        ['Ban Suan', 'Phan Thong']
    """
    return tuple(
        Location.from_city(city.strip(), state, country)
        for city in cities.split(",")
        if city.strip()
    )


def lookup_alias(
    city: str, aliases: dict[str, tuple[float, float]] | None = None
) -> Location | None:
    """Return the coordinate location for a known alias, or None."""
    table = CITY_ALIASES if aliases is None else aliases
    coordinates = table.get(city.strip().lower())
    if coordinates is None:
        return None
    return Location.from_coordinates(*coordinates)
