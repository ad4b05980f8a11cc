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
Exceptions raised by Airwatch.

Adapters translate transport errors (requests exceptions, HTTP status codes,
API error payloads) into these types so that the pipeline and the dispatch
layer only ever deal with domain failures.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import Location


class AirwatchError(Exception):
    """Base class for all Airwatch errors."""


class ConfigError(AirwatchError):
    """A required configuration value is missing or invalid."""


class LookupFailed(AirwatchError):
    """
    No measurement could be produced for a location.

    Attributes:
        location: The location that was queried
        status: Upstream status (API message, HTTP code or error class name)
    """

    def __init__(self, location: "Location", status: str):
        self.location = location
        self.status = status
        super().__init__(f"lookup failed for {location.name}: {status}")


class SendFailed(AirwatchError):
    """
    A message could not be delivered.

    Attributes:
        channel_id: Destination chat or channel
        status: Upstream status (API description, HTTP code or error class name)
    """

    def __init__(self, channel_id: str, status: str):
        self.channel_id = channel_id
        self.status = status
        super().__init__(f"send to {channel_id} failed: {status}")
