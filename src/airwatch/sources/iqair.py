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
IQAir (AirVisual) Data Source.

This module provides a repository over the IQAir AirVisual v2 API, which
reports the current US AQI together with temperature and humidity for a named
city or for the station nearest a coordinate.

Endpoints used:
- city: lookup by city, state and country name
- nearest_city: lookup by latitude and longitude

IQAir does not index every district by name, so city lookups that fail are
retried once by coordinate when the city is in the alias table (see
FallbackRepository).

API Documentation: https://api-docs.iqair.com/
"""

from logging import getLogger
from typing import Any

import requests

from ..exceptions import LookupFailed
from ..registry import register_source
from ..repository import FallbackRepository
from ..types import CityQuery, Coordinates, Location, RawMeasurement

logger = getLogger(__name__)

# ============================================================================
# CONSTANTS
# ============================================================================

API_BASE = "https://api.airvisual.com/v2"

# Network timeout for each request, in seconds
DEFAULT_TIMEOUT = 30


# ============================================================================
# RESPONSE PARSING
# ============================================================================


def _error_status(response: requests.Response, payload: Any) -> str:
    """
    Work out the most specific status for a failed response.

    IQAir failures look like {"status": "fail", "data": {"message": "city_not_found"}}.
    """
    if isinstance(payload, dict):
        data = payload.get("data")
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        if payload.get("status") and payload["status"] != "success":
            return str(payload["status"])
    return f"HTTP {response.status_code}"


def parse_measurement(data: dict) -> RawMeasurement:
    """
    Convert the "data" object of a successful response.

    Raises:
        KeyError, TypeError, ValueError: If the payload is malformed
    """
    current = data["current"]
    aqi = int(current["pollution"]["aqius"])
    humidity = int(current["weather"]["hu"])

    if aqi < 0:
        raise ValueError(f"Negative AQI: {aqi}")
    if not 0 <= humidity <= 100:
        raise ValueError(f"Humidity out of range: {humidity}")

    return RawMeasurement(
        city=str(data["city"]),
        state=str(data.get("state") or ""),
        aqi=aqi,
        temperature=int(current["weather"]["tp"]),
        humidity=humidity,
    )


# ============================================================================
# REPOSITORY
# ============================================================================


class IQAirRepository(FallbackRepository):
    """
    Air quality repository backed by the IQAir API.

    Args:
        api_key: IQAir API key
        aliases: Alias table for the coordinate fallback (default: built-in)
        timeout: Request timeout in seconds
        base_url: API root, overridable for testing

    Example:
        >>> repository = IQAirRepository(api_key="...")
        >>> raw = repository.fetch(Location.from_city("Ban Suan", "Chon Buri", "Thailand"))
        >>> raw.aqi
        87
    """

    def __init__(
        self,
        api_key: str,
        aliases: dict[str, tuple[float, float]] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str = API_BASE,
    ):
        super().__init__(aliases)
        self.api_key = api_key
        self.timeout = timeout
        self.base_url = base_url

    def fetch_by_city(self, location: Location, query: CityQuery) -> RawMeasurement:
        params = {"city": query.city, "state": query.state, "country": query.country}
        return self._call_api(location, "city", params)

    def fetch_by_coordinates(
        self, location: Location, query: Coordinates
    ) -> RawMeasurement:
        params = {"lat": query.latitude, "lon": query.longitude}
        return self._call_api(location, "nearest_city", params)

    def _call_api(self, location: Location, endpoint: str, params: dict) -> RawMeasurement:
        """
        Make one request and parse the measurement.

        Raises:
            LookupFailed: On transport errors, HTTP errors, API failures or
                malformed payloads
        """
        url = f"{self.base_url}/{endpoint}"
        logger.info(f"Fetching IQAir {endpoint} for {location.name}...")

        try:
            response = requests.get(
                url, params={**params, "key": self.api_key}, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise LookupFailed(location, type(e).__name__) from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not response.ok or not isinstance(payload, dict) or payload.get(
            "status"
        ) != "success":
            status = _error_status(response, payload)
            logger.warning(f"IQAir {endpoint} failed for {location.name}: {status}")
            raise LookupFailed(location, status)

        try:
            return parse_measurement(payload["data"])
        except (KeyError, TypeError, ValueError) as e:
            raise LookupFailed(location, "malformed response") from e


# ============================================================================
# SOURCE REGISTRATION
# ============================================================================

register_source(
    "IQAIR",
    {
        "name": "IQAir",
        "create": lambda api_key, **options: IQAirRepository(api_key, **options),
        "requires_api_key": True,
    },
)
