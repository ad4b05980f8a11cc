"""
Pytest configuration and shared fixtures.

This module provides test doubles for the two pipeline interfaces (a
repository and a notification gateway) plus sample API payloads.
"""

import threading

import pytest

from airwatch.exceptions import LookupFailed, SendFailed
from airwatch.repository import FallbackRepository
from airwatch.types import Location, RawMeasurement


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


# ============================================================================
# Test Doubles
# ============================================================================


class FakeRepository:
    """
    Repository returning canned results keyed by location name.

    A value that is an exception is raised; unknown names fail with
    city_not_found.
    """

    def __init__(self, results: dict | None = None):
        self.results = results or {}
        self.calls: list[Location] = []
        self._lock = threading.Lock()

    def fetch(self, location: Location) -> RawMeasurement:
        with self._lock:
            self.calls.append(location)

        result = self.results.get(location.name)
        if result is None:
            raise LookupFailed(location, "city_not_found")
        if isinstance(result, Exception):
            raise result
        return result


class RecordingGateway:
    """Gateway that records messages and fails for selected channels."""

    def __init__(self, failing_channels: set[str] | None = None):
        self.failing_channels = failing_channels or set()
        self.sent: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def send(self, channel_id: str, text: str) -> None:
        if channel_id in self.failing_channels:
            raise SendFailed(channel_id, "Forbidden: bot was blocked by the user")
        with self._lock:
            self.sent.append((channel_id, text))

    def texts_for(self, channel_id: str) -> list[str]:
        return [text for channel, text in self.sent if channel == channel_id]


class NameBlindRepository(FallbackRepository):
    """
    Source that indexes nothing by name and only knows some coordinates.

    Name lookups always fail; coordinate lookups succeed only for the
    coordinates in `known`.
    """

    def __init__(self, known: dict[tuple[float, float], RawMeasurement], aliases=None):
        super().__init__(aliases)
        self.known = known
        self.city_calls: list[Location] = []
        self.coordinate_calls: list[tuple[float, float]] = []

    def fetch_by_city(self, location, query):
        self.city_calls.append(location)
        raise LookupFailed(location, "city_not_found")

    def fetch_by_coordinates(self, location, query):
        point = (query.latitude, query.longitude)
        self.coordinate_calls.append(point)
        if point not in self.known:
            raise LookupFailed(location, "no_nearest_station")
        return self.known[point]


def make_raw(city="Ban Suan", state="Chon Buri", aqi=75, temperature=30, humidity=60):
    return RawMeasurement(
        city=city, state=state, aqi=aqi, temperature=temperature, humidity=humidity
    )


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def ban_suan():
    return Location.from_city("Ban Suan", "Chon Buri", "Thailand")


@pytest.fixture
def configured_locations():
    """Three configured locations, in order."""
    return tuple(
        Location.from_city(name, "Chon Buri", "Thailand")
        for name in ("Ban Suan", "Nowhere", "Phan Thong")
    )


@pytest.fixture
def fake_repository():
    """Repository knowing Ban Suan and Phan Thong but not Nowhere."""
    return FakeRepository(
        {
            "Ban Suan": make_raw("Ban Suan", "Chon Buri", aqi=75),
            "Phan Thong": make_raw("Phan Thong", "Chon Buri", aqi=160),
        }
    )


def iqair_payload(city="Ban Suan", state="Chon Buri", aqi=87, tp=31, hu=66):
    """A successful IQAir response body."""
    return {
        "status": "success",
        "data": {
            "city": city,
            "state": state,
            "country": "Thailand",
            "location": {"type": "Point", "coordinates": [100.983, 13.3617]},
            "current": {
                "pollution": {
                    "ts": "2026-10-19T01:00:00.000Z",
                    "aqius": aqi,
                    "mainus": "p2",
                    "aqicn": 40,
                    "maincn": "p2",
                },
                "weather": {
                    "ts": "2026-10-19T01:00:00.000Z",
                    "tp": tp,
                    "pr": 1010,
                    "hu": hu,
                    "ws": 2.1,
                    "wd": 240,
                    "ic": "04d",
                },
            },
        },
    }


@pytest.fixture
def iqair_success():
    return iqair_payload()


@pytest.fixture
def iqair_city_not_found():
    return {"status": "fail", "data": {"message": "city_not_found"}}
