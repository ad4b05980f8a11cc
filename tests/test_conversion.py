"""
Tests for conversion.py - AQI to PM2.5 estimation.

Covers each band of the breakpoint table, the band edges, truncation, the
open-ended top band and rejection of negative AQI.
"""

import pytest

from airwatch.conversion import PM25_BANDS, estimate_pm25_from_aqi, find_band

# ============================================================================
# Known Values
# ============================================================================


@pytest.mark.parametrize(
    "aqi, expected",
    [
        (0, 0),
        (25, 6),
        (50, 12),
        (51, 12),
        (75, 23),
        (100, 35),
        (101, 35),
        (150, 54),
        (151, 57),
        (200, 150),
        (201, 151),
        (300, 250),
        (301, 251),
        (500, 500),
    ],
)
def test_known_values(aqi, expected):
    """Test values across every band, including both edges of each band."""
    assert estimate_pm25_from_aqi(aqi) == expected


def test_truncates_rather_than_rounds():
    """AQI 75 gives 23.7, which must become 23, not 24."""
    assert estimate_pm25_from_aqi(75) == 23


def test_returns_int():
    assert isinstance(estimate_pm25_from_aqi(123), int)


# ============================================================================
# Properties
# ============================================================================


class TestProperties:
    """Properties that hold for every non-negative AQI."""

    def test_monotonically_non_decreasing(self):
        previous = estimate_pm25_from_aqi(0)
        for aqi in range(1, 1001):
            current = estimate_pm25_from_aqi(aqi)
            assert current >= previous, f"decreased at AQI {aqi}"
            previous = current

    def test_no_large_jumps_between_bands(self):
        """Consecutive AQI values never jump by more than the band step."""
        for aqi in range(0, 1000):
            step = estimate_pm25_from_aqi(aqi + 1) - estimate_pm25_from_aqi(aqi)
            assert 0 <= step <= 3, f"jump of {step} at AQI {aqi}"

    def test_total_for_very_large_aqi(self):
        """The last band is open-ended."""
        assert estimate_pm25_from_aqi(10_000) > estimate_pm25_from_aqi(500)

    def test_bands_are_contiguous(self):
        for lower, upper in zip(PM25_BANDS, PM25_BANDS[1:]):
            assert upper["low_aqi"] == lower["high_aqi"] + 1

    def test_only_last_band_is_open(self):
        assert PM25_BANDS[-1]["high_aqi"] is None
        assert all(band["high_aqi"] is not None for band in PM25_BANDS[:-1])


# ============================================================================
# Band Lookup and Validation
# ============================================================================


class TestFindBand:
    @pytest.mark.parametrize(
        "aqi, low_aqi",
        [(0, 0), (50, 0), (51, 51), (150, 101), (151, 151), (300, 201), (301, 301), (999, 301)],
    )
    def test_band_lower_bounds_are_inclusive(self, aqi, low_aqi):
        assert find_band(aqi)["low_aqi"] == low_aqi

    def test_negative_aqi_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            find_band(-1)

    def test_estimate_negative_aqi_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            estimate_pm25_from_aqi(-5)
