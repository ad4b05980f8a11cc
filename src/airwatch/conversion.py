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
AQI to PM2.5 conversion.

Estimates a PM2.5 concentration (µg/m³) from a US EPA AQI value by inverting
the EPA piecewise-linear breakpoint table. Data sources such as IQAir report
only the composite AQI, so the concentration shown in notifications is
derived here rather than measured.

Each band interpolates linearly from an origin point:

    pm25 = origin_conc + (aqi - origin_aqi) * conc_range / aqi_range

The result is truncated towards zero, not rounded.

Reference: https://www.airnow.gov/aqi/aqi-basics/
"""

from typing import TypedDict


class AqiBand(TypedDict):
    """One AQI band of the AQI to PM2.5 table."""

    low_aqi: int  # Lowest AQI in the band (inclusive)
    high_aqi: int | None  # Highest AQI in the band (inclusive), None if open
    origin_aqi: int  # AQI at which interpolation starts
    origin_conc: float  # PM2.5 at origin_aqi
    conc_range: float  # PM2.5 gained across the band
    aqi_range: int  # AQI width the conc_range is spread over


# Pre-2024 EPA PM2.5 breakpoints, which is what IQAir's aqius is based on
PM25_BANDS: list[AqiBand] = [
    {"low_aqi": 0, "high_aqi": 50, "origin_aqi": 0, "origin_conc": 0.0,
     "conc_range": 12.0, "aqi_range": 50},
    {"low_aqi": 51, "high_aqi": 100, "origin_aqi": 50, "origin_conc": 12.0,
     "conc_range": 23.4, "aqi_range": 50},
    {"low_aqi": 101, "high_aqi": 150, "origin_aqi": 100, "origin_conc": 35.4,
     "conc_range": 19.5, "aqi_range": 50},
    {"low_aqi": 151, "high_aqi": 200, "origin_aqi": 150, "origin_conc": 55.4,
     "conc_range": 94.6, "aqi_range": 50},
    {"low_aqi": 201, "high_aqi": 300, "origin_aqi": 200, "origin_conc": 150.4,
     "conc_range": 99.6, "aqi_range": 100},
    # Open-ended: keeps extrapolating past the nominal 500 ceiling
    {"low_aqi": 301, "high_aqi": None, "origin_aqi": 300, "origin_conc": 250.4,
     "conc_range": 249.6, "aqi_range": 200},
]


def find_band(aqi: int) -> AqiBand:
    """
    Return the band containing an AQI value.

    Args:
        aqi: Non-negative AQI value

    Returns:
        AqiBand: The matching band

    Raises:
        ValueError: If aqi is negative
    """
    if aqi < 0:
        raise ValueError(f"AQI must be non-negative, got {aqi}")

    for band in PM25_BANDS:
        if band["high_aqi"] is None or aqi <= band["high_aqi"]:
            return band

    # The last band is open-ended so this is unreachable
    raise AssertionError(f"No band for AQI {aqi}")


def estimate_pm25_from_aqi(aqi: int) -> int:
    """
    Estimate a PM2.5 concentration from a US EPA AQI value.

    Args:
        aqi: Non-negative AQI value

    Returns:
        int: Estimated PM2.5 in µg/m³, truncated

    Raises:
        ValueError: If aqi is negative

    Example:
        >>> estimate_pm25_from_aqi(75)
        23
        >>> estimate_pm25_from_aqi(150)
        54
    """
    band = find_band(aqi)
    conc = band["origin_conc"] + (aqi - band["origin_aqi"]) * band[
        "conc_range"
    ] / band["aqi_range"]
    return int(conc)
