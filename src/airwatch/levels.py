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
Air quality severity levels.

Five ordered levels with the display text used in notifications. A level can
be classified from either an AQI value or a PM2.5 concentration. The two
scales use different breakpoints and are not interchangeable: notifications
classify from AQI, since that is what data sources report directly.

The PM2.5 bands follow the Thai Pollution Control Department's pre-2023
AQI table rather than the US EPA concentration breakpoints.
"""

from enum import IntEnum


class AirQualityLevel(IntEnum):
    """Severity of a reading, ordered from best to worst."""

    GOOD = 1
    MODERATE = 2
    UNHEALTHY_FOR_SENSITIVE = 3
    UNHEALTHY = 4
    VERY_UNHEALTHY = 5

    @classmethod
    def from_aqi(cls, aqi: int) -> "AirQualityLevel":
        """
        Classify a US EPA AQI value.

        Bands: 0-50 Good, 51-100 Moderate, 101-150 Unhealthy for Sensitive
        Groups, 151-200 Unhealthy, 201+ Very Unhealthy.

        Raises:
            ValueError: If aqi is negative
        """
        return _classify(aqi, AQI_UPPER_BOUNDS, "AQI")

    @classmethod
    def from_pm25(cls, pm25: int) -> "AirQualityLevel":
        """
        Classify a PM2.5 concentration in µg/m³.

        Bands: 0-25 Good, 26-37 Moderate, 38-50 Unhealthy for Sensitive
        Groups, 51-90 Unhealthy, 91+ Very Unhealthy.

        Raises:
            ValueError: If pm25 is negative
        """
        return _classify(pm25, PM25_UPPER_BOUNDS, "PM2.5")

    @property
    def emoji(self) -> str:
        return EMOJI[self]

    @property
    def description(self) -> str:
        return DESCRIPTIONS[self]

    @property
    def health_warning(self) -> str:
        return HEALTH_WARNINGS[self]


# Inclusive upper bound of each level; anything above the last is VERY_UNHEALTHY
AQI_UPPER_BOUNDS = [
    (50, AirQualityLevel.GOOD),
    (100, AirQualityLevel.MODERATE),
    (150, AirQualityLevel.UNHEALTHY_FOR_SENSITIVE),
    (200, AirQualityLevel.UNHEALTHY),
]

PM25_UPPER_BOUNDS = [
    (25, AirQualityLevel.GOOD),
    (37, AirQualityLevel.MODERATE),
    (50, AirQualityLevel.UNHEALTHY_FOR_SENSITIVE),
    (90, AirQualityLevel.UNHEALTHY),
]


def _classify(
    value: int, upper_bounds: list[tuple[int, AirQualityLevel]], scale: str
) -> AirQualityLevel:
    if value < 0:
        raise ValueError(f"{scale} must be non-negative, got {value}")

    for upper, level in upper_bounds:
        if value <= upper:
            return level
    return AirQualityLevel.VERY_UNHEALTHY


EMOJI = {
    AirQualityLevel.GOOD: "🟢",
    AirQualityLevel.MODERATE: "🟡",
    AirQualityLevel.UNHEALTHY_FOR_SENSITIVE: "🟠",
    AirQualityLevel.UNHEALTHY: "🔴",
    AirQualityLevel.VERY_UNHEALTHY: "🟣",
}

DESCRIPTIONS = {
    AirQualityLevel.GOOD: "ดีมาก (Good)",
    AirQualityLevel.MODERATE: "ปานกลาง (Moderate)",
    AirQualityLevel.UNHEALTHY_FOR_SENSITIVE: "เริ่มมีผลกระทบต่อสุขภาพ",
    AirQualityLevel.UNHEALTHY: "มีผลกระทบต่อสุขภาพ",
    AirQualityLevel.VERY_UNHEALTHY: "มีผลกระทบต่อสุขภาพมาก",
}

HEALTH_WARNINGS = {
    AirQualityLevel.GOOD: "✅ คุณภาพอากาศดี ปลอดภัยสำหรับกิจกรรมกลางแจ้ง",
    AirQualityLevel.MODERATE: "⚠️ คนไวต่ออากาศควรระวัง",
    AirQualityLevel.UNHEALTHY_FOR_SENSITIVE: (
        "⚠️ ⚠️ กลุ่มเสี่ยงควรลดกิจกรรมกลางแจ้ง\n"
        "เด็ก ผู้สูงอายุ ผู้ป่วยโรคหัวใจและปอด"
    ),
    AirQualityLevel.UNHEALTHY: (
        "🚨 อันตราย! ทุกคนควรหลีกเลี่ยงกิจกรรมกลางแจ้ง\n"
        "สวมหน้ากาก N95 หากจำเป็นต้องออกไป"
    ),
    AirQualityLevel.VERY_UNHEALTHY: (
        "🚨🚨 อันตรายมาก! ห้ามออกกลางแจ้ง\n"
        "อยู่ในบ้านและปิดหน้าต่างทุกบาน\n"
        "ใช้เครื่องฟอกอากาศ"
    ),
}
