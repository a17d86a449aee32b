"""US EPA PM2.5 Air Quality Index helpers.

The index is a piecewise-linear interpolation over the breakpoint table:

    I = (I_hi - I_lo) / (C_hi - C_lo) * (C - C_lo) + I_lo

Concentrations are in µg/m³. The first segment whose upper concentration bound
is >= C is used, so values falling in the 0.1 gaps between published segments
(12.05, 35.45, ...) are interpolated against the next segment. Anything above
500.4 is reported as 500.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import NamedTuple

AQI_MIN = 0
AQI_MAX = 500


class Breakpoint(NamedTuple):
    """One segment of the EPA breakpoint table."""
    c_low: float
    c_high: float
    i_low: int
    i_high: int


PM25_BREAKPOINTS: tuple[Breakpoint, ...] = (
    Breakpoint(0.0, 12.0, 0, 50),
    Breakpoint(12.1, 35.4, 51, 100),
    Breakpoint(35.5, 55.4, 101, 150),
    Breakpoint(55.5, 150.4, 151, 200),
    Breakpoint(150.5, 250.4, 201, 300),
    Breakpoint(250.5, 350.4, 301, 400),
    Breakpoint(350.5, 500.4, 401, 500),
)


class AQICategory(str, Enum):
    """Health category for an AQI value."""
    GOOD = "Good"
    MODERATE = "Moderate"
    UNHEALTHY_SENSITIVE = "Unhealthy for Sensitive Groups"
    UNHEALTHY = "Unhealthy"
    VERY_UNHEALTHY = "Very Unhealthy"
    HAZARDOUS = "Hazardous"


# Upper AQI bound (inclusive) for each category; the last one catches the rest.
_CATEGORY_CEILINGS: tuple[tuple[int, AQICategory], ...] = (
    (50, AQICategory.GOOD),
    (100, AQICategory.MODERATE),
    (150, AQICategory.UNHEALTHY_SENSITIVE),
    (200, AQICategory.UNHEALTHY),
    (300, AQICategory.VERY_UNHEALTHY),
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def aqi_from_pm25(pm25: float | int | None) -> int:
    """Convert a PM2.5 concentration to an integer AQI in [0, 500].

    Negative, missing or non-finite concentrations are treated as 0.
    """
    if pm25 is None:
        return AQI_MIN
    c = float(pm25)
    if math.isnan(c) or c <= 0:
        return AQI_MIN

    for bp in PM25_BREAKPOINTS:
        if c <= bp.c_high:
            slope = (bp.i_high - bp.i_low) / (bp.c_high - bp.c_low)
            aqi = _round_half_up(slope * (c - bp.c_low) + bp.i_low)
            return max(AQI_MIN, min(AQI_MAX, aqi))
    return AQI_MAX


def aqi_category(aqi: int) -> AQICategory:
    """Map an AQI value to its health category."""
    for ceiling, category in _CATEGORY_CEILINGS:
        if aqi <= ceiling:
            return category
    return AQICategory.HAZARDOUS
