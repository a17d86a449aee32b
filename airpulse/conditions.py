"""Collapse free-form provider condition text into a small fixed vocabulary."""

from __future__ import annotations

from enum import Enum


class WeatherCondition(str, Enum):
    """Weather conditions understood by the dashboard."""
    CLEAR = "Clear"
    CLOUDY = "Cloudy"
    RAIN = "Rain"
    PARTLY_CLOUDY = "Partly Cloudy"


# Checked in order; the first rule with a keyword contained in the text wins.
# Precipitation beats cloud cover: "Light rain shower, overcast" -> Rain.
CONDITION_RULES: tuple[tuple[tuple[str, ...], WeatherCondition], ...] = (
    (("rain", "drizzle"), WeatherCondition.RAIN),
    (("cloud", "overcast"), WeatherCondition.CLOUDY),
    (("mist", "fog"), WeatherCondition.PARTLY_CLOUDY),
    (("sunny", "clear"), WeatherCondition.CLEAR),
)

DEFAULT_CONDITION = WeatherCondition.PARTLY_CLOUDY


def normalize_condition(raw_text: str | None) -> WeatherCondition:
    """Classify provider condition text, e.g. "Patchy light drizzle" -> Rain."""
    lowered = (raw_text or "").lower()
    for keywords, condition in CONDITION_RULES:
        if any(keyword in lowered for keyword in keywords):
            return condition
    return DEFAULT_CONDITION
