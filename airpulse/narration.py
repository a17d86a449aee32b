"""Prompt construction for the air quality chat assistant.

All figures come from a fetched `AirQualityRecord`; the language model only
phrases them.
"""

from __future__ import annotations

from airpulse.domain import AirQualityRecord

SYSTEM_PROMPT = (
    "You are an Air Quality and Weather Assistant for India. You provide accurate, "
    "helpful information about air quality, pollution levels, and weather conditions."
)

USE_DATA_INSTRUCTION = (
    "IMPORTANT: Use the exact numbers from the real-time data above. Do not make up or "
    "estimate values. Format the response clearly with the actual AQI number, pollutant "
    "values, and weather conditions."
)

GENERIC_INSTRUCTION = (
    "If the user asks about a specific city's current AQI, let them know you can provide "
    "real-time data for major Indian cities."
)


def city_not_found_instruction(city: str) -> str:
    """Instruction used when a city was detected but no usable data came back."""
    return (
        f'Note: I tried to fetch real-time data for "{city}" but the weather provider doesn\'t '
        "have data for this location. Please let the user know we couldn't get real-time data "
        "for this specific city, and provide general air quality information or suggest they "
        "try a nearby major city."
    )


def has_usable_data(record: AirQualityRecord | None) -> bool:
    """A fallback or zero-AQI record is not worth quoting."""
    return record is not None and not record.is_fallback and record.aqi > 0


def format_context(city: str, record: AirQualityRecord) -> str:
    """Render a record as the bullet list injected into the prompt."""
    p = record.pollutants
    w = record.weather
    return "\n".join([
        f"REAL-TIME DATA for {city} (just fetched from {record.data_source or 'the weather provider'}):",
        f"- Current AQI: {record.aqi} ({record.category.value})",
        f"- Main Pollutant: {record.main_pollutant}",
        f"- PM2.5: {p.pm25} µg/m³",
        f"- PM10: {p.pm10} µg/m³",
        f"- NO₂: {p.no2} µg/m³",
        f"- SO₂: {p.so2} µg/m³",
        f"- CO: {p.co} µg/m³",
        f"- O₃: {p.o3} µg/m³",
        f"- Temperature: {w.temp_c}°C",
        f"- Humidity: {w.humidity_pct}%",
        f"- Wind Speed: {w.wind_kph} km/h",
        f"- Weather Condition: {w.condition.value}",
    ])


def build_chat_prompt(message: str, city: str | None = None, record: AirQualityRecord | None = None) -> str:
    """Assemble the single-turn prompt for the language model."""
    sections = [SYSTEM_PROMPT]
    if city and has_usable_data(record):
        sections.append(
            "USE THIS REAL-TIME DATA IN YOUR RESPONSE (this is live data, not estimates):\n"
            + format_context(city, record)
        )
        suffix = USE_DATA_INSTRUCTION
    elif city:
        suffix = city_not_found_instruction(city)
    else:
        suffix = GENERIC_INSTRUCTION
    sections.append(f"User question: {message}")
    sections.append(suffix)
    return "\n\n".join(sections)


def strip_markdown_fences(text: str) -> str:
    """Remove a code fence wrapped around the whole reply."""
    if not text:
        return text
    t = text.strip()
    if not t.startswith("```"):
        return t
    lines = t.splitlines()
    if lines and lines[0].strip().startswith("```"):
        lines = lines[1:]
    if lines and lines[-1].strip().startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()
