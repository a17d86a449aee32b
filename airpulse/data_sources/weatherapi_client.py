"""Fetch current weather and air quality for one place from WeatherAPI.com.

The forecast endpoint is keyed by the literal query string, so a place name
and a "lat,lon" pair are both passed through verbatim. The raw JSON is
validated against the schema below before anything is derived from it; any
transport, status or schema problem yields a fallback payload instead of an
exception.
"""
from __future__ import annotations

from typing import List, Optional

import requests
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from retry_requests import retry

from airpulse.aqi import aqi_from_pm25
from airpulse.conditions import normalize_condition
from airpulse.config import settings
from airpulse.domain import CityPayload, HistoryPoint, PollutantReading, WeatherObservation
from airpulse.errors import ConfigurationError, UpstreamUnavailable
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="weatherapi_client")

DATA_SOURCE_NAME = "WeatherAPI.com"
FORECAST_PATH = "/forecast.json"

session = retry(
    requests.Session(),
    retries=settings.upstream_retries,
    backoff_factor=settings.upstream_backoff_factor,
)


class _UpstreamModel(BaseModel):
    """Lenient about extra fields; strict about the ones we read (finite numbers only)."""

    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)


class UpstreamLocation(_UpstreamModel):
    name: str
    region: Optional[str] = None


class UpstreamCondition(_UpstreamModel):
    text: str = ""


class UpstreamAirQuality(_UpstreamModel):
    pm2_5: float
    pm10: float
    no2: float
    so2: float
    co: float
    o3: float


class UpstreamCurrent(_UpstreamModel):
    temp_c: float
    humidity: float
    wind_kph: float
    condition: UpstreamCondition
    air_quality: UpstreamAirQuality


class UpstreamHourAirQuality(_UpstreamModel):
    pm2_5: Optional[float] = None


class UpstreamHour(_UpstreamModel):
    time: str  # "YYYY-MM-DD HH:MM", provider local time
    air_quality: Optional[UpstreamHourAirQuality] = None


class UpstreamForecastDay(_UpstreamModel):
    hour: List[UpstreamHour] = Field(default_factory=list)


class UpstreamForecast(_UpstreamModel):
    forecastday: List[UpstreamForecastDay] = Field(default_factory=list)


class ForecastResponse(_UpstreamModel):
    """Subset of the forecast.json response that the adapter relies on."""
    location: UpstreamLocation
    current: UpstreamCurrent
    forecast: Optional[UpstreamForecast] = None


def _round_non_negative(value: float) -> int:
    return max(0, int(round(value)))


def _hour_label(raw_time: str) -> str:
    """"2024-05-01 13:00" -> "13:00"."""
    return raw_time.split(" ")[-1]


def build_history(response: ForecastResponse) -> List[HistoryPoint]:
    """AQI for every other hour of the first forecast day.

    Hours without their own PM2.5 reading reuse the current reading.
    """
    if not response.forecast or not response.forecast.forecastday:
        return []
    current_pm25 = response.current.air_quality.pm2_5
    history: List[HistoryPoint] = []
    for i, hour in enumerate(response.forecast.forecastday[0].hour):
        if i % 2:
            continue
        pm25 = hour.air_quality.pm2_5 if hour.air_quality and hour.air_quality.pm2_5 is not None else None
        if pm25 is None:
            pm25 = current_pm25
        history.append(HistoryPoint(time=_hour_label(hour.time), aqi=aqi_from_pm25(pm25)))
    return history


def to_city_payload(response: ForecastResponse) -> CityPayload:
    """Map a validated provider response into the internal payload."""
    current = response.current
    air = current.air_quality
    return CityPayload(
        aqi=aqi_from_pm25(air.pm2_5),
        pollutants=PollutantReading(
            pm25=_round_non_negative(air.pm2_5),
            pm10=_round_non_negative(air.pm10),
            no2=_round_non_negative(air.no2),
            so2=_round_non_negative(air.so2),
            co=_round_non_negative(air.co),
            o3=_round_non_negative(air.o3),
        ),
        weather=WeatherObservation(
            temp_c=int(round(current.temp_c)),
            humidity_pct=int(round(current.humidity)),
            wind_kph=int(round(current.wind_kph)),
            condition=normalize_condition(current.condition.text),
        ),
        history=build_history(response),
        data_source=DATA_SOURCE_NAME,
        is_fallback=False,
        reported_name=response.location.name or None,
        reported_state=response.location.region or None,
    )


def _request_forecast(query: str, *, api_key: str, days: int, timeout: float) -> ForecastResponse:
    """Perform the HTTP call; raises UpstreamUnavailable on any failure."""
    url = f"{settings.weatherapi_base_url}{FORECAST_PATH}"
    params = {"key": api_key, "q": query, "days": days, "aqi": "yes"}
    try:
        resp = session.get(url, params=params, timeout=timeout)
    except requests.exceptions.RequestException as exc:
        raise UpstreamUnavailable(query, f"transport error: {exc}") from exc

    if resp.status_code != 200:
        raise UpstreamUnavailable(query, f"status {resp.status_code}: {(resp.text or '')[:200]}")

    try:
        data = resp.json()
    except ValueError as exc:
        raise UpstreamUnavailable(query, "non-JSON response") from exc

    try:
        return ForecastResponse.model_validate(data)
    except ValidationError as exc:
        raise UpstreamUnavailable(query, f"unexpected payload: {exc.error_count()} schema errors") from exc


def fetch_city_payload(
    query: str,
    *,
    api_key: str | None = None,
    days: int | None = None,
    timeout: float | None = None,
) -> CityPayload:
    """Fetch one place ("Pune" or "18.52,73.85") and normalize it.

    Raises ConfigurationError when no API key is configured; every other
    failure returns `CityPayload.fallback()`.
    """
    api_key = api_key if api_key is not None else settings.weather_api_key
    if not api_key:
        raise ConfigurationError("Weather API key not configured")

    try:
        response = _request_forecast(
            query,
            api_key=api_key,
            days=days or settings.forecast_days,
            timeout=timeout or settings.upstream_timeout_seconds,
        )
    except UpstreamUnavailable as exc:
        logger.warning(
            "Falling back to empty payload",
            extra={
                "city": query,
                "reason": exc.reason,
                "url": mask_url(f"{settings.weatherapi_base_url}{FORECAST_PATH}?key={api_key}&q={query}"),
            },
        )
        return CityPayload.fallback(DATA_SOURCE_NAME)

    payload = to_city_payload(response)
    logger.info(
        "Fetched %s (%s): aqi=%d condition=%s",
        payload.reported_name,
        payload.reported_state or "no region",
        payload.aqi,
        payload.weather.condition.value,
    )
    return payload
