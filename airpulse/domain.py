"""Schemas for the air quality records produced and cached by the service.

Records are frozen Pydantic models: a refresh replaces a record wholesale,
nothing mutates one after it is built. JSON output uses camelCase field names
(`mainPollutant`, `isFallback`, ...) for the dashboard client.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from .aqi import AQI_MAX, AQI_MIN, AQICategory, aqi_category
from .conditions import WeatherCondition

FALLBACK_MAIN_POLLUTANT = "N/A"
PRIMARY_POLLUTANT = "PM2.5"


class _FrozenModel(BaseModel):
    """Immutable model serialized with camelCase aliases."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
        serialize_by_alias=True,
    )


class CityIdentity(_FrozenModel):
    """Canonical identity of a city the service knows how to report on."""
    id: str
    canonical_name: str
    state: str


class PollutantReading(_FrozenModel):
    """Pollutant concentrations, rounded to whole µg/m³."""
    pm25: int = Field(default=0, ge=0)
    pm10: int = Field(default=0, ge=0)
    no2: int = Field(default=0, ge=0)
    so2: int = Field(default=0, ge=0)
    co: int = Field(default=0, ge=0)
    o3: int = Field(default=0, ge=0)


class WeatherObservation(_FrozenModel):
    """Current weather at the city."""
    temp_c: int = 0
    humidity_pct: int = 0
    wind_kph: int = 0
    condition: WeatherCondition = WeatherCondition.CLEAR


class HistoryPoint(_FrozenModel):
    """AQI sample for one hour of the current day."""
    time: str  # "HH:MM"
    aqi: int = Field(ge=AQI_MIN, le=AQI_MAX)


class CityPayload(_FrozenModel):
    """Adapter output: a record without identity, plus what the provider says the place is called."""
    aqi: int = Field(default=0, ge=AQI_MIN, le=AQI_MAX)
    main_pollutant: str = PRIMARY_POLLUTANT
    pollutants: PollutantReading = Field(default_factory=PollutantReading)
    weather: WeatherObservation = Field(default_factory=WeatherObservation)
    history: List[HistoryPoint] = Field(default_factory=list)
    data_source: str = ""
    is_fallback: bool = False
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    reported_name: str | None = None
    reported_state: str | None = None

    @classmethod
    def fallback(cls, data_source: str = "") -> "CityPayload":
        """All-zero payload used when the provider cannot be used."""
        return cls(
            aqi=0,
            main_pollutant=FALLBACK_MAIN_POLLUTANT,
            pollutants=PollutantReading(),
            weather=WeatherObservation(),
            history=[],
            data_source=data_source,
            is_fallback=True,
        )


class AirQualityRecord(_FrozenModel):
    """The unit produced by the orchestrator and served over HTTP."""
    identity: CityIdentity
    aqi: int = Field(ge=AQI_MIN, le=AQI_MAX)
    main_pollutant: str
    pollutants: PollutantReading
    weather: WeatherObservation
    history: List[HistoryPoint]
    data_source: str
    is_fallback: bool
    fetched_at: datetime

    @field_validator("history", mode="after")
    @classmethod
    def history_time_ascending(cls, v: List[HistoryPoint]) -> List[HistoryPoint]:
        """Keep history ordered by HH:MM."""
        return sorted(v, key=lambda point: point.time)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def category(self) -> AQICategory:
        """Health category derived from `aqi`."""
        return aqi_category(self.aqi)

    @classmethod
    def from_payload(cls, identity: CityIdentity, payload: CityPayload) -> "AirQualityRecord":
        """Attach an identity to an adapter payload."""
        return cls(
            identity=identity,
            aqi=payload.aqi,
            main_pollutant=payload.main_pollutant,
            pollutants=payload.pollutants,
            weather=payload.weather,
            history=payload.history,
            data_source=payload.data_source,
            is_fallback=payload.is_fallback,
            fetched_at=payload.fetched_at,
        )
