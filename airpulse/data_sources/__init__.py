"""Upstream data sources for city air quality payloads."""

from .base import AirQualityDataSource, CallableAirQualityDataSource
from .factory import build_data_source
from .weatherapi_client import ForecastResponse, fetch_city_payload

__all__ = [
    "build_data_source",
    "AirQualityDataSource",
    "CallableAirQualityDataSource",
    "ForecastResponse",
    "fetch_city_payload",
]
