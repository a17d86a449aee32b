"""Factory helpers for choosing the upstream data source at startup."""

from __future__ import annotations

from airpulse import config
from airpulse.data_sources.base import AirQualityDataSource, CallableAirQualityDataSource
from airpulse.data_sources.weatherapi_client import fetch_city_payload
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


DEFAULT_SOURCE_NAME = "weatherapi"


def build_data_source(settings: config.Settings | None = None) -> AirQualityDataSource:
    """Instantiate the configured data source."""
    settings = settings or config.settings
    source = (settings.data_source or DEFAULT_SOURCE_NAME).lower()

    if source == "weatherapi":
        if not settings.weather_api_key:
            logger.warning("Weather API key not set; requests will fail until WEATHER_API_KEY is configured")
        logger.info("Using WeatherAPI.com data source")
        return CallableAirQualityDataSource(
            fetcher=lambda query: fetch_city_payload(query, api_key=settings.weather_api_key),
        )

    raise ValueError(f"Unknown data source '{source}'")
