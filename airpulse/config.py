"""Application configuration pulled from environment variables via pydantic."""
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the AirPulse service."""
    model_config = SettingsConfigDict(env_prefix="AIRPULSE_", extra="ignore", populate_by_name=True)

    # Upstream weather/pollution provider
    weather_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("AIRPULSE_WEATHER_API_KEY", "WEATHER_API_KEY", "weather_api_key"),
    )
    weatherapi_base_url: str = "https://api.weatherapi.com/v1"
    data_source: str = "weatherapi"
    forecast_days: int = 1
    upstream_timeout_seconds: float = 10.0
    upstream_retries: int = 3
    upstream_backoff_factor: float = 0.2

    # Record cache
    cache_ttl_seconds: int = 300
    cache_expiry: Literal["per_key", "global"] = "per_key"
    cities_fetch_concurrency: int = 6

    # Language-model collaborator for /api/chat
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("AIRPULSE_GEMINI_API_KEY", "GEMINI_API_KEY", "gemini_api_key"),
    )
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-1.5-flash"
    gemini_retries: int = 1
    gemini_retry_backoff_sec: float = 0.5
    max_user_message_chars: int = 4000

    # Free-text city extraction
    extra_stopwords: list[str] = Field(default_factory=list)

    log_level: str = "INFO"

    @field_validator("weatherapi_base_url", "gemini_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("cache_ttl_seconds", mode="after")
    @classmethod
    def ttl_not_negative(cls, v: int) -> int:
        """A negative TTL makes no sense; zero disables caching."""
        if v < 0:
            raise ValueError("cache_ttl_seconds must be >= 0")
        return v


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4, exclude={'weather_api_key', 'gemini_api_key'})}")
