import os

import uvicorn

from airpulse.config import settings
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


def preflight() -> None:
    """
    Warn about missing API keys before serving. Requests that need a missing
    key fail with an explicit configuration error, so the server still starts.
    """
    if not settings.weather_api_key:
        logger.warning("WEATHER_API_KEY is not set; /api/cities and /api/weather will return configuration errors")
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; /api/chat will return configuration errors")
    if settings.cache_ttl_seconds == 0:
        logger.warning("AIRPULSE_CACHE_TTL_SECONDS=0 disables the record cache; every request hits the provider")


if __name__ == "__main__":
    setup_logging(level=settings.log_level, job_name="airpulse-api")
    preflight()

    uvicorn.run(
        "airpulse.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
