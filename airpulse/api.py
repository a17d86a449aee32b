"""HTTP API for city air quality records and the chat assistant."""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from .assistant import answer_chat
from .cities import CityResolver, ExtractionRules
from .config import settings
from .data_sources import build_data_source
from .domain import AirQualityRecord
from .errors import GENERIC_ERROR_MESSAGE, InputValidationError
from .gemini_client import gemini_client
from .lookup import lookup_for_query
from .orchestrator import AirQualityOrchestrator
from .record_cache import InMemoryRecordCache
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="airpulse/api")

router = APIRouter()

RESOLVER = CityResolver(rules=ExtractionRules.default(settings.extra_stopwords))
ORCHESTRATOR = AirQualityOrchestrator(
    build_data_source(settings),
    InMemoryRecordCache(ttl_seconds=settings.cache_ttl_seconds, expiry=settings.cache_expiry),
    max_workers=settings.cities_fetch_concurrency,
)
GENERATOR = gemini_client


class ChatRequest(BaseModel):
    """Incoming chat message payload."""
    message: Optional[str] = None


class ChatResponse(BaseModel):
    """LLM reply plus the record it was grounded on, if any."""
    message: str
    city: Optional[str] = None
    context: Optional[AirQualityRecord] = None


class HealthResponse(BaseModel):
    status: str


def _validate_message(message: Optional[str]) -> str:
    """Reject empty or oversized chat messages before anything is fetched."""
    text = (message or "").strip()
    if not text:
        raise InputValidationError("Message is required")
    if len(text) > settings.max_user_message_chars:
        raise InputValidationError(f"Message too long; limit {settings.max_user_message_chars} characters.")
    return text


@router.get("/health", response_model=HealthResponse)
def health():
    """Liveness probe."""
    return HealthResponse(status="ok")


@router.get("/cities", response_model=List[AirQualityRecord])
def list_cities():
    """Return a record for every directory city."""
    logger.debug("Listing %d directory cities", len(RESOLVER.directory))
    return ORCHESTRATOR.get_many(RESOLVER.directory)


@router.get("/weather/{query}", response_model=AirQualityRecord)
def get_weather(query: str):
    """Return the record for a city name, id or "lat,lon" pair."""
    lookup = lookup_for_query(query, RESOLVER)
    logger.info("Weather lookup", extra={"query": query, "key": lookup.key})
    return ORCHESTRATOR.get_or_fetch(lookup.key, lookup.name, lookup.state)


@router.post("/chat", response_model=ChatResponse)
def chat(req: ChatRequest):
    """Answer a free-text question, grounding it on live data when a city is mentioned."""
    message = _validate_message(req.message)
    try:
        reply = answer_chat(message, resolver=RESOLVER, orchestrator=ORCHESTRATOR, generator=GENERATOR)
    except RuntimeError as exc:
        logger.exception("Chat generation failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=GENERIC_ERROR_MESSAGE,
        ) from exc
    return ChatResponse(message=reply.message, city=reply.city, context=reply.context)
