"""Chat flow: detect a city, attach its record as context, ask the LLM to phrase it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from airpulse.cities import CityResolver
from airpulse.domain import AirQualityRecord
from airpulse.lookup import lookup_for_query
from airpulse.narration import build_chat_prompt, has_usable_data, strip_markdown_fences
from airpulse.orchestrator import AirQualityOrchestrator
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="assistant")


class TextGenerator(Protocol):
    """Anything that turns a prompt into reply text."""

    def ensure_configured(self) -> None:
        ...

    def generate(self, prompt: str) -> str:
        ...


@dataclass
class ChatReply:
    """Generated reply plus the structured context it was grounded on."""
    message: str
    city: Optional[str] = None
    context: Optional[AirQualityRecord] = None


def find_city_context(
    message: str,
    *,
    resolver: CityResolver,
    orchestrator: AirQualityOrchestrator,
) -> tuple[Optional[str], Optional[AirQualityRecord]]:
    """Extract a city from the message and fetch its record (via the cache)."""
    city = resolver.extract_from_free_text(message)
    if not city:
        return None, None
    lookup = lookup_for_query(city, resolver)
    logger.info("Detected city %s; fetching context", city, extra={"key": lookup.key})
    record = orchestrator.get_or_fetch(lookup.key, lookup.name, lookup.state)
    if not has_usable_data(record):
        logger.info("No usable data for detected city %s", city)
    return city, record


def answer_chat(
    message: str,
    *,
    resolver: CityResolver,
    orchestrator: AirQualityOrchestrator,
    generator: TextGenerator,
) -> ChatReply:
    """Build the prompt for `message` and return the generated reply."""
    generator.ensure_configured()
    city, record = find_city_context(message, resolver=resolver, orchestrator=orchestrator)
    prompt = build_chat_prompt(message, city=city, record=record)
    text = strip_markdown_fences(generator.generate(prompt))
    return ChatReply(
        message=text,
        city=city,
        context=record if has_usable_data(record) else None,
    )
