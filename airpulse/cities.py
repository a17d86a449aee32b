"""Resolve user-supplied city references to canonical city identities.

Matching is an ordered chain of strategies; the first one that produces a hit
wins:

1. the static directory (exact or substring match on name or id),
2. a secondary list of known cities with no state metadata,
3. historical names (Bombay, Madras, ...) as whole words,
4. for free text only, natural-language patterns ("AQI in <city>", ...).

Stopwords and patterns live in `ExtractionRules` so they can be extended from
configuration and swapped in tests.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Sequence

from .domain import CityIdentity
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="cities")

AD_HOC_PREFIX = "custom_"
UNKNOWN_STATE = "Unknown"

CITY_DIRECTORY: tuple[CityIdentity, ...] = (
    CityIdentity(id="delhi", canonical_name="New Delhi", state="Delhi"),
    CityIdentity(id="mumbai", canonical_name="Mumbai", state="Maharashtra"),
    CityIdentity(id="bengaluru", canonical_name="Bengaluru", state="Karnataka"),
    CityIdentity(id="kolkata", canonical_name="Kolkata", state="West Bengal"),
    CityIdentity(id="chennai", canonical_name="Chennai", state="Tamil Nadu"),
    CityIdentity(id="hyderabad", canonical_name="Hyderabad", state="Telangana"),
    CityIdentity(id="pune", canonical_name="Pune", state="Maharashtra"),
    CityIdentity(id="ahmedabad", canonical_name="Ahmedabad", state="Gujarat"),
    CityIdentity(id="jaipur", canonical_name="Jaipur", state="Rajasthan"),
    CityIdentity(id="lucknow", canonical_name="Lucknow", state="Uttar Pradesh"),
    CityIdentity(id="chandigarh", canonical_name="Chandigarh", state="Punjab"),
    CityIdentity(id="bhopal", canonical_name="Bhopal", state="Madhya Pradesh"),
)

ADDITIONAL_CITIES: tuple[str, ...] = (
    "Patna", "Indore", "Nagpur", "Surat", "Gurgaon", "Gurugram", "Noida",
    "Ghaziabad", "Faridabad", "Kanpur", "Varanasi", "Agra", "Amritsar",
    "Jodhpur", "Kochi", "Coimbatore", "Visakhapatnam", "Vadodara", "Thane",
)

# historical name -> directory id
HISTORICAL_ALIASES: dict[str, str] = {
    "bangalore": "bengaluru",
    "bombay": "mumbai",
    "calcutta": "kolkata",
    "madras": "chennai",
}

PREPOSITIONS: tuple[str, ...] = ("in", "of", "for", "about", "at")
AQI_KEYWORDS: tuple[str, ...] = ("aqi", "weather", "pollution", "air quality")

DEFAULT_STOPWORDS: frozenset[str] = frozenset({
    # articles, pronouns, auxiliaries
    "the", "a", "an", "my", "your", "our", "their", "his", "her", "its", "it",
    "me", "you", "we", "they", "this", "that", "these", "those", "is", "are",
    "was", "be", "what", "whats", "how", "which", "where", "when", "why", "who",
    "please", "tell", "know", "check", "like",
    # temporal
    "today", "tonight", "tomorrow", "yesterday", "now", "current", "currently",
    "morning", "evening", "week", "right",
    # domain
    "india", "good", "bad", "air", "quality", "aqi", "weather", "pollution",
    "level", "levels", "area", "city", "place", "location", "here", "there",
    "outside", "general",
})

_PHRASE = r"([a-z]+(?:\s+[a-z]+)?)"


def build_patterns(
    prepositions: Sequence[str] = PREPOSITIONS,
    keywords: Sequence[str] = AQI_KEYWORDS,
) -> tuple[re.Pattern[str], ...]:
    """Compile the free-text patterns, in priority order."""
    preps = "|".join(re.escape(p) for p in prepositions)
    kws = "|".join(re.escape(k).replace(r"\ ", r"\s+") for k in keywords)
    return (
        re.compile(rf"\b(?:{preps})\s+{_PHRASE}", re.IGNORECASE),
        re.compile(rf"\b(?:{kws})\s+(?:(?:{preps})\s+)?{_PHRASE}", re.IGNORECASE),
        re.compile(rf"\b{_PHRASE}\s+(?:{kws})\b", re.IGNORECASE),
    )


@dataclass(frozen=True)
class ExtractionRules:
    """Data driving the pattern step of free-text extraction."""
    patterns: tuple[re.Pattern[str], ...] = field(default_factory=build_patterns)
    stopwords: frozenset[str] = DEFAULT_STOPWORDS
    min_length: int = 3

    @classmethod
    def default(cls, extra_stopwords: Iterable[str] = ()) -> "ExtractionRules":
        """Default rules, optionally widened with more stopwords."""
        extra = {w.strip().lower() for w in extra_stopwords if w and w.strip()}
        return cls(stopwords=DEFAULT_STOPWORDS | extra)


Matcher = Callable[[str], Optional[CityIdentity]]


class CityResolver:
    """Resolve queries and chat messages against a static city directory."""

    def __init__(
        self,
        directory: Sequence[CityIdentity] = CITY_DIRECTORY,
        additional_cities: Sequence[str] = ADDITIONAL_CITIES,
        historical_aliases: dict[str, str] | None = None,
        rules: ExtractionRules | None = None,
    ) -> None:
        self.directory: tuple[CityIdentity, ...] = tuple(directory)
        self.additional_cities = tuple(additional_cities)
        self.rules = rules or ExtractionRules()
        self._by_id = {city.id: city for city in self.directory}

        aliases = HISTORICAL_ALIASES if historical_aliases is None else historical_aliases
        self._aliases: dict[str, CityIdentity] = {
            alias.lower(): self._by_id[city_id]
            for alias, city_id in aliases.items()
            if city_id in self._by_id
        }
        self._historical: tuple[tuple[re.Pattern[str], CityIdentity], ...] = tuple(
            (re.compile(rf"\b{re.escape(alias)}\b", re.IGNORECASE), city)
            for alias, city in self._aliases.items()
        )
        # Free text: a known name anywhere in the message.
        self._matchers: tuple[Matcher, ...] = (
            self._match_directory,
            self._match_additional,
            self._match_historical,
        )
        # Bare names: the query must be (part of) a known name.
        self._name_matchers: tuple[Matcher, ...] = (
            self._match_directory_name,
            self._match_additional_name,
            self._match_historical_name,
        )

    @staticmethod
    def ad_hoc(query: str) -> CityIdentity:
        """Identity for a place outside the directory."""
        name = query.strip()
        return CityIdentity(id=f"{AD_HOC_PREFIX}{name.lower()}", canonical_name=name, state=UNKNOWN_STATE)

    def get(self, city_id: str) -> CityIdentity | None:
        """Directory entry by id."""
        return self._by_id.get(city_id)

    def resolve(self, query: str) -> CityIdentity | None:
        """Find a known city mentioned anywhere in `query`; None when nothing matches."""
        return self._first_hit(query, self._matchers)

    def resolve_name(self, query: str) -> CityIdentity | None:
        """Resolve a bare city name or id, as typed into a search box.

        Matches a directory name containing the query, an exact directory id,
        an exact additional-city name or an exact historical name. Longer
        names that merely contain a known one ("Navi Mumbai") do not match.
        """
        return self._first_hit(query, self._name_matchers)

    @staticmethod
    def _first_hit(query: str | None, matchers: Sequence[Matcher]) -> CityIdentity | None:
        text = (query or "").strip().lower()
        if not text:
            return None
        for matcher in matchers:
            hit = matcher(text)
            if hit is not None:
                return hit
        return None

    def extract_from_free_text(self, message: str) -> str | None:
        """Pull a city name out of a chat message, or None."""
        identity = self.resolve(message)
        if identity is not None:
            return identity.canonical_name

        for pattern in self.rules.patterns:
            for match in pattern.finditer(message or ""):
                candidate = self._clean_candidate(match.group(1))
                if candidate:
                    logger.debug("Extracted city candidate", extra={"candidate": candidate})
                    return candidate.capitalize()
        return None

    def _match_directory(self, text: str) -> CityIdentity | None:
        for city in self.directory:
            name = city.canonical_name.lower()
            if text in (city.id, name) or city.id in text or name in text:
                return city
            if len(text) >= self.rules.min_length and (text in name or text in city.id):
                return city
        return None

    def _match_additional(self, text: str) -> CityIdentity | None:
        for name in self.additional_cities:
            if name.lower() in text:
                return self.ad_hoc(name)
        return None

    def _match_historical(self, text: str) -> CityIdentity | None:
        for pattern, city in self._historical:
            if pattern.search(text):
                return city
        return None

    def _match_directory_name(self, text: str) -> CityIdentity | None:
        for city in self.directory:
            if text == city.id or text in city.canonical_name.lower():
                return city
        return None

    def _match_additional_name(self, text: str) -> CityIdentity | None:
        for name in self.additional_cities:
            if name.lower() == text:
                return self.ad_hoc(name)
        return None

    def _match_historical_name(self, text: str) -> CityIdentity | None:
        return self._aliases.get(text)

    def _clean_candidate(self, raw: str | None) -> str | None:
        """Trim trailing stopwords; reject short candidates or ones still holding a stopword."""
        tokens = (raw or "").lower().split()
        while tokens and tokens[-1] in self.rules.stopwords:
            tokens.pop()
        if not tokens or any(token in self.rules.stopwords for token in tokens):
            return None
        candidate = " ".join(tokens)
        if len(candidate) < self.rules.min_length:
            return None
        return candidate
