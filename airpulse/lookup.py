"""Turn an inbound city query into the cache key and fetch arguments."""

from __future__ import annotations

from typing import NamedTuple

from airpulse.cities import CityResolver
from airpulse.errors import InputValidationError

COORDINATES_KEY_PREFIX = "current:"
COORDINATES_STATE = "Your Location"


class CityLookup(NamedTuple):
    """Arguments for `AirQualityOrchestrator.get_or_fetch`."""
    key: str
    name: str
    state: str


def lookup_for_query(query: str | None, resolver: CityResolver) -> CityLookup:
    """Map "Pune", "bombay", "Shimla" or "28.61,77.20" to a lookup.

    Coordinates are passed upstream verbatim. Directory cities use their id as
    key; everything else gets an ad-hoc "custom_" key.
    """
    query = (query or "").strip()
    if not query:
        raise InputValidationError("City query is required")

    if "," in query:
        coords = ",".join(part.strip() for part in query.split(","))
        return CityLookup(key=f"{COORDINATES_KEY_PREFIX}{coords}", name=coords, state=COORDINATES_STATE)

    identity = resolver.resolve_name(query)
    if identity is None:
        identity = resolver.ad_hoc(query)
    return CityLookup(key=identity.id, name=identity.canonical_name, state=identity.state)
