"""TTL cache for air quality records, keyed by city key."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Literal, Optional, Protocol

from airpulse.domain import AirQualityRecord
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="record_cache")

ExpiryPolicy = Literal["per_key", "global"]


class RecordCache(Protocol):
    """Protocol for record cache backends."""

    def get(self, key: str) -> Optional[AirQualityRecord]:
        """Return the record for `key`, or None if missing or expired."""

    def put(self, key: str, record: AirQualityRecord) -> None:
        """Store `record` under `key`, replacing any previous record."""

    def invalidate(self, key: str) -> None:
        """Drop `key` without raising if it is absent."""

    def clear(self) -> None:
        """Drop every record."""


@dataclass(frozen=True)
class CachedRecord:
    """Record plus the monotonic time it was stored."""
    record: AirQualityRecord
    stored_at: float


class InMemoryRecordCache(RecordCache):
    """Thread-safe, TTL-aware in-process cache.

    Two expiry policies are supported:

    - ``per_key``: each record expires `ttl_seconds` after it was stored.
    - ``global``: the whole cache shares one generation timestamp; the first
      access after `ttl_seconds` have passed since the generation began clears
      every record and starts a new generation.

    Per-key expired records are evicted on every put. A TTL of 0 disables
    caching: nothing is stored and every get misses.
    """

    def __init__(
        self,
        ttl_seconds: float = 300,
        expiry: ExpiryPolicy = "per_key",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if expiry not in ("per_key", "global"):
            raise ValueError(f"Unknown expiry policy '{expiry}'")
        logger.debug("Initializing InMemoryRecordCache", extra={"ttl": ttl_seconds, "expiry": expiry})
        self.ttl = ttl_seconds
        self.expiry = expiry
        self._clock = clock
        self._records: dict[str, CachedRecord] = {}
        self._generation_started = clock()
        self._lock = threading.Lock()

    def _reset_generation_if_due(self, now: float) -> None:
        """Global policy: clear everything once the generation is older than the TTL."""
        if now - self._generation_started > self.ttl:
            if self._records:
                logger.info("Cache generation expired; dropping %d records", len(self._records))
            self._records.clear()
            self._generation_started = now

    def _expired(self, entry: CachedRecord, now: float) -> bool:
        if self.ttl <= 0:
            return True
        if self.expiry == "global":
            return False
        return now - entry.stored_at >= self.ttl

    def get(self, key: str) -> Optional[AirQualityRecord]:
        """Return the cached record, or None if missing/expired."""
        with self._lock:
            now = self._clock()
            if self.expiry == "global":
                self._reset_generation_if_due(now)
            entry = self._records.get(key)
            if entry is None:
                return None
            if self._expired(entry, now):
                self._records.pop(key, None)
                return None
            return entry.record

    def put(self, key: str, record: AirQualityRecord) -> None:
        """Store a record, replacing any previous one under the key."""
        with self._lock:
            now = self._clock()
            if self.expiry == "global":
                self._reset_generation_if_due(now)
            else:
                self._evict_expired(now)
            if self.ttl <= 0:
                return
            self._records[key] = CachedRecord(record=record, stored_at=now)

    def _evict_expired(self, now: float) -> None:
        """Per-key policy: drop every record past its TTL."""
        expired = [key for key, entry in self._records.items() if self._expired(entry, now)]
        for key in expired:
            del self._records[key]
        if expired:
            logger.debug("Evicted %d expired records", len(expired))

    def invalidate(self, key: str) -> None:
        """Remove a record if it exists."""
        with self._lock:
            self._records.pop(key, None)

    def clear(self) -> None:
        """Remove all records and start a new generation."""
        with self._lock:
            self._records.clear()
            self._generation_started = self._clock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
