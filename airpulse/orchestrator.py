"""Cache-backed access to air quality records with single-flight fetches."""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Iterable, List

from airpulse.data_sources import AirQualityDataSource
from airpulse.domain import AirQualityRecord, CityIdentity
from airpulse.record_cache import RecordCache
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="orchestrator")


class AirQualityOrchestrator:
    """Serve records from the cache, fetching from the data source on a miss.

    Concurrent misses for the same key share one in-flight fetch: the first
    caller performs it, later callers block on the same future and receive the
    same record (or the same exception).
    """

    def __init__(self, data_source: AirQualityDataSource, cache: RecordCache, *, max_workers: int = 6) -> None:
        self.data_source = data_source
        self.cache = cache
        self.max_workers = max(1, max_workers)
        self._in_flight: dict[str, Future] = {}
        self._lock = threading.Lock()

    def get_or_fetch(self, key: str, canonical_name: str, fallback_state: str) -> AirQualityRecord:
        """Return the cached record for `key`, fetching `canonical_name` on a miss.

        The identity attached to a fetched record prefers the name/region the
        provider reports over `canonical_name`/`fallback_state`.
        """
        record = self.cache.get(key)
        if record is not None:
            return record

        with self._lock:
            record = self.cache.get(key)
            if record is not None:
                return record
            future = self._in_flight.get(key)
            leader = future is None
            if leader:
                future = Future()
                self._in_flight[key] = future

        if not leader:
            logger.debug("Joining in-flight fetch", extra={"key": key})
            return future.result()

        try:
            record = self._fetch(key, canonical_name, fallback_state)
            self.cache.put(key, record)
        except BaseException as exc:
            future.set_exception(exc)
            raise
        else:
            future.set_result(record)
            return record
        finally:
            with self._lock:
                self._in_flight.pop(key, None)

    def get_many(self, identities: Iterable[CityIdentity]) -> List[AirQualityRecord]:
        """Fetch records for several directory entries in parallel, preserving order."""
        identities = list(identities)
        if not identities:
            return []
        workers = min(self.max_workers, len(identities))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="airpulse-fetch") as pool:
            return list(
                pool.map(lambda city: self.get_or_fetch(city.id, city.canonical_name, city.state), identities)
            )

    def invalidate(self, key: str) -> None:
        """Drop one cached record."""
        self.cache.invalidate(key)

    def clear(self) -> None:
        """Drop every cached record."""
        self.cache.clear()

    def _fetch(self, key: str, canonical_name: str, fallback_state: str) -> AirQualityRecord:
        logger.info("Cache miss; fetching fresh data", extra={"key": key, "city": canonical_name})
        payload = self.data_source.fetch(canonical_name)
        identity = CityIdentity(
            id=key,
            canonical_name=payload.reported_name or canonical_name,
            state=payload.reported_state or fallback_state,
        )
        if payload.is_fallback:
            logger.warning("Caching fallback record", extra={"key": key, "city": canonical_name})
        return AirQualityRecord.from_payload(identity, payload)
