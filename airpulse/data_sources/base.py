"""Interface for anything that can produce a city payload."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol

from airpulse.domain import CityPayload


class AirQualityDataSource(Protocol):
    """Provider of current air quality and weather for one place."""

    def fetch(self, query: str) -> CityPayload:
        """Return the payload for a place name or "lat,lon" pair.

        Implementations convert upstream failures into `CityPayload.fallback()`
        and only raise for configuration problems.
        """
        ...


@dataclass
class CallableAirQualityDataSource(AirQualityDataSource):
    """Wrap a fetch callable so backends and test stubs can be swapped."""

    fetcher: Callable[[str], CityPayload]

    def fetch(self, query: str) -> CityPayload:
        """Delegate to the configured fetch callable."""
        return self.fetcher(query)
