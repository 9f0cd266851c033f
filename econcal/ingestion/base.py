"""Persistence service contract consumed by the ingestion pipeline."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from econcal.exceptions import MatchLookupError
from econcal.models.event import Event
from econcal.models.ingestion import BatchOutcome


@dataclass
class CandidateLookup:
    """Result of a candidate lookup: either candidates or the error that prevented them."""

    candidates: list[Event] = field(default_factory=list)
    error: MatchLookupError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PersistenceClient(ABC):
    """Remote store of canonical events. Owns ids and final merge decisions."""

    @abstractmethod
    async def find_candidates(
        self, currency: str, start: datetime, end: datetime
    ) -> list[Event]:
        """Canonical events for ``currency`` with ``start <= datetime_utc <= end``."""
        ...

    @abstractmethod
    async def get_event(self, event_id: str) -> Event | None:
        """Full canonical record, including ``sources``, or None."""
        ...

    @abstractmethod
    async def ingest_batch(self, events: list[dict[str, Any]]) -> BatchOutcome:
        """Submit wire-format events; returns created/merged/skipped/error counts."""
        ...

    async def lookup_candidates(
        self, currency: str, start: datetime, end: datetime
    ) -> CandidateLookup:
        """Like find_candidates, but failures come back as a value instead of raising."""
        try:
            candidates = await self.find_candidates(currency, start, end)
        except Exception as exc:  # noqa: BLE001
            return CandidateLookup(error=MatchLookupError(currency, exc))
        return CandidateLookup(candidates=list(candidates))
