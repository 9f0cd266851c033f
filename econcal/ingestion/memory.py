"""In-process persistence backend.

Implements the service-side half of ingestion (stable ids, fuzzy merge,
preferred-source protection) over a dict, for the CLI and for tests.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from econcal.config import UPLOAD_SOURCE
from econcal.engines.matcher import EventMatcher
from econcal.engines.merge import has_preferred_source, merge_provider_event
from econcal.exceptions import RecordValidationError
from econcal.ingestion.base import PersistenceClient
from econcal.models.event import Event
from econcal.models.ingestion import BatchOutcome
from econcal.normalization.records import (
    compute_event_id,
    event_from_mapping,
    event_to_wire,
    record_from_mapping,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryPersistenceClient(PersistenceClient):
    """Canonical events held in a dict, with the upload merge policy applied on ingest."""

    def __init__(
        self,
        events: Iterable[Event | Mapping[str, Any]] = (),
        *,
        provider: str = UPLOAD_SOURCE,
        matcher: EventMatcher | None = None,
        now=_utcnow,
    ):
        self.provider = provider
        self.matcher = matcher or EventMatcher()
        self._now = now
        self._events: dict[str, Event] = {}
        for event in events:
            adapted = event if isinstance(event, Event) else event_from_mapping(event)
            self._events[adapted.id] = adapted

    @property
    def events(self) -> list[Event]:
        return list(self._events.values())

    def dump(self) -> list[dict[str, Any]]:
        """All canonical events in wire format, ordered by time then id."""
        ordered = sorted(self._events.values(), key=lambda e: (e.datetime_utc, e.id))
        return [event_to_wire(event) for event in ordered]

    async def find_candidates(
        self, currency: str, start: datetime, end: datetime
    ) -> list[Event]:
        return self._window(self._events, currency, start, end)

    async def get_event(self, event_id: str) -> Event | None:
        return self._events.get(event_id)

    async def ingest_batch(self, events: list[dict[str, Any]]) -> BatchOutcome:
        outcome = BatchOutcome()
        pending: dict[str, Event] = {}

        for raw in events:
            try:
                record = record_from_mapping(raw)
            except RecordValidationError as exc:
                logger.warning("Rejected upload record: %s", exc)
                outcome.errors += 1
                continue

            view = {**self._events, **pending}
            match = None
            if record.currency:
                candidates = self._window(
                    view,
                    record.currency,
                    record.datetime_utc - self.matcher.window,
                    record.datetime_utc + self.matcher.window,
                )
                match = self.matcher.find_match(record, candidates)

            if match is not None:
                event_id = match.matched_event_id
                existing = match.matched_event
            else:
                event_id = compute_event_id(record.currency, record.name, record.datetime_utc)
                existing = view.get(event_id)

            if has_preferred_source(existing):
                outcome.skipped += 1
                continue

            pending[event_id] = merge_provider_event(
                existing, record, provider=self.provider, event_id=event_id, now=self._now()
            )
            if existing is None:
                outcome.created += 1
            else:
                outcome.merged += 1

        self._events.update(pending)
        logger.info(
            "Ingested batch of %d: created=%d merged=%d skipped=%d errors=%d",
            len(events), outcome.created, outcome.merged, outcome.skipped, outcome.errors,
        )
        return outcome

    @staticmethod
    def _window(
        events: Mapping[str, Event], currency: str, start: datetime, end: datetime
    ) -> list[Event]:
        currency = currency.upper()
        found = [
            event for event in events.values()
            if event.currency == currency and start <= event.datetime_utc <= end
        ]
        return sorted(found, key=lambda e: (e.datetime_utc, e.id))
