"""Canonical event store with date, currency, and impact indexes.

Every mutation rebuilds the indexes from the full event list and swaps them
in under one lock, then drops the query cache, so readers never observe a
half-built index or a result computed from superseded data.
"""

import logging
import threading
import time
from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime, timezone
from typing import Any

from econcal.config import DEFAULT_SOURCE, QUERY_CACHE_TTL_SECONDS, UNKNOWN_CURRENCY
from econcal.models.event import Event, EventRecord, resolve_impact
from econcal.normalization.records import coerce_fields, event_from_mapping, validate_model
from econcal.store.query_cache import QueryCache, to_utc_date

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CanonicalEventStore:
    """Session-scoped store of canonical events with indexed range queries."""

    def __init__(
        self,
        cache_ttl_seconds: float = QUERY_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _utcnow,
    ):
        self._lock = threading.RLock()
        self._now = now
        self.query_cache = QueryCache(ttl_seconds=cache_ttl_seconds, clock=clock)
        self._events_by_id: dict[str, Event] = {}
        self._date_index: dict[str, list[str]] = {}
        self._currency_index: dict[str, list[str]] = {}
        self._impact_index: dict[str, list[str]] = {}
        self.sources: set[str] = set()
        self.last_sync_at: dict[str, datetime] = {}
        self.last_normalized_at: datetime | None = None

    # --- Lifecycle ---

    def init(
        self,
        events: Iterable[Event | Mapping[str, Any]] = (),
        *,
        source: str = DEFAULT_SOURCE,
        timezone_name: str | None = None,
    ) -> None:
        """Reset the store and load an initial event set."""
        with self._lock:
            self.clear()
            self.add_events(events, source=source, overwrite=True)
            if timezone_name is not None:
                self.query_cache.on_timezone_change(timezone_name)

    def clear(self) -> None:
        with self._lock:
            self._events_by_id = {}
            self._date_index = {}
            self._currency_index = {}
            self._impact_index = {}
            self.sources = set()
            self.last_sync_at = {}
            self.last_normalized_at = None
            self.query_cache.reset()

    # --- Mutations ---

    def add_events(
        self,
        events: Event | Mapping[str, Any] | Iterable[Event | Mapping[str, Any]],
        *,
        source: str = DEFAULT_SOURCE,
        overwrite: bool = False,
    ) -> int:
        """Merge a batch into the store, or replace the store when ``overwrite``.

        Records are adapted before anything is touched, so a bad record raises
        RecordValidationError with the store unchanged. A later record with an
        id already present replaces the earlier one. Returns the batch size.
        """
        if isinstance(events, (Event, Mapping)):
            events = [events]
        adapted = [self._adapt(event) for event in events]

        with self._lock:
            current = [] if overwrite else list(self._events_by_id.values())
            current.extend(adapted)
            self._rebuild(current)
            self.sources.add(source)
            self.last_sync_at[source] = self._now()
            self.query_cache.invalidate()

        logger.info(
            "Added %d event(s) from %s (overwrite=%s); store now holds %d",
            len(adapted), source, overwrite, len(self._events_by_id),
        )
        return len(adapted)

    def update_event(self, event_id: str, patch: EventRecord | Mapping[str, Any]) -> Event:
        """Shallow-merge a patch into an event, inserting it when the id is unknown.

        The insert path covers live-update notifications that arrive before
        the initial bulk load.
        """
        if isinstance(patch, EventRecord):
            fields = patch.model_dump(exclude_unset=True)
        else:
            fields = coerce_fields(patch, keep_none=True)
        fields.pop("id", None)

        with self._lock:
            existing = self._events_by_id.get(event_id)
            data = existing.model_dump() if existing is not None else {}
            data.update(fields)
            data["id"] = event_id
            data["updated_at"] = self._now()
            updated = validate_model(Event, data)

            if existing is None:
                logger.debug("update_event: %s not in store, inserting", event_id)
                events = [*self._events_by_id.values(), updated]
            else:
                events = [
                    updated if event.id == event_id else event
                    for event in self._events_by_id.values()
                ]
            self._rebuild(events)
            self.query_cache.invalidate()
        return updated

    # --- Lookups ---

    def get_event_by_id(self, event_id: str) -> Event | None:
        return self._events_by_id.get(event_id)

    def get_events_by_ids(self, event_ids: Iterable[str]) -> list[Event]:
        """Events for the given ids, in order; unknown ids are skipped."""
        return [self._events_by_id[i] for i in event_ids if i in self._events_by_id]

    def get_currencies(self) -> list[str]:
        return sorted(self._currency_index)

    def get_impacts(self) -> list[str]:
        return sorted(self._impact_index)

    @property
    def event_ids(self) -> list[str]:
        return list(self._events_by_id)

    def __len__(self) -> int:
        return len(self._events_by_id)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self._events_by_id

    # Read-only snapshots of the indexes.

    @property
    def date_index(self) -> dict[str, tuple[str, ...]]:
        return {k: tuple(v) for k, v in self._date_index.items()}

    @property
    def currency_index(self) -> dict[str, tuple[str, ...]]:
        return {k: tuple(v) for k, v in self._currency_index.items()}

    @property
    def impact_index(self) -> dict[str, tuple[str, ...]]:
        return {k: tuple(v) for k, v in self._impact_index.items()}

    # --- Queries ---

    def query_by_date_range(
        self,
        start: date | datetime | None = None,
        end: date | datetime | None = None,
        *,
        impacts: Iterable[str] | None = None,
        currencies: Iterable[str] | None = None,
    ) -> list[str]:
        """Ids of events whose UTC date lies in [start, end], optionally filtered.

        A ``None`` bound is open. Impact and currency filters each keep events
        in any of the requested buckets; impact labels are resolved to tiers
        ("high" -> High) and currencies upper-cased. Results are served from the query
        cache while valid; treat the returned list as read-only.
        """
        impacts = [str(resolve_impact(i)) for i in impacts or ()]
        currencies = [str(c).upper() for c in currencies or ()]
        key = QueryCache.build_key(start, end, impacts, currencies)

        with self._lock:
            cached = self.query_cache.get(key)
            if cached is not None:
                return cached

            ids = self._execute_range_query(to_utc_date(start), to_utc_date(end), impacts, currencies)
            self.query_cache.put(
                key,
                ids,
                {"start": start, "end": end, "impacts": impacts, "currencies": currencies},
            )
            return ids

    def invalidate_query_cache(self, pattern: str | None = None) -> int:
        with self._lock:
            return self.query_cache.invalidate(pattern)

    def on_timezone_change(self, timezone_name: str) -> bool:
        with self._lock:
            return self.query_cache.on_timezone_change(timezone_name)

    def on_day_rollover(self) -> None:
        with self._lock:
            self.query_cache.on_day_rollover()

    def get_stats(self) -> dict[str, Any]:
        return {
            "total_events": len(self._events_by_id),
            "cached_queries": len(self.query_cache),
            "sources": sorted(self.sources),
            "last_normalized_at": self.last_normalized_at,
            "last_sync_at": dict(self.last_sync_at),
        }

    # --- Internals ---

    @staticmethod
    def _adapt(event: Event | Mapping[str, Any]) -> Event:
        if isinstance(event, Event):
            return event
        return event_from_mapping(event)

    def _execute_range_query(
        self,
        start: date | None,
        end: date | None,
        impacts: list[str],
        currencies: list[str],
    ) -> list[str]:
        ids: list[str] = []
        for date_key in sorted(self._date_index):
            bucket_date = date.fromisoformat(date_key)
            if start is not None and bucket_date < start:
                continue
            if end is not None and bucket_date > end:
                continue
            ids.extend(self._date_index[date_key])

        if impacts:
            allowed = self._union(self._impact_index, impacts)
            ids = [i for i in ids if i in allowed]
        if currencies:
            allowed = self._union(self._currency_index, currencies)
            ids = [i for i in ids if i in allowed]
        return ids

    @staticmethod
    def _union(index: dict[str, list[str]], keys: list[str]) -> set[str]:
        allowed: set[str] = set()
        for key in keys:
            allowed.update(index.get(key, ()))
        return allowed

    def _rebuild(self, events: Iterable[Event]) -> None:
        """Rebuild every index from scratch and swap them in together."""
        events_by_id: dict[str, Event] = {}
        for event in events:
            events_by_id[event.id] = event

        date_index: dict[str, list[str]] = {}
        currency_index: dict[str, list[str]] = {}
        impact_index: dict[str, list[str]] = {}
        for event_id, event in events_by_id.items():
            date_index.setdefault(event.date_key, []).append(event_id)
            currency_index.setdefault(event.currency or UNKNOWN_CURRENCY, []).append(event_id)
            impact_index.setdefault(str(event.impact), []).append(event_id)

        self._events_by_id = events_by_id
        self._date_index = date_index
        self._currency_index = currency_index
        self._impact_index = impact_index
        self.last_normalized_at = self._now()
