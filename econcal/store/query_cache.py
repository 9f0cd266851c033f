"""Memoized date-range query results with TTL and explicit invalidation."""

import json
import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from econcal.config import QUERY_CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)


def to_utc_date(value: date | datetime | None) -> date | None:
    """Collapse a bound to its UTC calendar date (naive datetimes are UTC)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).date()
    return value


@dataclass
class CacheEntry:
    ids: list[str]
    created_at: float
    params: dict[str, Any] = field(default_factory=dict)


class QueryCache:
    """Query-key -> id list, valid until TTL expiry or an invalidation trigger."""

    def __init__(
        self,
        ttl_seconds: float = QUERY_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self.last_timezone: str | None = None

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[str]:
        return list(self._entries)

    @staticmethod
    def build_key(
        start: date | datetime | None,
        end: date | datetime | None,
        impacts: Iterable[str] | None = None,
        currencies: Iterable[str] | None = None,
    ) -> str:
        start_date = to_utc_date(start)
        end_date = to_utc_date(end)
        return json.dumps(
            {
                "type": "dateRange",
                "start": start_date.isoformat() if start_date else None,
                "end": end_date.isoformat() if end_date else None,
                "impacts": sorted({str(i) for i in impacts or ()}),
                "currencies": sorted({str(c).upper() for c in currencies or ()}),
            },
            sort_keys=True,
        )

    def get(self, key: str) -> list[str] | None:
        """Cached ids for the key, or None on a miss. Expired entries are dropped."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.created_at >= self.ttl_seconds:
            del self._entries[key]
            return None
        return entry.ids

    def put(self, key: str, ids: list[str], params: dict[str, Any] | None = None) -> None:
        self._entries[key] = CacheEntry(ids=ids, created_at=self._clock(), params=params or {})

    def invalidate(self, pattern: str | None = None) -> int:
        """Drop every entry, or only keys containing ``pattern``. Returns the count dropped."""
        if pattern is None:
            dropped = len(self._entries)
            self._entries = {}
        else:
            stale = [key for key in self._entries if pattern in key]
            for key in stale:
                del self._entries[key]
            dropped = len(stale)
        if dropped:
            logger.debug("Dropped %d cached queries (pattern=%r)", dropped, pattern)
        return dropped

    def on_timezone_change(self, timezone_name: str) -> bool:
        """Drop the cache if the timezone differs from the last one seen."""
        if self.last_timezone == timezone_name:
            return False
        self.last_timezone = timezone_name
        self.invalidate()
        return True

    def on_day_rollover(self) -> None:
        self.invalidate()

    def reset(self) -> None:
        self._entries = {}
        self.last_timezone = None
