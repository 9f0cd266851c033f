"""In-memory canonical store and query cache."""

from econcal.store.event_store import CanonicalEventStore
from econcal.store.query_cache import QueryCache

__all__ = ["CanonicalEventStore", "QueryCache"]
