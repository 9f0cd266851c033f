"""Applies live-update notifications from the persistence service to a store."""

import logging
from collections.abc import AsyncIterable, Mapping
from typing import Any

from econcal.exceptions import RecordValidationError
from econcal.store.event_store import CanonicalEventStore

logger = logging.getLogger(__name__)


async def consume_live_updates(
    store: CanonicalEventStore,
    notifications: AsyncIterable[tuple[str, Mapping[str, Any]]],
) -> int:
    """Apply each ``(event_id, patch)`` through ``update_event``.

    Unknown ids are inserted. A patch that cannot form a valid event is
    logged and skipped; the stream keeps going. Returns the number applied.
    """
    applied = 0
    async for event_id, patch in notifications:
        try:
            store.update_event(event_id, patch)
        except RecordValidationError as exc:
            logger.warning("Skipping live update for %s: %s", event_id, exc)
            continue
        applied += 1
    logger.debug("Applied %d live update(s)", applied)
    return applied
