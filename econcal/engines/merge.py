"""Provider merge policy for folding a source record into a canonical event.

The persistence service owns the final merge decision; this module is the
reference policy used by the in-memory backend.
"""

import logging
from datetime import datetime

from econcal.config import MATCH_WINDOW, PREFERRED_SOURCES, PROVIDER_PRIORITY
from econcal.models.enums import EventStatus, ImpactTier
from econcal.models.event import Event, EventRecord

logger = logging.getLogger(__name__)

_STATUS_ORDER = {
    EventStatus.SCHEDULED: 0,
    EventStatus.RELEASED: 1,
    EventStatus.REVISED: 2,
    EventStatus.CANCELLED: 3,
}

_METRICS = ("actual", "forecast", "previous")


def provider_rank(provider: str) -> int:
    """Position in the priority list; unknown providers rank last."""
    try:
        return PROVIDER_PRIORITY.index(provider)
    except ValueError:
        return len(PROVIDER_PRIORITY)


def has_preferred_source(event: Event | None) -> bool:
    if event is None:
        return False
    return any(event.sources.get(name) for name in PREFERRED_SOURCES)


def _outranks(provider: str, sources: dict[str, bool]) -> bool:
    present = [provider_rank(name) for name, flag in sources.items() if flag and name != provider]
    return not present or provider_rank(provider) < min(present)


def _pick_status(current: EventStatus, incoming: EventStatus) -> EventStatus:
    if current == EventStatus.CANCELLED and incoming == EventStatus.SCHEDULED:
        # Reappeared in a feed after being marked stale.
        return EventStatus.SCHEDULED
    return incoming if _STATUS_ORDER[incoming] >= _STATUS_ORDER[current] else current


def merge_provider_event(
    existing: Event | None,
    incoming: EventRecord,
    *,
    provider: str,
    event_id: str,
    now: datetime,
) -> Event:
    """Return the canonical event after applying one provider's record."""
    if existing is None:
        return Event(
            **incoming.model_dump(exclude={"sources"}),
            id=event_id,
            sources={**incoming.sources, provider: True},
            updated_at=now,
        )

    wins = _outranks(provider, existing.sources)
    update: dict = {}

    if incoming.currency and existing.currency and incoming.currency != existing.currency:
        logger.warning(
            "Currency mismatch for %s: existing=%s, incoming=%s",
            existing.id, existing.currency, incoming.currency,
        )
    elif incoming.currency and not existing.currency:
        update["currency"] = incoming.currency

    if existing.impact == ImpactTier.UNRESOLVED and incoming.impact != ImpactTier.UNRESOLVED:
        update["impact"] = incoming.impact
    if not existing.category and incoming.category:
        update["category"] = incoming.category

    for metric in _METRICS:
        current = getattr(existing, metric)
        value = getattr(incoming, metric)
        if value is not None and (current is None or wins):
            update[metric] = value

    if wins:
        update["name"] = incoming.name
        drift = abs(existing.datetime_utc - incoming.datetime_utc)
        if drift <= MATCH_WINDOW:
            update["datetime_utc"] = incoming.datetime_utc

    update["status"] = _pick_status(existing.status, incoming.status)
    update["sources"] = {**existing.sources, provider: True}
    update["updated_at"] = now
    return existing.model_copy(update=update)
