"""NOW/NEXT/PAST classification of events relative to a timestamp.

All comparisons use absolute instants; timezones only matter for display.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from econcal.config import NOW_WINDOW
from econcal.models.enums import EventTimeState
from econcal.models.event import Event


def is_now(event_time: datetime, now: datetime, now_window: timedelta = NOW_WINDOW) -> bool:
    """True from the release instant until the NOW window has elapsed."""
    return event_time <= now and now - event_time < now_window


def classify_event_time(
    event_time: datetime,
    now: datetime,
    next_time: datetime | None = None,
    now_window: timedelta = NOW_WINDOW,
) -> EventTimeState:
    """Classify one event instant.

    ``next_time`` is the earliest future release instant across the set being
    displayed; an event at exactly that instant is NEXT, later ones UPCOMING.
    Without ``next_time`` every future event is NEXT, so callers classifying a
    set should pass ``compute_now_next_state(...).next_time``.
    """
    if is_now(event_time, now, now_window):
        return EventTimeState.NOW
    if event_time > now:
        if next_time is None or event_time == next_time:
            return EventTimeState.NEXT
        return EventTimeState.UPCOMING
    return EventTimeState.PAST


@dataclass
class NowNextState:
    now_ids: set[str] = field(default_factory=set)
    next_ids: set[str] = field(default_factory=set)
    next_time: datetime | None = None

    def state_of(self, event_id: str) -> EventTimeState | None:
        if event_id in self.now_ids:
            return EventTimeState.NOW
        if event_id in self.next_ids:
            return EventTimeState.NEXT
        return None


def compute_now_next_state(
    events: Iterable[Event], now: datetime, now_window: timedelta = NOW_WINDOW
) -> NowNextState:
    """NOW events plus the earliest upcoming event(s); simultaneous releases share NEXT."""
    state = NowNextState()
    for event in events:
        if is_now(event.datetime_utc, now, now_window):
            state.now_ids.add(event.id)
            continue
        if event.datetime_utc <= now:
            continue
        if state.next_time is None or event.datetime_utc < state.next_time:
            state.next_time = event.datetime_utc
            state.next_ids = {event.id}
        elif event.datetime_utc == state.next_time:
            state.next_ids.add(event.id)
    return state
