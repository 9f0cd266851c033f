"""Tests for NOW/NEXT/PAST classification."""

from datetime import datetime, timedelta, timezone

from econcal.engines.time_state import classify_event_time, compute_now_next_state, is_now
from econcal.models.enums import EventTimeState
from econcal.models.event import Event

NOW = datetime(2026, 1, 9, 13, 35, tzinfo=timezone.utc)


def _event(event_id: str, minutes: float) -> Event:
    return Event(id=event_id, name=event_id, datetime_utc=NOW + timedelta(minutes=minutes))


class TestIsNow:
    def test_release_instant_is_now(self):
        assert is_now(NOW, NOW)

    def test_within_window(self):
        assert is_now(NOW - timedelta(minutes=8, seconds=59), NOW)

    def test_window_elapsed(self):
        assert not is_now(NOW - timedelta(minutes=9), NOW)

    def test_future_is_not_now(self):
        assert not is_now(NOW + timedelta(seconds=1), NOW)


class TestClassifyEventTime:
    def test_past(self):
        assert classify_event_time(NOW - timedelta(hours=1), NOW) == EventTimeState.PAST

    def test_now(self):
        assert classify_event_time(NOW - timedelta(minutes=5), NOW) == EventTimeState.NOW

    def test_next_and_upcoming(self):
        next_time = NOW + timedelta(minutes=10)
        assert classify_event_time(next_time, NOW, next_time) == EventTimeState.NEXT
        assert classify_event_time(NOW + timedelta(hours=1), NOW, next_time) == EventTimeState.UPCOMING

    def test_without_next_time_every_future_event_is_next(self):
        assert classify_event_time(NOW + timedelta(minutes=10), NOW) == EventTimeState.NEXT
        assert classify_event_time(NOW + timedelta(days=3), NOW) == EventTimeState.NEXT

    def test_next_time_from_state_limits_next(self):
        events = [_event("soon", 10), _event("later", 60)]
        next_time = compute_now_next_state(events, NOW).next_time
        states = [classify_event_time(e.datetime_utc, NOW, next_time) for e in events]
        assert states == [EventTimeState.NEXT, EventTimeState.UPCOMING]

    def test_custom_window(self):
        state = classify_event_time(NOW - timedelta(minutes=5), NOW, now_window=timedelta(minutes=2))
        assert state == EventTimeState.PAST


class TestComputeNowNextState:
    def test_simultaneous_releases_share_next(self):
        events = [_event("a", -5), _event("b", 10), _event("c", 10), _event("d", 60), _event("e", -60)]
        state = compute_now_next_state(events, NOW)
        assert state.now_ids == {"a"}
        assert state.next_ids == {"b", "c"}
        assert state.next_time == NOW + timedelta(minutes=10)
        assert state.state_of("b") == EventTimeState.NEXT
        assert state.state_of("d") is None

    def test_earlier_event_replaces_next(self):
        state = compute_now_next_state([_event("late", 30), _event("soon", 5)], NOW)
        assert state.next_ids == {"soon"}

    def test_nothing_upcoming(self):
        state = compute_now_next_state([_event("old", -120)], NOW)
        assert state.next_time is None
        assert not state.now_ids
