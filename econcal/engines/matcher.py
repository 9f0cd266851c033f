"""Event matching engine: decides whether an incoming record is already known."""

import logging
from collections.abc import Iterable
from datetime import timedelta

from econcal.config import MATCH_WINDOW, SIMILARITY_THRESHOLD
from econcal.engines.similarity import similarity
from econcal.models.event import Event, EventRecord, FieldDifference, MatchCandidate

logger = logging.getLogger(__name__)

COMPARED_FIELDS = (
    "name",
    "currency",
    "datetime_utc",
    "impact",
    "category",
    "actual",
    "forecast",
    "previous",
)


class EventMatcher:
    """Matches incoming records to canonical events by currency, time, and name."""

    def __init__(
        self,
        threshold: float = SIMILARITY_THRESHOLD,
        window: timedelta = MATCH_WINDOW,
    ):
        self.threshold = threshold
        self.window = window

    def in_window(self, incoming: EventRecord, candidate: Event) -> bool:
        """True if the candidate shares the currency and falls inside the time window."""
        if not incoming.currency or candidate.currency != incoming.currency:
            return False
        return abs(candidate.datetime_utc - incoming.datetime_utc) <= self.window

    def find_match(
        self, incoming: EventRecord, candidates: Iterable[Event]
    ) -> MatchCandidate | None:
        """Return the best-scoring candidate at or above the threshold, or None.

        Candidates are scored in ascending id order and only a strictly higher
        score replaces the current best, so equal scores resolve to the
        smallest id regardless of how the candidates were delivered.
        """
        eligible = sorted(
            (c for c in candidates if self.in_window(incoming, c)),
            key=lambda c: c.id,
        )
        best: Event | None = None
        best_score = -1.0
        for candidate in eligible:
            score = similarity(incoming.name, candidate.name)
            if score > best_score:
                best, best_score = candidate, score

        if best is None:
            return None
        if best_score < self.threshold:
            logger.debug(
                "Best candidate %s for %r scored %.2f, below threshold %.2f",
                best.id, incoming.name, best_score, self.threshold,
            )
            return None
        return MatchCandidate(
            incoming_event=incoming,
            matched_event_id=best.id,
            matched_event=best,
            similarity_score=best_score,
        )

    @staticmethod
    def compare_fields(
        incoming: EventRecord, matched: EventRecord
    ) -> dict[str, FieldDifference]:
        """Field-by-field comparison for every field present on either side."""
        differences: dict[str, FieldDifference] = {}
        for field in COMPARED_FIELDS:
            incoming_value = getattr(incoming, field)
            matched_value = getattr(matched, field)
            if incoming_value is None and matched_value is None:
                continue
            differences[field] = FieldDifference(
                incoming_value=incoming_value,
                matched_value=matched_value,
                is_different=incoming_value != matched_value,
            )
        return differences
