"""Matching, merge, and timing engines."""

from econcal.engines.matcher import EventMatcher
from econcal.engines.merge import has_preferred_source, merge_provider_event
from econcal.engines.similarity import jaccard, similarity
from econcal.engines.time_state import classify_event_time, compute_now_next_state

__all__ = [
    "EventMatcher",
    "classify_event_time",
    "compute_now_next_state",
    "has_preferred_source",
    "jaccard",
    "merge_provider_event",
    "similarity",
]
