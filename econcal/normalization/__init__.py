"""Normalization layer: event names and source record adaptation."""

from econcal.normalization.names import normalize_name, tokenize
from econcal.normalization.records import (
    compute_event_id,
    event_from_mapping,
    event_to_wire,
    parse_datetime,
    record_from_mapping,
)

__all__ = [
    "compute_event_id",
    "event_from_mapping",
    "event_to_wire",
    "normalize_name",
    "parse_datetime",
    "record_from_mapping",
    "tokenize",
]
