"""Data models for econcal."""

from econcal.models.enums import EventStatus, EventTimeState, ImpactTier, MatchStatus
from econcal.models.event import (
    Event,
    EventRecord,
    FieldDifference,
    MatchCandidate,
    resolve_impact,
    resolve_status,
)
from econcal.models.ingestion import (
    BatchOutcome,
    IngestionReport,
    MatchDecision,
    ValidatedRecord,
    ValidationIssue,
)

__all__ = [
    "BatchOutcome",
    "Event",
    "EventRecord",
    "EventStatus",
    "EventTimeState",
    "FieldDifference",
    "ImpactTier",
    "IngestionReport",
    "MatchCandidate",
    "MatchDecision",
    "MatchStatus",
    "ValidatedRecord",
    "ValidationIssue",
    "resolve_impact",
    "resolve_status",
]
