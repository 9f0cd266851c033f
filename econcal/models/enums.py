"""Enumerations for econcal."""

from enum import StrEnum


class ImpactTier(StrEnum):
    HIGH = "High"
    MODERATE = "Moderate"
    LOW = "Low"
    NON_ECONOMIC = "Non-Economic"
    MY_EVENTS = "My-Events"
    UNRESOLVED = "Unresolved"


class EventStatus(StrEnum):
    SCHEDULED = "scheduled"
    RELEASED = "released"
    REVISED = "revised"
    CANCELLED = "cancelled"


class MatchStatus(StrEnum):
    NEW = "new"
    MATCHED = "matched"


class EventTimeState(StrEnum):
    NOW = "NOW"
    NEXT = "NEXT"
    UPCOMING = "UPCOMING"
    PAST = "PAST"
