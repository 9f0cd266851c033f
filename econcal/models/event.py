"""Canonical event, match candidate, and field difference models."""

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, field_validator

from econcal.models.enums import EventStatus, ImpactTier

# Checked in order; the first rule whose needles appear in the text wins.
_IMPACT_RULES: list[tuple[ImpactTier, tuple[str, ...]]] = [
    (ImpactTier.MY_EVENTS, ("my-events", "my events", "custom")),
    (ImpactTier.NON_ECONOMIC, ("non-economic", "non economic", "holiday")),
    (ImpactTier.HIGH, ("strong", "high")),
    (ImpactTier.MODERATE, ("moderate", "medium")),
    (ImpactTier.LOW, ("weak", "low")),
]

_EMPTY_METRICS = {"", "-"}


def resolve_impact(value: Any) -> ImpactTier:
    """Map free-text impact/strength labels onto the fixed tier vocabulary."""
    if isinstance(value, ImpactTier):
        return value
    text = str(value or "").strip().lower()
    if not text:
        return ImpactTier.UNRESOLVED
    for tier in ImpactTier:
        if text == tier.value.lower():
            return tier
    if text == "none":
        return ImpactTier.NON_ECONOMIC
    for tier, needles in _IMPACT_RULES:
        if any(needle in text for needle in needles):
            return tier
    return ImpactTier.UNRESOLVED


def resolve_status(value: Any) -> EventStatus:
    """Known status labels map to themselves; anything else is treated as scheduled."""
    if isinstance(value, EventStatus):
        return value
    text = str(value or "").strip().lower()
    for status in EventStatus:
        if text == status.value:
            return status
    return EventStatus.SCHEDULED


class EventRecord(BaseModel):
    """An event as described by a source, before the store assigns it an id."""

    name: str
    currency: str | None = None
    datetime_utc: datetime
    impact: ImpactTier = ImpactTier.UNRESOLVED
    category: str | None = None
    status: EventStatus = EventStatus.SCHEDULED
    actual: str | None = None
    forecast: str | None = None
    previous: str | None = None
    sources: dict[str, bool] = Field(default_factory=dict)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            if not value:
                raise ValueError("name must not be empty")
        return value

    @field_validator("currency", mode="before")
    @classmethod
    def _upper_currency(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip().upper()
        return text or None

    @field_validator("datetime_utc")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @field_validator("impact", mode="before")
    @classmethod
    def _resolve_impact(cls, value: Any) -> ImpactTier:
        return resolve_impact(value)

    @field_validator("status", mode="before")
    @classmethod
    def _resolve_status(cls, value: Any) -> EventStatus:
        return resolve_status(value)

    @field_validator("sources", mode="before")
    @classmethod
    def _source_flags(cls, value: Any) -> dict[str, bool]:
        if not isinstance(value, Mapping):
            return {}
        return {str(k): bool(v) for k, v in value.items()}

    @field_validator("actual", "forecast", "previous", "category", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return None if text in _EMPTY_METRICS else text

    @property
    def date_key(self) -> str:
        """UTC calendar date, YYYY-MM-DD."""
        return self.datetime_utc.date().isoformat()


class Event(EventRecord):
    """The canonical record for one real-world scheduled release."""

    id: str = Field(min_length=1)
    updated_at: datetime | None = None


class MatchCandidate(BaseModel):
    incoming_event: EventRecord
    matched_event_id: str
    matched_event: Event
    similarity_score: float = Field(ge=0, le=1)


class FieldDifference(BaseModel):
    incoming_value: Any = None
    matched_value: Any = None
    is_different: bool
