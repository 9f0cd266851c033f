"""Ingestion run models: validation issues, match decisions, batch outcomes."""

from typing import Any

from pydantic import BaseModel, Field

from econcal.models.enums import MatchStatus
from econcal.models.event import EventRecord, FieldDifference


class ValidationIssue(BaseModel):
    """A payload record that failed validation and was excluded."""

    index: int
    name: str = "Unknown"
    errors: list[str] = Field(default_factory=list)


class ValidatedRecord(BaseModel):
    """A payload record that passed validation, with its adapted event."""

    index: int
    raw: dict[str, Any]
    event: EventRecord


class MatchDecision(BaseModel):
    index: int
    record: ValidatedRecord
    status: MatchStatus
    matched_event_id: str | None = None
    matched_event_name: str | None = None
    similarity_score: float | None = None
    differences: dict[str, FieldDifference] = Field(default_factory=dict)
    lookup_error: str | None = None

    @property
    def is_match(self) -> bool:
        return self.status == MatchStatus.MATCHED


class BatchOutcome(BaseModel):
    """Counts returned by one bulk-ingest call; summable across batches."""

    created: int = 0
    merged: int = 0
    skipped: int = 0
    errors: int = 0

    def __add__(self, other: "BatchOutcome") -> "BatchOutcome":
        return BatchOutcome(
            created=self.created + other.created,
            merged=self.merged + other.merged,
            skipped=self.skipped + other.skipped,
            errors=self.errors + other.errors,
        )

    @property
    def total(self) -> int:
        return self.created + self.merged + self.skipped + self.errors


class IngestionReport(BaseModel):
    """Aggregate result of an ingestion run (possibly partial)."""

    outcome: BatchOutcome = Field(default_factory=BatchOutcome)
    submitted: int = 0
    total_batches: int = 0
    batches_completed: int = 0
    cancelled: bool = False
    issues: list[ValidationIssue] = Field(default_factory=list)
    decisions: list[MatchDecision] = Field(default_factory=list)

    @property
    def progress(self) -> float:
        if self.total_batches == 0:
            return 100.0
        return self.batches_completed / self.total_batches * 100

    @property
    def new_count(self) -> int:
        return sum(1 for d in self.decisions if d.status == MatchStatus.NEW)

    @property
    def matched_count(self) -> int:
        return sum(1 for d in self.decisions if d.status == MatchStatus.MATCHED)
