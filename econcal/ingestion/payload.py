"""Upload payload parsing and per-record validation."""

import json
from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path
from typing import Any, TypeVar

from econcal.exceptions import PayloadFormatError, RecordValidationError
from econcal.models.ingestion import ValidatedRecord, ValidationIssue
from econcal.normalization.records import parse_datetime, record_from_mapping

T = TypeVar("T")


def load_payload(path: Path) -> Any:
    """Read a JSON payload file."""
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return json.loads(path.read_text())


def extract_records(payload: Any) -> list[Any]:
    """Accept a bare array or ``{"events": [...]}``; anything else is rejected."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping) and isinstance(payload.get("events"), list):
        return payload["events"]
    raise PayloadFormatError()


def validate_record(record: Any) -> list[str]:
    """Validation messages for one wire record; empty when it is acceptable."""
    if not isinstance(record, Mapping):
        return ["Invalid event object"]

    errors: list[str] = []
    name = record.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append("Missing event.name")

    when = record.get("datetimeUtc")
    if not isinstance(when, str) or not when.strip():
        errors.append("Missing event.datetimeUtc")
    elif parse_datetime(when) is None:
        errors.append("Invalid event.datetimeUtc")
    return errors


def validate_payload(
    payload: Any,
) -> tuple[list[ValidatedRecord], list[ValidationIssue]]:
    """Split a payload into adapted records and validation issues.

    Raises PayloadFormatError only for a malformed envelope; bad records are
    reported as issues and excluded.
    """
    valid: list[ValidatedRecord] = []
    issues: list[ValidationIssue] = []

    for index, raw in enumerate(extract_records(payload)):
        errors = validate_record(raw)
        if not errors:
            try:
                event = record_from_mapping(raw)
            except RecordValidationError as exc:
                errors = [str(exc)]
            else:
                valid.append(ValidatedRecord(index=index, raw=dict(raw), event=event))
                continue

        name = raw.get("name") if isinstance(raw, Mapping) else None
        issues.append(
            ValidationIssue(
                index=index,
                name=name if isinstance(name, str) and name.strip() else "Unknown",
                errors=errors,
            )
        )
    return valid, issues


def chunk(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Consecutive slices of at most ``size`` items."""
    if size < 1:
        raise ValueError("batch size must be at least 1")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])
