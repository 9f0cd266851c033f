"""Boundary adapter between loosely-shaped source records and event models.

Feeds and uploads spell the same field several ways (``date``/``dateTime``/
``Date``, ``impact``/``strength``, ...). Everything is resolved here so the
store and engines only ever see :class:`EventRecord` / :class:`Event`.
"""

import hashlib
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from econcal.config import UNKNOWN_CURRENCY
from econcal.exceptions import RecordValidationError
from econcal.models.event import Event, EventRecord
from econcal.normalization.names import normalize_name

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("id", "eventId", "event_id"),
    "name": ("name", "Name", "title", "event"),
    "datetime_utc": ("datetimeUtc", "datetime_utc", "date", "dateTime", "Date", "time"),
    "currency": ("currency", "Currency"),
    "impact": ("impact", "Impact", "strength", "Strength"),
    "category": ("category", "Category"),
    "status": ("status",),
    "actual": ("actual", "Actual"),
    "forecast": ("forecast", "Forecast"),
    "previous": ("previous", "Previous"),
    "sources": ("sources",),
    "updated_at": ("updatedAt", "updated_at"),
}

_WIRE_NAMES = {
    "datetime_utc": "datetimeUtc",
    "updated_at": "updatedAt",
}


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 string, epoch milliseconds, or datetime into UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def compute_event_id(currency: str | None, name: str, datetime_utc: datetime) -> str:
    """Stable id from currency, normalized name, and epoch millis."""
    ccy = (currency or UNKNOWN_CURRENCY).upper()
    millis = int(datetime_utc.timestamp() * 1000)
    key = f"{ccy}|{normalize_name(name)}|{millis}"
    return hashlib.sha256(key.encode("utf-8")).hexdigest()[:32]


def coerce_fields(raw: Mapping[str, Any], *, keep_none: bool = False) -> dict[str, Any]:
    """Resolve aliases to model field names, keeping only keys that are present.

    Null values are dropped unless ``keep_none`` is set, which patches use so
    an explicit null clears the stored value.
    """
    fields: dict[str, Any] = {}
    for field, aliases in FIELD_ALIASES.items():
        for alias in aliases:
            if alias in raw and (keep_none or raw[alias] is not None):
                fields[field] = raw[alias]
                break
    if "datetime_utc" in fields:
        parsed = parse_datetime(fields["datetime_utc"])
        if parsed is None:
            raise RecordValidationError(
                "datetime_utc", f"unparseable datetime {fields['datetime_utc']!r}"
            )
        fields["datetime_utc"] = parsed
    if "updated_at" in fields:
        fields["updated_at"] = parse_datetime(fields["updated_at"])
    if "sources" in fields and isinstance(fields["sources"], Mapping):
        fields["sources"] = {str(k): bool(v) for k, v in fields["sources"].items()}
    return fields


def validate_model(model: type[EventRecord], fields: dict[str, Any]) -> Any:
    try:
        return model.model_validate(fields)
    except ValidationError as exc:
        first = exc.errors()[0]
        loc = ".".join(str(part) for part in first.get("loc", ())) or "record"
        raise RecordValidationError(loc, first.get("msg", "invalid value")) from exc


def record_from_mapping(raw: Mapping[str, Any]) -> EventRecord:
    """Adapt an incoming source record (no id required)."""
    if not isinstance(raw, Mapping):
        raise RecordValidationError("record", "Invalid event object")
    fields = coerce_fields(raw)
    fields.pop("id", None)
    fields.pop("updated_at", None)
    return validate_model(EventRecord, fields)


def event_from_mapping(raw: Mapping[str, Any], event_id: str | None = None) -> Event:
    """Adapt a canonical record; derives a stable id when none is given."""
    if not isinstance(raw, Mapping):
        raise RecordValidationError("record", "Invalid event object")
    fields = coerce_fields(raw)
    if event_id is not None:
        fields["id"] = event_id
    if not fields.get("id"):
        if "name" not in fields or "datetime_utc" not in fields:
            missing = "name" if "name" not in fields else "datetime_utc"
            raise RecordValidationError(missing, "Field required")
        fields["id"] = compute_event_id(
            fields.get("currency"), str(fields["name"]), fields["datetime_utc"]
        )
    fields["id"] = str(fields["id"])
    return validate_model(Event, fields)


def event_to_wire(event: EventRecord) -> dict[str, Any]:
    """Serialize to the camelCase JSON shape used by payloads and the backend."""
    data = event.model_dump(mode="json")
    if data.get("datetime_utc"):
        data["datetime_utc"] = event.datetime_utc.strftime("%Y-%m-%dT%H:%M:%SZ")
    return {_WIRE_NAMES.get(key, key): value for key, value in data.items()}
