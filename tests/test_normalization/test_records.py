"""Tests for the record adapter at the ingestion boundary."""

from datetime import datetime, timezone

import pytest

from econcal.exceptions import RecordValidationError
from econcal.models.enums import EventStatus, ImpactTier
from econcal.normalization.records import (
    coerce_fields,
    compute_event_id,
    event_from_mapping,
    event_to_wire,
    parse_datetime,
    record_from_mapping,
)


class TestParseDatetime:
    def test_iso_with_z(self):
        assert parse_datetime("2026-01-10T13:30:00Z") == datetime(
            2026, 1, 10, 13, 30, tzinfo=timezone.utc
        )

    def test_offset_converted_to_utc(self):
        assert parse_datetime("2026-01-10T08:30:00-05:00") == datetime(
            2026, 1, 10, 13, 30, tzinfo=timezone.utc
        )

    def test_naive_is_utc(self):
        assert parse_datetime("2026-01-10T13:30:00").tzinfo == timezone.utc

    def test_epoch_millis(self):
        assert parse_datetime(1768051800000) == datetime(2026, 1, 10, 13, 30, tzinfo=timezone.utc)

    def test_garbage(self):
        assert parse_datetime("next tuesday") is None
        assert parse_datetime("") is None
        assert parse_datetime(None) is None


class TestCoerceFields:
    def test_historical_aliases(self):
        fields = coerce_fields(
            {"Name": "GDP q/q", "Date": "2026-01-10T13:30:00Z", "Currency": "gbp", "Strength": "Weak Data"}
        )
        assert fields["name"] == "GDP q/q"
        assert fields["currency"] == "gbp"
        assert fields["impact"] == "Weak Data"
        assert fields["datetime_utc"].hour == 13

    def test_first_alias_wins(self):
        fields = coerce_fields(
            {"name": "A", "datetimeUtc": "2026-01-10T13:30:00Z", "date": "2020-01-01T00:00:00Z"}
        )
        assert fields["datetime_utc"].year == 2026

    def test_unparseable_datetime_raises(self):
        with pytest.raises(RecordValidationError) as exc:
            coerce_fields({"name": "A", "datetimeUtc": "soon"})
        assert exc.value.field == "datetime_utc"

    def test_sources_coerced_to_flags(self):
        fields = coerce_fields({"sources": {"gpt": {"uploadedAt": "x"}, "nfs": False}})
        assert fields["sources"] == {"gpt": True, "nfs": False}


class TestRecordFromMapping:
    def test_wire_record(self):
        record = record_from_mapping(
            {
                "name": " CPI y/y ",
                "datetimeUtc": "2026-01-10T13:30:00Z",
                "currency": "usd",
                "impact": "high",
                "actual": 3.1,
                "forecast": "-",
                "previous": "",
            }
        )
        assert record.name == "CPI y/y"
        assert record.currency == "USD"
        assert record.impact == ImpactTier.HIGH
        assert record.actual == "3.1"
        assert record.forecast is None
        assert record.previous is None
        assert record.status == EventStatus.SCHEDULED

    def test_missing_impact_is_unresolved(self):
        record = record_from_mapping({"name": "A", "datetimeUtc": "2026-01-10T13:30:00Z"})
        assert record.impact == ImpactTier.UNRESOLVED
        assert record.currency is None

    def test_missing_name_raises(self):
        with pytest.raises(RecordValidationError):
            record_from_mapping({"datetimeUtc": "2026-01-10T13:30:00Z"})

    def test_blank_name_raises(self):
        with pytest.raises(RecordValidationError):
            record_from_mapping({"name": "  ", "datetimeUtc": "2026-01-10T13:30:00Z"})

    def test_not_a_mapping(self):
        with pytest.raises(RecordValidationError):
            record_from_mapping(["not", "a", "record"])


class TestEventFromMapping:
    def test_keeps_given_id(self):
        event = event_from_mapping(
            {"id": "abc", "name": "A", "datetimeUtc": "2026-01-10T13:30:00Z"}
        )
        assert event.id == "abc"

    def test_event_id_alias(self):
        event = event_from_mapping(
            {"eventId": 42, "name": "A", "datetimeUtc": "2026-01-10T13:30:00Z"}
        )
        assert event.id == "42"

    def test_derives_stable_id(self):
        raw = {"name": "Non-Farm Payrolls", "datetimeUtc": "2026-01-09T13:30:00Z", "currency": "USD"}
        assert event_from_mapping(raw).id == event_from_mapping(dict(raw)).id

    def test_missing_datetime_without_id(self):
        with pytest.raises(RecordValidationError) as exc:
            event_from_mapping({"name": "A"})
        assert exc.value.field == "datetime_utc"


class TestComputeEventId:
    def test_same_event_spelled_differently(self):
        when = datetime(2026, 1, 9, 13, 30, tzinfo=timezone.utc)
        assert compute_event_id("usd", "Non-Farm Payrolls", when) == compute_event_id(
            "USD", "nonfarm  payrolls", when
        )

    def test_length_and_hex(self):
        event_id = compute_event_id(None, "Bank Holiday", datetime(2026, 1, 12, tzinfo=timezone.utc))
        assert len(event_id) == 32
        int(event_id, 16)

    def test_time_distinguishes(self):
        a = compute_event_id("USD", "CPI", datetime(2026, 1, 10, 13, 30, tzinfo=timezone.utc))
        b = compute_event_id("USD", "CPI", datetime(2026, 2, 10, 13, 30, tzinfo=timezone.utc))
        assert a != b


class TestEventToWire:
    def test_camel_case_keys(self, cpi_event):
        wire = event_to_wire(cpi_event)
        assert wire["datetimeUtc"] == "2026-01-10T13:30:00Z"
        assert wire["id"] == "evt-cpi"
        assert wire["impact"] == "High"
        assert "datetime_utc" not in wire

    def test_wire_reads_back(self, nfp_event):
        assert event_from_mapping(event_to_wire(nfp_event)) == nfp_event
