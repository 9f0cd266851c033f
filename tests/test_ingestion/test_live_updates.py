"""Tests for applying live-update notifications to the store."""

import asyncio

from econcal.ingestion.live import consume_live_updates
from econcal.store.event_store import CanonicalEventStore


async def _stream(items):
    for item in items:
        await asyncio.sleep(0)
        yield item


class TestConsumeLiveUpdates:
    def setup_method(self):
        self.store = CanonicalEventStore()

    def test_patches_and_inserts(self, cpi_event):
        self.store.add_events([cpi_event])
        updates = [
            ("evt-cpi", {"actual": "3.1%", "status": "released"}),
            ("evt-new", {"name": "Core PCE m/m", "datetimeUtc": "2026-01-30T13:30:00Z", "currency": "USD"}),
        ]
        applied = asyncio.run(consume_live_updates(self.store, _stream(updates)))
        assert applied == 2
        assert self.store.get_event_by_id("evt-cpi").actual == "3.1%"
        assert "evt-new" in self.store

    def test_invalid_patch_skipped(self, caplog):
        updates = [
            ("orphan", {"actual": "1.0"}),
            ("ok", {"name": "GDP q/q", "datetimeUtc": "2026-01-10T07:00:00Z"}),
        ]
        applied = asyncio.run(consume_live_updates(self.store, _stream(updates)))
        assert applied == 1
        assert self.store.event_ids == ["ok"]
        assert "Skipping live update for orphan" in caplog.text

    def test_update_invalidates_cached_queries(self, cpi_event):
        self.store.add_events([cpi_event])
        before = self.store.query_by_date_range(impacts=["High"])
        asyncio.run(consume_live_updates(self.store, _stream([("evt-cpi", {"impact": "Low"})])))
        assert before == ["evt-cpi"]
        assert self.store.query_by_date_range(impacts=["High"]) == []
