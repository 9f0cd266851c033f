"""Tests for ingestion result models."""

from econcal.models.ingestion import BatchOutcome, IngestionReport


class TestBatchOutcome:
    def test_sum(self):
        total = BatchOutcome(created=2, merged=1) + BatchOutcome(created=1, skipped=3, errors=1)
        assert total == BatchOutcome(created=3, merged=1, skipped=3, errors=1)
        assert total.total == 8

    def test_sum_with_empty(self):
        assert BatchOutcome() + BatchOutcome(merged=4) == BatchOutcome(merged=4)


class TestIngestionReport:
    def test_progress(self):
        report = IngestionReport(total_batches=4, batches_completed=1)
        assert report.progress == 25.0

    def test_progress_with_nothing_to_send(self):
        assert IngestionReport().progress == 100.0

    def test_counts_default_to_zero(self):
        report = IngestionReport()
        assert report.new_count == 0
        assert report.matched_count == 0
        assert report.outcome.total == 0
