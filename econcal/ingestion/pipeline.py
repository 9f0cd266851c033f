"""Upload pipeline: validate -> match -> select -> submit -> report."""

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import Any

from econcal.config import MAX_BATCH_SIZE
from econcal.engines.matcher import EventMatcher
from econcal.exceptions import SubmissionError
from econcal.ingestion.base import PersistenceClient
from econcal.ingestion.payload import chunk, validate_payload
from econcal.models.enums import MatchStatus
from econcal.models.ingestion import (
    IngestionReport,
    MatchDecision,
    ValidatedRecord,
    ValidationIssue,
)

logger = logging.getLogger(__name__)

Selection = Iterable[int] | Callable[[MatchDecision], bool] | None
ProgressCallback = Callable[[IngestionReport], None]


class IngestionPipeline:
    """Drives one upload against a persistence service.

    Remote calls are awaited one at a time. The local store is never touched;
    accepted records reach it later through live updates.
    """

    def __init__(
        self,
        client: PersistenceClient,
        matcher: EventMatcher | None = None,
        *,
        max_batch_size: int = MAX_BATCH_SIZE,
    ):
        if max_batch_size < 1:
            raise ValueError("max_batch_size must be at least 1")
        self.client = client
        self.matcher = matcher or EventMatcher()
        self.max_batch_size = max_batch_size

    def validate(self, payload: Any) -> tuple[list[ValidatedRecord], list[ValidationIssue]]:
        valid, issues = validate_payload(payload)
        if issues:
            logger.info("%d of %d record(s) failed validation", len(issues), len(valid) + len(issues))
        return valid, issues

    async def match(self, records: Iterable[ValidatedRecord]) -> list[MatchDecision]:
        """Classify each record as new or matched against the canonical set."""
        decisions = []
        for record in records:
            decisions.append(await self._match_one(record))
        return decisions

    async def _match_one(self, record: ValidatedRecord) -> MatchDecision:
        event = record.event
        if not event.currency:
            return MatchDecision(index=record.index, record=record, status=MatchStatus.NEW)

        lookup = await self.client.lookup_candidates(
            event.currency,
            event.datetime_utc - self.matcher.window,
            event.datetime_utc + self.matcher.window,
        )
        if not lookup.ok:
            logger.warning("Treating %r as new: %s", event.name, lookup.error)
            return MatchDecision(
                index=record.index,
                record=record,
                status=MatchStatus.NEW,
                lookup_error=str(lookup.error),
            )

        match = self.matcher.find_match(event, lookup.candidates)
        if match is None:
            return MatchDecision(index=record.index, record=record, status=MatchStatus.NEW)

        return MatchDecision(
            index=record.index,
            record=record,
            status=MatchStatus.MATCHED,
            matched_event_id=match.matched_event_id,
            matched_event_name=match.matched_event.name,
            similarity_score=match.similarity_score,
            differences=self.matcher.compare_fields(event, match.matched_event),
        )

    @staticmethod
    def select(
        decisions: Iterable[MatchDecision], selection: Selection = None
    ) -> list[ValidatedRecord]:
        """Records chosen for submission, by payload index or predicate."""
        decisions = list(decisions)
        if selection is None:
            return [d.record for d in decisions]
        if callable(selection):
            return [d.record for d in decisions if selection(d)]
        wanted = set(selection)
        return [d.record for d in decisions if d.index in wanted]

    async def submit(
        self,
        records: Iterable[ValidatedRecord],
        *,
        on_progress: ProgressCallback | None = None,
        cancel: asyncio.Event | None = None,
        report: IngestionReport | None = None,
    ) -> IngestionReport:
        """Send records in batches, in order, summing the returned counts.

        Cancellation is checked before each batch. A failed batch raises
        SubmissionError carrying the counts of the batches that succeeded.
        """
        batches = list(chunk([r.raw for r in records], self.max_batch_size))
        if report is None:
            report = IngestionReport()
        report.total_batches = len(batches)

        for batch_index, batch in enumerate(batches):
            if cancel is not None and cancel.is_set():
                report.cancelled = True
                logger.info(
                    "Ingestion cancelled after %d of %d batch(es)",
                    report.batches_completed, report.total_batches,
                )
                break
            try:
                outcome = await self.client.ingest_batch(batch)
            except Exception as exc:
                logger.error("Batch %d of %d failed: %s", batch_index + 1, len(batches), exc)
                raise SubmissionError(batch_index, exc, report) from exc

            report.outcome = report.outcome + outcome
            report.submitted += len(batch)
            report.batches_completed += 1
            logger.debug(
                "Batch %d/%d done (%.0f%%)", batch_index + 1, len(batches), report.progress
            )
            if on_progress is not None:
                on_progress(report)

        return report

    async def run(
        self,
        payload: Any,
        *,
        select: Selection = None,
        on_progress: ProgressCallback | None = None,
        cancel: asyncio.Event | None = None,
        dry_run: bool = False,
    ) -> IngestionReport:
        valid, issues = self.validate(payload)
        decisions = await self.match(valid)
        report = IngestionReport(issues=issues, decisions=decisions)
        if dry_run:
            return report

        chosen = self.select(decisions, select)
        report = await self.submit(chosen, on_progress=on_progress, cancel=cancel, report=report)
        logger.info(
            "Ingestion finished: created=%d merged=%d skipped=%d errors=%d",
            report.outcome.created, report.outcome.merged,
            report.outcome.skipped, report.outcome.errors,
        )
        return report
