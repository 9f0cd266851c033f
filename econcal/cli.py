"""Typer CLI interface for econcal."""

import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from econcal.config import get_settings
from econcal.engines.matcher import EventMatcher
from econcal.engines.time_state import classify_event_time, compute_now_next_state
from econcal.exceptions import EconCalError, SubmissionError
from econcal.ingestion.http import HttpPersistenceClient
from econcal.ingestion.memory import InMemoryPersistenceClient
from econcal.ingestion.payload import extract_records, load_payload, validate_payload
from econcal.ingestion.pipeline import IngestionPipeline
from econcal.log import setup_logging
from econcal.models.event import Event
from econcal.models.ingestion import IngestionReport, ValidationIssue
from econcal.normalization.records import event_from_mapping, parse_datetime
from econcal.store.event_store import CanonicalEventStore

app = typer.Typer(
    name="econcal",
    help="econcal: canonical economic-calendar events, deduplication and queries.",
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """econcal: canonical economic-calendar events, deduplication and queries."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _read_json(path: Path) -> Any:
    try:
        return load_payload(path)
    except FileNotFoundError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)
    except json.JSONDecodeError as exc:
        typer.echo(f"Error: Invalid JSON in {path.name}: {exc}", err=True)
        raise typer.Exit(1)


def _load_canonical(path: Path) -> list[Event]:
    """Load a canonical event file (array or {"events": [...]})."""
    payload = _read_json(path)
    try:
        return [event_from_mapping(raw) for raw in extract_records(payload)]
    except EconCalError as exc:
        typer.echo(f"Error: {path.name}: {exc}", err=True)
        raise typer.Exit(1)


def _parse_when(value: str | None, option: str) -> datetime | None:
    if value is None:
        return None
    parsed = parse_datetime(value)
    if parsed is None:
        typer.echo(f"Error: {option} must be an ISO-8601 date or timestamp, got {value!r}", err=True)
        raise typer.Exit(1)
    return parsed


def _fmt_time(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M")


def _print_issues(issues: list[ValidationIssue], console: Console) -> None:
    tbl = Table(title="Validation Issues", show_header=True)
    tbl.add_column("#", justify="right")
    tbl.add_column("Name")
    tbl.add_column("Errors")
    for issue in issues:
        tbl.add_row(str(issue.index), issue.name, "; ".join(issue.errors))
    console.print(tbl)


def _print_decisions(report: IngestionReport, console: Console) -> None:
    tbl = Table(title="Match Results", show_header=True)
    tbl.add_column("#", justify="right")
    tbl.add_column("Event")
    tbl.add_column("Currency")
    tbl.add_column("Status")
    tbl.add_column("Matched")
    tbl.add_column("Score", justify="right")
    for decision in report.decisions:
        event = decision.record.event
        score = "" if decision.similarity_score is None else f"{decision.similarity_score:.2f}"
        tbl.add_row(
            str(decision.index),
            event.name,
            event.currency or "",
            str(decision.status),
            decision.matched_event_name or "",
            score,
        )
    console.print(tbl)


def _print_events(events: list[Event], console: Console, title: str, states: dict[str, str] | None = None) -> None:
    tbl = Table(title=title, show_header=True)
    tbl.add_column("Time (UTC)")
    tbl.add_column("Currency")
    tbl.add_column("Impact")
    tbl.add_column("Event")
    tbl.add_column("Actual", justify="right")
    tbl.add_column("Forecast", justify="right")
    tbl.add_column("Previous", justify="right")
    if states is not None:
        tbl.add_column("State")
    for event in events:
        row = [
            _fmt_time(event.datetime_utc),
            event.currency or "",
            str(event.impact),
            event.name,
            event.actual or "",
            event.forecast or "",
            event.previous or "",
        ]
        if states is not None:
            row.append(states[event.id])
        tbl.add_row(*row)
    console.print(tbl)


@app.command()
def validate(
    file: Path = typer.Argument(..., help="Upload payload (JSON array or {\"events\": [...]})"),
) -> None:
    """Validate an upload payload without contacting any backend."""
    payload = _read_json(file)
    try:
        valid, issues = validate_payload(payload)
    except EconCalError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    if issues:
        _print_issues(issues, Console())
    typer.echo(f"{len(valid)} valid, {len(issues)} invalid")
    if issues:
        raise typer.Exit(1)


@app.command()
def ingest(
    file: Path = typer.Argument(..., help="Upload payload (JSON array or {\"events\": [...]})"),
    canonical: Path | None = typer.Option(
        None,
        "--canonical",
        "-c",
        help="Canonical event file to match against (in-memory backend)",
    ),
    server: str | None = typer.Option(
        None,
        "--server",
        help="Base URL of a persistence service (defaults to ECONCAL_PERSISTENCE_BASE_URL)",
    ),
    batch_size: int | None = typer.Option(
        None,
        "--batch-size",
        "-b",
        min=1,
        help="Maximum events per bulk-ingest call",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Validate and match only; submit nothing"),
    save: bool = typer.Option(
        False,
        "--save",
        help="Write the merged canonical set back to the --canonical file",
    ),
) -> None:
    """Match an upload against the canonical set and submit it in batches."""
    settings = get_settings()
    server = server or settings.persistence_base_url
    if server and canonical is not None:
        typer.echo("Error: use either --server or --canonical, not both", err=True)
        raise typer.Exit(1)
    if save and canonical is None:
        typer.echo("Error: --save requires --canonical", err=True)
        raise typer.Exit(1)

    payload = _read_json(file)
    matcher = EventMatcher(settings.similarity_threshold, settings.match_window)

    if server:
        client = HttpPersistenceClient(
            server,
            token=settings.persistence_token,
            timeout=settings.persistence_timeout_seconds,
        )
    else:
        existing = _load_canonical(canonical) if canonical is not None else []
        client = InMemoryPersistenceClient(existing, provider=settings.upload_source, matcher=matcher)

    pipeline = IngestionPipeline(
        client, matcher, max_batch_size=batch_size or settings.max_batch_size
    )
    console = Console()

    def on_progress(report: IngestionReport) -> None:
        typer.echo(
            f"Batch {report.batches_completed}/{report.total_batches} "
            f"({report.progress:.0f}%)"
        )

    try:
        report = asyncio.run(pipeline.run(payload, on_progress=on_progress, dry_run=dry_run))
    except SubmissionError as exc:
        partial = exc.report.outcome
        typer.echo(f"Error: {exc}", err=True)
        typer.echo(
            f"Partial: created={partial.created} merged={partial.merged} "
            f"skipped={partial.skipped} errors={partial.errors}",
            err=True,
        )
        raise typer.Exit(1)
    except EconCalError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    if report.issues:
        _print_issues(report.issues, console)
    if report.decisions:
        _print_decisions(report, console)
    typer.echo(f"Matched: {report.matched_count}, New: {report.new_count}, Invalid: {len(report.issues)}")

    if dry_run:
        typer.echo("Dry run: nothing submitted.")
        return

    outcome = report.outcome
    typer.echo(
        f"Created: {outcome.created}, Merged: {outcome.merged}, "
        f"Skipped: {outcome.skipped}, Errors: {outcome.errors}"
    )

    if save and isinstance(client, InMemoryPersistenceClient):
        canonical.write_text(json.dumps(client.dump(), indent=2) + "\n")
        typer.echo(f"Saved {len(client.events)} canonical event(s) to {canonical}")


@app.command()
def query(
    canonical: Path = typer.Argument(..., help="Canonical event file"),
    start: str | None = typer.Option(None, "--start", "-s", help="First UTC date (inclusive)"),
    end: str | None = typer.Option(None, "--end", "-e", help="Last UTC date (inclusive)"),
    impact: list[str] | None = typer.Option(
        None, "--impact", "-i", help="Impact tier filter (repeatable)"
    ),
    currency: list[str] | None = typer.Option(
        None, "--currency", "-C", help="Currency filter (repeatable)"
    ),
    timezone_name: str | None = typer.Option(
        None, "--timezone", "-z", help="Display timezone name (resets the query cache on change)"
    ),
) -> None:
    """Load a canonical event file into a store and run a date-range query."""
    start_dt = _parse_when(start, "--start")
    end_dt = _parse_when(end, "--end")
    events = _load_canonical(canonical)

    store = CanonicalEventStore(cache_ttl_seconds=get_settings().query_cache_ttl_seconds)
    store.init(events, source=canonical.stem, timezone_name=timezone_name)
    ids = store.query_by_date_range(start_dt, end_dt, impacts=impact, currencies=currency)

    results = store.get_events_by_ids(ids)
    results.sort(key=lambda e: (e.datetime_utc, e.id))
    _print_events(results, Console(), title="Events")
    typer.echo(f"{len(results)} of {len(store)} event(s)")


@app.command()
def status(
    canonical: Path = typer.Argument(..., help="Canonical event file"),
    at: str | None = typer.Option(None, "--at", help="Reference instant (ISO-8601, default now)"),
) -> None:
    """Classify each event as NOW, NEXT, UPCOMING, or PAST."""
    now = _parse_when(at, "--at") or datetime.now(timezone.utc)
    events = sorted(_load_canonical(canonical), key=lambda e: (e.datetime_utc, e.id))

    state = compute_now_next_state(events, now)
    states = {
        event.id: str(classify_event_time(event.datetime_utc, now, state.next_time))
        for event in events
    }
    _print_events(events, Console(), title=f"Events at {_fmt_time(now)} UTC", states=states)
    typer.echo(f"NOW: {len(state.now_ids)}, NEXT: {len(state.next_ids)}")
