"""Shared test fixtures for econcal."""

from datetime import datetime, timezone

import pytest

from econcal.models.enums import ImpactTier
from econcal.models.event import Event, EventRecord

NFP_TIME = datetime(2026, 1, 9, 13, 30, tzinfo=timezone.utc)
CPI_TIME = datetime(2026, 1, 10, 13, 30, tzinfo=timezone.utc)


class FakeClock:
    """Monotonic clock stand-in that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def nfp_event() -> Event:
    return Event(
        id="evt-nfp",
        name="Non-Farm Payrolls",
        currency="USD",
        datetime_utc=NFP_TIME,
        impact=ImpactTier.HIGH,
        forecast="180K",
        previous="227K",
        sources={"jblanked-ff": True},
    )


@pytest.fixture
def cpi_event() -> Event:
    return Event(
        id="evt-cpi",
        name="CPI y/y",
        currency="USD",
        datetime_utc=CPI_TIME,
        impact=ImpactTier.HIGH,
        forecast="2.9%",
        sources={"gpt": True},
    )


@pytest.fixture
def ecb_event() -> Event:
    return Event(
        id="evt-ecb",
        name="ECB Main Refinancing Rate",
        currency="EUR",
        datetime_utc=datetime(2026, 1, 10, 12, 45, tzinfo=timezone.utc),
        impact=ImpactTier.MODERATE,
    )


@pytest.fixture
def holiday_event() -> Event:
    return Event(
        id="evt-holiday",
        name="Bank Holiday",
        datetime_utc=datetime(2026, 1, 12, 0, 0, tzinfo=timezone.utc),
        impact=ImpactTier.NON_ECONOMIC,
    )


@pytest.fixture
def sample_events(nfp_event, cpi_event, ecb_event, holiday_event) -> list[Event]:
    return [nfp_event, cpi_event, ecb_event, holiday_event]


@pytest.fixture
def nfp_record() -> EventRecord:
    return EventRecord(
        name="Nonfarm Payrolls",
        currency="usd",
        datetime_utc=datetime(2026, 1, 9, 13, 32, tzinfo=timezone.utc),
        impact="Strong Data",
        actual="256K",
    )


@pytest.fixture
def cpi_payload() -> list[dict]:
    return [{"name": "CPI y/y", "datetimeUtc": "2026-01-10T13:30:00Z", "currency": "USD"}]
