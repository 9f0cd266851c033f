"""HTTP client for a remote persistence service."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import httpx

from econcal.config import Settings
from econcal.exceptions import PersistenceServiceError
from econcal.ingestion.base import PersistenceClient
from econcal.models.event import Event
from econcal.models.ingestion import BatchOutcome
from econcal.normalization.records import event_from_mapping


def _iso(value: datetime) -> str:
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


class HttpPersistenceClient(PersistenceClient):
    """Talks to ``/events/candidates``, ``/events/{id}`` and ``/events/ingest``."""

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._headers = {"Accept": "application/json"}
        if token:
            self._headers["Authorization"] = f"Bearer {token}"
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> HttpPersistenceClient:
        if not settings.persistence_base_url:
            raise ValueError("ECONCAL_PERSISTENCE_BASE_URL is not set")
        return cls(
            settings.persistence_base_url,
            token=settings.persistence_token,
            timeout=settings.persistence_timeout_seconds,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers,
            timeout=self.timeout,
            transport=self._transport,
        )

    @staticmethod
    def _raise_for_status(resp: httpx.Response) -> None:
        if resp.status_code < 400:
            return
        try:
            payload = resp.json()
            detail = payload.get("detail", payload) if isinstance(payload, dict) else payload
        except ValueError:
            detail = resp.text
        raise PersistenceServiceError(resp.status_code, detail)

    async def find_candidates(
        self, currency: str, start: datetime, end: datetime
    ) -> list[Event]:
        params = {"currency": currency.upper(), "start": _iso(start), "end": _iso(end)}
        async with self._client() as client:
            resp = await client.get("/events/candidates", params=params)
        self._raise_for_status(resp)
        payload = resp.json()
        items = payload.get("events", []) if isinstance(payload, dict) else payload
        return [event_from_mapping(item) for item in items]

    async def get_event(self, event_id: str) -> Event | None:
        async with self._client() as client:
            resp = await client.get(f"/events/{event_id}")
        if resp.status_code == 404:
            return None
        self._raise_for_status(resp)
        return event_from_mapping(resp.json(), event_id=event_id)

    async def ingest_batch(self, events: list[dict[str, Any]]) -> BatchOutcome:
        async with self._client() as client:
            resp = await client.post("/events/ingest", json={"events": events})
        self._raise_for_status(resp)
        return BatchOutcome.model_validate(resp.json())
