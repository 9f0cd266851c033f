"""Ingestion: payload validation, matching, and submission to persistence."""

from econcal.ingestion.base import CandidateLookup, PersistenceClient
from econcal.ingestion.http import HttpPersistenceClient
from econcal.ingestion.live import consume_live_updates
from econcal.ingestion.memory import InMemoryPersistenceClient
from econcal.ingestion.pipeline import IngestionPipeline

__all__ = [
    "CandidateLookup",
    "HttpPersistenceClient",
    "InMemoryPersistenceClient",
    "IngestionPipeline",
    "PersistenceClient",
    "consume_live_updates",
]
