"""econcal: canonical economic-calendar event store and ingestion engine."""

__version__ = "0.1.0"
