"""Engine constants and environment-driven settings."""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SIMILARITY_THRESHOLD = 0.8
MATCH_WINDOW = timedelta(minutes=5)
QUERY_CACHE_TTL_SECONDS = 5 * 60
MAX_BATCH_SIZE = 200

# Events within this window after their release time are "NOW".
NOW_WINDOW = timedelta(minutes=9)

UNKNOWN_CURRENCY = "N/A"
DEFAULT_SOURCE = "canonical"
UPLOAD_SOURCE = "gpt"

# Providers whose data must not be overwritten by assisted uploads.
PREFERRED_SOURCES = ("nfs", "jblanked-ff", "jblanked-mt", "jblanked-fxstreet")

# Lower index = higher priority when picking metric values.
PROVIDER_PRIORITY = ("nfs", "jblanked-ff", "gpt", "jblanked-mt", "jblanked-fxstreet")


class Settings(BaseSettings):
    """Deployment overrides, read from ECONCAL_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ECONCAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    similarity_threshold: float = Field(default=SIMILARITY_THRESHOLD, ge=0.0, le=1.0)
    match_window_minutes: float = Field(default=MATCH_WINDOW.total_seconds() / 60, ge=0)
    query_cache_ttl_seconds: float = Field(default=QUERY_CACHE_TTL_SECONDS, gt=0)
    max_batch_size: int = Field(default=MAX_BATCH_SIZE, ge=1)
    upload_source: str = Field(default=UPLOAD_SOURCE)

    persistence_base_url: str | None = Field(
        default=None,
        description="Base URL of the remote persistence service.",
    )
    persistence_token: str | None = Field(default=None)
    persistence_timeout_seconds: float = Field(default=30.0, gt=0)

    @property
    def match_window(self) -> timedelta:
        return timedelta(minutes=self.match_window_minutes)

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a dict safe to log (token masked)."""
        return {
            k: ("***" if k == "persistence_token" and v else v)
            for k, v in self.model_dump().items()
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


__all__ = [
    "DEFAULT_SOURCE",
    "MATCH_WINDOW",
    "MAX_BATCH_SIZE",
    "NOW_WINDOW",
    "PREFERRED_SOURCES",
    "PROVIDER_PRIORITY",
    "QUERY_CACHE_TTL_SECONDS",
    "SIMILARITY_THRESHOLD",
    "Settings",
    "UNKNOWN_CURRENCY",
    "UPLOAD_SOURCE",
    "get_settings",
]
