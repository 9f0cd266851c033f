"""Custom exceptions for econcal."""

from typing import Any


class EconCalError(Exception):
    """Base exception for event store and ingestion errors."""


class RecordValidationError(EconCalError):
    """Raised when a record cannot be adapted into an event."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error on '{field}': {message}")


class PayloadFormatError(EconCalError):
    """Raised when an ingestion payload is neither a list nor {"events": [...]}."""

    def __init__(self, message: str = 'JSON must be an array or { "events": [] }.'):
        super().__init__(message)


class PersistenceServiceError(EconCalError):
    """Raised when the remote persistence service rejects a call."""

    def __init__(self, status_code: int, detail: Any):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Persistence service error {status_code}: {detail}")


class MatchLookupError(EconCalError):
    """Raised when the candidate lookup for a record fails.

    The pipeline never lets this escape: the record is classified as new.
    """

    def __init__(self, currency: str, cause: Exception):
        self.currency = currency
        self.cause = cause
        super().__init__(f"Candidate lookup failed for {currency}: {cause}")


class SubmissionError(EconCalError):
    """Raised when a bulk-ingest batch fails. Carries the partial report."""

    def __init__(self, batch_index: int, cause: Exception, report: Any):
        self.batch_index = batch_index
        self.cause = cause
        self.report = report
        super().__init__(f"Batch {batch_index + 1} submission failed: {cause}")
