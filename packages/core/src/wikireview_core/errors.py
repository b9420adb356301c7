"""
Error taxonomy for the review workflow.

Every failure the workflow can surface maps to one `ErrorType`. Validation
errors are raised before any side effect; the remaining types come back from
the remote document store or from imported data.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorType(str, Enum):
    """Machine-interpretable failure classes."""

    VALIDATION = "VALIDATION"
    """Bad caller input; no network call was attempted."""

    NOT_FOUND = "NOT_FOUND"
    """The remote store has no matching revision or content."""

    CONFLICT = "CONFLICT"
    """Concurrent modification detected by the remote store."""

    TRANSPORT = "TRANSPORT"
    """Network or protocol failure."""

    INVALID_FORMAT = "INVALID_FORMAT"
    """Imported data does not have a recognised top-level shape."""

    EMPTY_IMPORT = "EMPTY_IMPORT"
    """Imported data parsed but produced no annotations."""

    COMMIT = "COMMIT"
    """Write failure not otherwise classified."""


class ReviewToolError(RuntimeError):
    """Base class for every error the workflow raises on purpose."""

    error_type: ErrorType = ErrorType.COMMIT

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        reported: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        # True once a user-visible notification was emitted for this error.
        self.reported = reported

    def to_log_message(self) -> str:
        """Format error for logging."""
        return f"[{self.error_type.value}] {self.message}"


class ValidationError(ReviewToolError):
    error_type = ErrorType.VALIDATION


class NotFoundError(ReviewToolError):
    error_type = ErrorType.NOT_FOUND


class ConflictError(ReviewToolError):
    error_type = ErrorType.CONFLICT


class TransportError(ReviewToolError):
    error_type = ErrorType.TRANSPORT


class InvalidFormatError(ReviewToolError):
    error_type = ErrorType.INVALID_FORMAT


class EmptyImportError(ReviewToolError):
    error_type = ErrorType.EMPTY_IMPORT


class CommitError(ReviewToolError):
    error_type = ErrorType.COMMIT
