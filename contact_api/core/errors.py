"""Application-level exception types.

Domain errors raised by services and adapters. The HTTP layer maps them to
status codes in one place (see exception_handlers).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability.

    Never serialized to clients; only logged.
    """

    table: str
    backend_error: str
    error_type: str


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message (safe to show to clients).
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when client input fails validation."""


@dataclass
class SubmissionValidationError(ValidationAppError):
    """Raised when a contact submission breaks one or more field rules.

    ``errors`` keeps every violated rule so callers can report them at once.
    """

    errors: list[str] = field(default_factory=list)


class PersistenceAppError(AppError):
    """Raised when the row store is unreachable or rejects a write."""
