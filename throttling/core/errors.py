"""Throttling exception types.

Policy problems and counter store failures are reported through these types
so callers can tell a misconfiguration apart from an unavailable backend.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    policy: str
    level: str
    field: str
    actual_value: Any
    backend: str
    path: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for throttling failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ConfigurationError(AppError):
    """Raised when limits or backend configuration is invalid."""


class StorageError(AppError):
    """Raised when the counter store cannot serve a request."""
