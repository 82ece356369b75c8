"""
Base exception classes for application-wide error handling.

Exceptions are reserved for true faults: misconfiguration, broken
invariants, failing collaborators. Expected business outcomes (a rejected
request, a hash that does not verify) travel as values, see
core.services.ServiceResult.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ConflictError - State conflicts (duplicates, concurrent modifications)
    └── ConfigurationError - Missing or invalid settings

Usage:
    from core.exceptions import ConfigurationError

    if not settings.GATEWAY_SALT:
        raise ConfigurationError(
            "Gateway salt is not configured",
            details={"setting": "GATEWAY_SALT"},
        )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, identifiers, etc.)
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with the current state of a record.

    Covers unique constraint violations and optimistic locking failures.
    HTTP 409 Conflict is the matching status.
    """

    default_error_code: str = "CONFLICT"


class ConfigurationError(BaseApplicationError):
    """
    Raised when a required setting is missing or unusable.

    Never retryable: the process has to be reconfigured and restarted.
    """

    default_error_code: str = "CONFIGURATION_ERROR"
