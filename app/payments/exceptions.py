"""
Error kinds and exceptions for the payment broker.

Expected outcomes are values: services return a ServiceResult whose
``error_code`` is one of the closed ErrorKind members. Exceptions are kept
for true faults and for the gateway adapter boundary, where PaymentInitiator
turns them back into ServiceResults.

Exception Hierarchy:
    PaymentError (base for payment domain, inherits BaseApplicationError)
    └── GatewayError - Gateway refused or failed an outbound call (carries ErrorKind)
    GatewayConfigurationError - Missing key/salt (inherits ConfigurationError)
    InvalidStateTransitionError - FSM transition not allowed (inherits ConflictError)

Usage:
    from payments.exceptions import ErrorKind, GatewayError

    try:
        access_key = GatewayAdapter.initiate(form)
    except GatewayError as e:
        return ServiceResult.failure(e.user_message, error_code=e.kind)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db import models

from core.exceptions import (
    BaseApplicationError,
    ConfigurationError,
    ConflictError,
)

if TYPE_CHECKING:
    from typing import Any


class ErrorKind(models.TextChoices):
    """
    Closed taxonomy of everything that can go wrong in the broker.

    HASH_MISMATCH never reaches an HTTP caller as an error response: it is
    recorded on the transaction and surfaced on the outcome page.
    """

    VALIDATION_ERROR = "VALIDATION_ERROR", "Validation error"
    HASH_MISMATCH = "HASH_MISMATCH", "Hash mismatch"
    DUPLICATE_TRANSACTION = "DUPLICATE_TRANSACTION", "Duplicate transaction"
    GATEWAY_RETRY = "GATEWAY_RETRY", "Gateway retryable error"
    GATEWAY_ERROR = "GATEWAY_ERROR", "Gateway error"
    UNAUTHORIZED = "UNAUTHORIZED", "Unauthorized"
    INTERNAL_ERROR = "INTERNAL_ERROR", "Internal error"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]

    @property
    def is_retryable(self) -> bool:
        return self is ErrorKind.GATEWAY_RETRY


_HTTP_STATUS = {
    ErrorKind.VALIDATION_ERROR: 400,
    ErrorKind.HASH_MISMATCH: 400,
    ErrorKind.DUPLICATE_TRANSACTION: 409,
    ErrorKind.GATEWAY_RETRY: 503,
    ErrorKind.GATEWAY_ERROR: 502,
    ErrorKind.UNAUTHORIZED: 403,
    ErrorKind.INTERNAL_ERROR: 500,
}


# =============================================================================
# Payment Domain Exceptions
# =============================================================================


class PaymentError(BaseApplicationError):
    """Base exception for payment operations."""

    default_error_code: str = "PAYMENT_ERROR"


class GatewayError(PaymentError):
    """
    The gateway refused an initiation request or could not be reached.

    Attributes:
        kind: GATEWAY_RETRY, GATEWAY_ERROR or DUPLICATE_TRANSACTION
        user_message: Payer-safe wording of the gateway's description
        gateway_message: The gateway's own description, for logs and audit

    Example:
        try:
            GatewayAdapter.initiate(form)
        except GatewayError as e:
            if e.is_retryable:
                ask_payer_to_try_again(e.user_message)
    """

    default_error_code: str = ErrorKind.GATEWAY_ERROR

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.GATEWAY_ERROR,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, error_code=kind.value, details=details)
        self.kind = kind
        self.gateway_message = message
        self.user_message = user_message or message

    @property
    def is_retryable(self) -> bool:
        return self.kind.is_retryable


class GatewayConfigurationError(ConfigurationError):
    """
    Gateway key or salt is missing, so no digest can be computed.

    A fatal configuration fault, never retryable.
    """

    default_error_code: str = "GATEWAY_CONFIGURATION_ERROR"


class InvalidStateTransitionError(ConflictError):
    """
    Raised when a transaction write would break the state machine.

    Wraps django-fsm's TransitionNotAllowed with the standard error format.

    Example:
        raise InvalidStateTransitionError(
            "Cannot expire transaction in SUCCESS state",
            details={"txnid": "TXN1", "current_status": "SUCCESS"},
        )
    """

    default_error_code: str = "INVALID_STATE_TRANSITION"
