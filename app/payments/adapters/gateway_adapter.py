"""
Hosted-checkout gateway adapter.

All outbound calls to the gateway go through GatewayAdapter so timeouts,
error classification and logging are the same everywhere. The adapter is
stateless and raises GatewayError on every refusal; PaymentInitiator turns
that back into a ServiceResult.

Configuration (via settings):
- GATEWAY_INITIATE_URL: Endpoint that issues access keys
- GATEWAY_PAYMENT_URL: Hosted checkout base URL (access key appended)
- GATEWAY_SUCCESS_URL / GATEWAY_FAILURE_URL: Browser redirect targets (surl/furl)
- GATEWAY_TIMEOUT_SECONDS: Request timeout (default: 5)

Usage:
    from payments.adapters import GatewayAdapter, InitiationParams

    access_key = GatewayAdapter.initiate(
        InitiationParams(
            key=credentials.key, txnid="TXN1", amount=Decimal("100.00"),
            productinfo="Order", firstname="John", email="j@x.com",
            hash=digest, udfs=("M123", "ORD-9"),
        )
    )
    redirect_to(GatewayAdapter.payment_url(access_key))
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import requests
from django.conf import settings

from payments import hashing
from payments.exceptions import ErrorKind, GatewayError

DEFAULT_TIMEOUT_SECONDS = 5
DEFAULT_USER_MESSAGE = "Payment initiation failed. Please try again later."

_DUPLICATE_MARKERS = ("duplicate", "already processed", "already exists", "already initiated")
_RETRY_MARKERS = ("retry", "timeout", "temporarily", "service unavailable")


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class InitiationParams:
    """
    Form fields for an initiation request.

    Attributes:
        key: Gateway merchant key
        txnid: Transaction id shared with the gateway
        amount: Payment amount (sent with two fraction digits)
        productinfo, firstname, email, phone: Customer details
        hash: Forward digest over the fields above
        udfs: Pass-through values, udf1 first; empty slots are not sent
    """

    key: str
    txnid: str
    amount: Decimal
    productinfo: str
    firstname: str
    email: str
    hash: str
    phone: str = ""
    udfs: tuple[str, ...] = field(default_factory=tuple)

    def to_form(self) -> dict[str, str]:
        form = {
            "key": self.key,
            "txnid": self.txnid,
            "amount": hashing.format_amount(self.amount),
            "productinfo": self.productinfo,
            "firstname": self.firstname,
            "phone": self.phone,
            "email": self.email,
            "surl": settings.GATEWAY_SUCCESS_URL,
            "furl": settings.GATEWAY_FAILURE_URL,
            "hash": self.hash,
        }
        for slot, value in enumerate(hashing.normalize_udfs(self.udfs), start=1):
            if value:
                form[f"udf{slot}"] = value
        return form


# =============================================================================
# Error Classification
# =============================================================================


def to_user_message(description: str | None) -> str:
    """
    Rephrase a gateway description for the payer.

    ``"kindly retry your transaction"`` → ``"Please retry your payment."``
    """
    text = (description or "").strip()
    if not text:
        return DEFAULT_USER_MESSAGE
    text = text.replace("kindly ", "Please ").replace("Kindly ", "Please ")
    text = text.replace("your transaction", "your payment")
    text = text[0].upper() + text[1:]
    if not text.endswith("."):
        text += "."
    return text


def classify_gateway_error(response: dict[str, Any]) -> GatewayError:
    """
    Build the GatewayError for a refused initiation.

    The description comes from ``error_desc``, then ``error``, then
    ``message``. Duplicate markers are searched in the description and in
    ``data``; retry markers in the description only.
    """
    description = str(
        response.get("error_desc") or response.get("error") or response.get("message") or ""
    )
    searchable = f"{description} {response.get('data') or ''}".lower()

    if any(marker in searchable for marker in _DUPLICATE_MARKERS):
        kind = ErrorKind.DUPLICATE_TRANSACTION
    elif any(marker in description.lower() for marker in _RETRY_MARKERS):
        kind = ErrorKind.GATEWAY_RETRY
    else:
        kind = ErrorKind.GATEWAY_ERROR

    return GatewayError(
        description or "Gateway rejected the initiation request",
        kind=kind,
        user_message=to_user_message(description),
        details={"gateway_response": response},
    )


# =============================================================================
# Adapter
# =============================================================================


class GatewayAdapter:
    """
    Adapter for the gateway's initiation API.

    All methods are class-level; no instance state is maintained, so the
    adapter is safe to call from request threads and Celery workers.
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @staticmethod
    def payment_url(access_key: str) -> str:
        return f"{settings.GATEWAY_PAYMENT_URL}{access_key}"

    @classmethod
    def initiate(cls, params: InitiationParams) -> str:
        """
        Ask the gateway for an access key.

        Returns:
            The access key (``data`` of a ``status == 1`` response)

        Raises:
            GatewayError: GATEWAY_RETRY on timeout or a retryable refusal,
                DUPLICATE_TRANSACTION when the gateway knows the txnid,
                GATEWAY_ERROR otherwise
        """
        logger = cls.get_logger()
        timeout = getattr(settings, "GATEWAY_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
        log_context = {"operation": "initiate", "txnid": params.txnid}

        start_time = time.time()
        logger.info("Starting gateway operation", extra=log_context)

        try:
            response = requests.post(
                settings.GATEWAY_INITIATE_URL,
                data=params.to_form(),
                timeout=timeout,
            )
            body = response.json()
        except requests.Timeout as e:
            logger.warning(
                "Gateway request timed out",
                extra={**log_context, "timeout": timeout},
            )
            raise GatewayError(
                f"Gateway did not answer within {timeout}s",
                kind=ErrorKind.GATEWAY_RETRY,
                user_message="The payment service is not responding. Please try again.",
            ) from e
        except (requests.RequestException, ValueError) as e:
            logger.error(
                "Gateway request failed",
                extra=log_context,
                exc_info=True,
            )
            raise GatewayError(
                f"Gateway request failed: {e}",
                kind=ErrorKind.GATEWAY_ERROR,
                user_message=DEFAULT_USER_MESSAGE,
            ) from e

        duration_ms = (time.time() - start_time) * 1000

        if not isinstance(body, dict) or str(body.get("status")) != "1" or not body.get("data"):
            error = classify_gateway_error(body if isinstance(body, dict) else {})
            logger.warning(
                "Gateway refused initiation",
                extra={
                    **log_context,
                    "kind": error.kind,
                    "gateway_message": error.gateway_message,
                    "duration_ms": duration_ms,
                },
            )
            raise error

        logger.info(
            "Gateway operation completed",
            extra={**log_context, "duration_ms": duration_ms},
        )
        return str(body["data"])
