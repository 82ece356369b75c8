"""
State enums for payment models.

These are Django TextChoices for database storage and admin integration.
TransactionStatus drives the django-fsm field on PaymentTransaction.

State Machines Overview:

PaymentTransaction:
    INITIATED → PROCESSING → SUCCESS / FAILED / HASH_MISMATCH
    INITIATED → SUCCESS / FAILED / HASH_MISMATCH (PROCESSING skipped)
    INITIATED / PROCESSING → FAILED (reconciliation sweep)
    terminal → terminal (late verified callback, last write wins)

CallbackEvent:
    RECEIVED → PROCESSED / FAILED
"""

from django.db import models


class TransactionStatus(models.TextChoices):
    """
    Lifecycle of a payment attempt identified by its txnid.

    Terminal states: SUCCESS, FAILED, HASH_MISMATCH. A terminal row never
    goes back to INITIATED or PROCESSING.
    """

    INITIATED = "INITIATED", "Initiated"
    PROCESSING = "PROCESSING", "Processing"
    SUCCESS = "SUCCESS", "Success"
    FAILED = "FAILED", "Failed"
    HASH_MISMATCH = "HASH_MISMATCH", "Hash Mismatch"

    @classmethod
    def terminal(cls) -> frozenset[str]:
        return frozenset({cls.SUCCESS, cls.FAILED, cls.HASH_MISMATCH})

    @classmethod
    def sweepable(cls) -> frozenset[str]:
        """Statuses the reconciliation sweep is allowed to expire."""
        return frozenset({cls.INITIATED, cls.PROCESSING})


class MerchantStatus(models.TextChoices):
    ACTIVE = "ACTIVE", "Active"
    INACTIVE = "INACTIVE", "Inactive"


class SettlementStatus(models.TextChoices):
    """Ledger bookkeeping only; settlement itself happens elsewhere."""

    PENDING = "PENDING", "Pending"
    SETTLED = "SETTLED", "Settled"


class CallbackChannel(models.TextChoices):
    """How a gateway response reached us."""

    WEBHOOK = "webhook", "Webhook"
    REDIRECT_SUCCESS = "redirect_success", "Redirect (success page)"
    REDIRECT_FAILURE = "redirect_failure", "Redirect (failure page)"


class CallbackEventStatus(models.TextChoices):
    RECEIVED = "received", "Received"
    PROCESSED = "processed", "Processed"
    FAILED = "failed", "Failed"


class HashLayout(models.TextChoices):
    """Which reverse-hash field layout authenticated a callback."""

    STANDARD = "standard", "10 UDF slots"
    LEGACY = "legacy", "5 UDF slots (legacy)"
