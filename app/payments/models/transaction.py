"""
PaymentTransaction model: the durable record of one payment attempt.

One row per txnid. Three writers race on it: PaymentInitiator (creates it
at INITIATED), CallbackIngestor (redirect post and webhook, may arrive
before the initiation write is visible) and ReconciliationSweeper (fails
rows the gateway never confirmed). All of them go through
payments.services.TransactionStore, which upserts by txnid under
``select_for_update()``.

Timestamps are not maintained by Django: the component performing the
write assigns ``created_at`` once and ``updated_at`` on every mutation.

State Machine:
    INITIATED → PROCESSING → SUCCESS / FAILED / HASH_MISMATCH
    INITIATED → SUCCESS / FAILED / HASH_MISMATCH
    INITIATED / PROCESSING → FAILED (expire)

Usage:
    from payments.models import PaymentTransaction

    with transaction.atomic():
        txn = PaymentTransaction.objects.select_for_update().get(txnid="TXN1")
        txn.mark_success()
        txn.updated_at = timezone.now()
        txn.save()
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models
from django_fsm import FSMField, transition

from core.models import UUIDPrimaryKeyMixin, VersionedModel

from payments.hashing import UDF_SLOTS, normalize_udfs
from payments.state_machines import TransactionStatus

# Largest value the amount column (12 digits, 2 places) can store
MAX_AMOUNT = Decimal("9999999999.99")

RECONCILIATION_FAILURE_MESSAGE = (
    "No gateway confirmation received. Marked as failed by reconciliation job."
)


def empty_udfs() -> list[str]:
    return [""] * UDF_SLOTS


class PaymentTransaction(UUIDPrimaryKeyMixin, VersionedModel):
    """
    A payment attempt shared between this system and the gateway.

    Fields:
        txnid: Identifier shared with the gateway, unique and immutable
        udfs: Exactly 10 user-defined pass-through strings (udf1 first)
        amount: Fixed-point amount, currency implicit, never negative
        status: FSM-managed TransactionStatus
        hash / hash_verified: Digest received or computed, and its outcome
        flagged_for_review: Needs a human (tampering, conflicting callbacks)
        gateway metadata: bank reference, bank, card, gateway id, raw payload
        created_at / updated_at: Assigned explicitly by the writer

    Note:
        ``raw_response`` is stored verbatim for audit and never parsed
        after storage.
    """

    # ==========================================================================
    # Identity & Routing
    # ==========================================================================

    txnid = models.CharField(
        max_length=64,
        unique=True,
        help_text="Transaction ID shared with the gateway (unique, immutable)",
    )

    udfs = models.JSONField(
        default=empty_udfs,
        help_text="User-defined fields udf1..udf10 (udf1 = merchant, udf2 = order)",
    )

    # ==========================================================================
    # Payment Details
    # ==========================================================================

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Payment amount; empty only when a callback carried an unreadable amount",
    )

    productinfo = models.CharField(max_length=255, blank=True, default="")
    firstname = models.CharField(max_length=150, blank=True, default="")
    email = models.CharField(max_length=254, blank=True, default="")
    phone = models.CharField(max_length=20, blank=True, default="")

    status = FSMField(
        default=TransactionStatus.INITIATED,
        choices=TransactionStatus.choices,
        db_index=True,
        protected=True,
        help_text="Current status of the transaction (managed by FSM)",
    )

    # ==========================================================================
    # Authentication
    # ==========================================================================

    hash = models.CharField(
        max_length=256,
        blank=True,
        default="",
        help_text="Forward digest sent at initiation, or the digest received on callback",
    )

    hash_verified = models.BooleanField(
        default=False,
        help_text="Whether the last callback's digest authenticated",
    )

    flagged_for_review = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Hash mismatch or conflicting gateway outcomes; needs manual review",
    )

    # ==========================================================================
    # Gateway Metadata
    # ==========================================================================

    gateway_txn_id = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="Gateway's own transaction id (easepayid)",
    )
    access_key = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Access key returned by the gateway at initiation",
    )
    bank_ref_num = models.CharField(max_length=100, blank=True, default="")
    bank_code = models.CharField(max_length=50, blank=True, default="")
    bank_name = models.CharField(max_length=150, blank=True, default="")
    issuing_bank = models.CharField(max_length=150, blank=True, default="")
    card_type = models.CharField(max_length=50, blank=True, default="")
    payment_mode = models.CharField(max_length=50, blank=True, default="")
    payment_source = models.CharField(max_length=100, blank=True, default="")
    auth_code = models.CharField(max_length=100, blank=True, default="")

    error_message = models.TextField(
        blank=True,
        default="",
        help_text="Gateway error text, or the reconciliation annotation",
    )

    raw_response = models.JSONField(
        default=dict,
        blank=True,
        help_text="Last gateway payload, empty values removed (audit only)",
    )

    # ==========================================================================
    # Audit Timestamps (assigned by the writer)
    # ==========================================================================

    created_at = models.DateTimeField(
        db_index=True,
        help_text="When the row was first written; never changes",
    )
    updated_at = models.DateTimeField(
        help_text="When the row was last written",
    )

    # ==========================================================================
    # Meta & Methods
    # ==========================================================================

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Payment Transaction"
        verbose_name_plural = "Payment Transactions"
        indexes = [
            models.Index(fields=["status", "created_at"], name="payments_pa_status_8c1f2e_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gte=0) | models.Q(amount__isnull=True),
                name="payment_transaction_amount_not_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"PaymentTransaction({self.txnid}, {self.status}, {self.amount})"

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def udf_values(self) -> tuple[str, ...]:
        return normalize_udfs(self.udfs)

    @property
    def merchant_id(self) -> str:
        return self.udf_values[0]

    @property
    def order_id(self) -> str:
        return self.udf_values[1]

    @property
    def is_terminal(self) -> bool:
        return self.status in TransactionStatus.terminal()

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================
    # Transitions only move the status. Callers assign updated_at and save.

    @transition(
        field=status,
        source=TransactionStatus.INITIATED,
        target=TransactionStatus.PROCESSING,
    )
    def start_processing(self):
        """The gateway accepted the request or reported the payment pending."""

    @transition(field=status, source="*", target=TransactionStatus.SUCCESS)
    def mark_success(self):
        """
        Verified gateway success.

        Allowed from any state: a verified late callback overrides an
        earlier terminal outcome (last write wins, logged by the store).
        """

    @transition(field=status, source="*", target=TransactionStatus.FAILED)
    def mark_failed(self, reason: str | None = None):
        """Verified gateway failure, cancellation or timeout."""
        if reason:
            self.error_message = reason

    @transition(
        field=status,
        source=[
            TransactionStatus.INITIATED,
            TransactionStatus.PROCESSING,
            TransactionStatus.HASH_MISMATCH,
        ],
        target=TransactionStatus.HASH_MISMATCH,
    )
    def mark_hash_mismatch(self):
        """
        A callback failed authentication.

        Not allowed from SUCCESS or FAILED: an unauthenticated payload must
        not be able to overwrite an outcome that is already settled.
        """
        self.hash_verified = False
        self.flagged_for_review = True

    @transition(
        field=status,
        source=[TransactionStatus.INITIATED, TransactionStatus.PROCESSING],
        target=TransactionStatus.FAILED,
    )
    def expire(self, reason: str = RECONCILIATION_FAILURE_MESSAGE):
        """The gateway never confirmed the payment within the staleness window."""
        self.error_message = reason
