"""
CallbackEvent model: append-only log of every gateway delivery.

Every webhook and browser redirect is stored before it is applied, with
the outcome of hash verification and of processing. When two deliveries
disagree about a transaction's outcome, both are here even though the
transaction row only keeps the last one.

Usage:
    event = CallbackEvent.objects.create(
        txnid=payload.get("txnid", ""),
        channel=CallbackChannel.WEBHOOK,
        gateway_status=payload.get("status", ""),
        payload=payload,
    )
    ...
    event.mark_processed(hash_verified=True, hash_layout=HashLayout.STANDARD)
    event.save()
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone

from core.models import BaseModel, UUIDPrimaryKeyMixin

from payments.state_machines import CallbackChannel, CallbackEventStatus, HashLayout


class CallbackEvent(UUIDPrimaryKeyMixin, BaseModel):
    """
    A single callback as received from the gateway.

    Fields:
        txnid: Transaction the callback claims to be about (may be empty)
        channel: Webhook or which redirect page
        gateway_status: Raw ``status`` value sent by the gateway
        hash_verified / hash_layout: Authentication outcome
        status: RECEIVED → PROCESSED / FAILED
        resulting_status: Transaction status after the callback was applied
        payload: Request parameters as received (the hash included)
    """

    txnid = models.CharField(max_length=64, blank=True, db_index=True)
    channel = models.CharField(
        max_length=20,
        choices=CallbackChannel.choices,
        db_index=True,
    )
    gateway_status = models.CharField(max_length=50, blank=True, default="")

    hash_verified = models.BooleanField(default=False)
    hash_layout = models.CharField(
        max_length=10,
        choices=HashLayout.choices,
        blank=True,
        default="",
        help_text="Reverse-hash layout that matched; empty on mismatch",
    )

    status = models.CharField(
        max_length=10,
        choices=CallbackEventStatus.choices,
        default=CallbackEventStatus.RECEIVED,
        db_index=True,
    )
    resulting_status = models.CharField(max_length=20, blank=True, default="")
    processed_at = models.DateTimeField(null=True, blank=True)
    error_message = models.TextField(blank=True, default="")

    payload = models.JSONField(default=dict)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Callback Event"
        verbose_name_plural = "Callback Events"
        indexes = [
            models.Index(fields=["txnid", "created_at"], name="payments_ca_txnid_5b7d1a_idx"),
        ]

    def __str__(self) -> str:
        return f"CallbackEvent({self.txnid}, {self.channel}, {self.status})"

    # ==========================================================================
    # Helper Methods
    # ==========================================================================
    # These do not save; the caller saves after calling.

    def mark_processed(
        self,
        hash_verified: bool,
        hash_layout: str = "",
        resulting_status: str = "",
    ) -> None:
        self.status = CallbackEventStatus.PROCESSED
        self.hash_verified = hash_verified
        self.hash_layout = hash_layout or ""
        self.resulting_status = resulting_status
        self.processed_at = timezone.now()
        self.error_message = ""

    def mark_failed(self, error_message: str) -> None:
        self.status = CallbackEventStatus.FAILED
        self.processed_at = timezone.now()
        self.error_message = error_message
