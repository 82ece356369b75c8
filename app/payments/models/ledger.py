"""
MerchantPaymentLedger model: per-merchant record of routed payments.

Entries are written after a verified callback for a transaction whose UDF1
names an active merchant. Settlement is tracked as a flag only; computing
settlements is not part of the broker.
"""

from __future__ import annotations

from django.db import models

from core.models import BaseModel, UUIDPrimaryKeyMixin

from payments.state_machines import SettlementStatus, TransactionStatus


class MerchantPaymentLedger(UUIDPrimaryKeyMixin, BaseModel):
    """
    One ledger line per (merchant, txnid).

    Fields:
        merchant: Merchant the payment was routed to
        txnid: Transaction the line belongs to
        order_id: Merchant order reference (udf2)
        amount / status: Copied from the transaction at routing time
        payment_mode, bank_ref_num, gateway_txn_id: Gateway references
        settlement_status: PENDING until settled elsewhere
        notes: Free-form operator notes
    """

    merchant = models.ForeignKey(
        "payments.Merchant",
        on_delete=models.PROTECT,
        related_name="ledger_entries",
    )
    txnid = models.CharField(max_length=64, db_index=True)
    order_id = models.CharField(max_length=100, blank=True, default="")
    amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    status = models.CharField(max_length=20, choices=TransactionStatus.choices)
    payment_mode = models.CharField(max_length=50, blank=True, default="")
    bank_ref_num = models.CharField(max_length=100, blank=True, default="")
    gateway_txn_id = models.CharField(max_length=100, blank=True, default="")
    settlement_status = models.CharField(
        max_length=10,
        choices=SettlementStatus.choices,
        default=SettlementStatus.PENDING,
        db_index=True,
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Merchant Ledger Entry"
        verbose_name_plural = "Merchant Ledger Entries"
        constraints = [
            models.UniqueConstraint(
                fields=["merchant", "txnid"],
                name="unique_ledger_entry_per_merchant_txn",
            ),
        ]

    def __str__(self) -> str:
        return f"LedgerEntry({self.merchant_id}, {self.txnid}, {self.status})"
