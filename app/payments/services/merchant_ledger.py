"""
Routes settled payments into the per-merchant ledger.

Called by CallbackIngestor after a verified SUCCESS or FAILED write. The
transaction row is already committed by then; a ledger fault is the
caller's to log and never rolls the transaction back.
"""

from __future__ import annotations

from core.services import BaseService, ServiceResult

from payments.exceptions import ErrorKind
from payments.models import Merchant, MerchantPaymentLedger, PaymentTransaction
from payments.state_machines import TransactionStatus

_LEDGER_STATUSES = frozenset({TransactionStatus.SUCCESS, TransactionStatus.FAILED})


class MerchantLedger(BaseService):
    """Create or refresh the ledger line for a (merchant, txnid) pair."""

    @classmethod
    def record(
        cls, txn: PaymentTransaction, merchant: Merchant | None
    ) -> ServiceResult[MerchantPaymentLedger | None]:
        """
        Mirror a settled transaction into its merchant's ledger.

        Returns:
            ServiceResult with the ledger entry, or with None when nothing
            had to be recorded (no merchant, or the transaction is not
            SUCCESS/FAILED). An inactive merchant is an UNAUTHORIZED failure.
        """
        logger = cls.get_logger()

        if merchant is None or txn.status not in _LEDGER_STATUSES:
            return ServiceResult.success(None)

        if not merchant.is_active:
            logger.warning(
                "Ledger routing refused for inactive merchant",
                extra={"txnid": txn.txnid, "merchant_id": merchant.merchant_id},
            )
            return ServiceResult.failure(
                f"Merchant {merchant.merchant_id} is not active",
                error_code=ErrorKind.UNAUTHORIZED,
            )

        with cls.atomic():
            entry, created = MerchantPaymentLedger.objects.select_for_update().get_or_create(
                merchant=merchant,
                txnid=txn.txnid,
                defaults={
                    "order_id": txn.order_id,
                    "amount": txn.amount,
                    "status": txn.status,
                    "payment_mode": txn.payment_mode,
                    "bank_ref_num": txn.bank_ref_num,
                    "gateway_txn_id": txn.gateway_txn_id,
                },
            )
            if not created and entry.status != txn.status:
                entry.status = txn.status
                entry.payment_mode = txn.payment_mode or entry.payment_mode
                entry.bank_ref_num = txn.bank_ref_num or entry.bank_ref_num
                entry.gateway_txn_id = txn.gateway_txn_id or entry.gateway_txn_id
                entry.save()

        logger.info(
            "Ledger entry recorded",
            extra={
                "txnid": txn.txnid,
                "merchant_id": merchant.merchant_id,
                "status": entry.status,
                "entry_created": created,
            },
        )
        return ServiceResult.success(entry)
