"""
CallbackIngestor: authenticate a gateway callback and apply it.

Webhooks and browser redirects carry the same form fields and go through
the same path:

    1. Record the delivery as a CallbackEvent (before anything can fail)
    2. Resolve the merchant from udf1 and with it the salt
    3. Verify the reverse digest (standard layout, then legacy)
    4. Upsert the transaction through TransactionStore
    5. Route a verified SUCCESS/FAILED into the merchant ledger

``ingest`` never raises. Every fault, including a misconfigured gateway
salt, comes back as an INTERNAL_ERROR ServiceResult so the webhook can
still acknowledge the delivery.

Usage:
    from payments.services import CallbackIngestor

    result = CallbackIngestor.ingest(request.POST, channel=CallbackChannel.WEBHOOK)
    if result.success and result.data.suspicious:
        ...  # hash mismatch, already recorded and flagged
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from django.utils import timezone

from core.services import BaseService, ServiceResult

from payments import hashing
from payments.exceptions import ErrorKind
from payments.models import CallbackEvent, PaymentTransaction
from payments.models.transaction import MAX_AMOUNT
from payments.services.merchant_directory import MerchantDirectory
from payments.services.merchant_ledger import MerchantLedger
from payments.services.transaction_store import TransactionStore, TransactionUpdate
from payments.state_machines import CallbackChannel, TransactionStatus

if TYPE_CHECKING:
    from typing import Any

    from payments.models import Merchant


logger = logging.getLogger(__name__)


_GATEWAY_STATUS_MAP = {
    "success": TransactionStatus.SUCCESS,
    "pending": TransactionStatus.PROCESSING,
}


def map_gateway_status(gateway_status: str | None) -> str:
    """
    Map the gateway's ``status`` field to a TransactionStatus.

    ``success`` and ``pending`` are the only non-failure values; failure,
    usercancelled, dropped, bounced, timeout and anything unknown are FAILED.
    """
    return _GATEWAY_STATUS_MAP.get((gateway_status or "").strip().lower(), TransactionStatus.FAILED)


def parse_amount(value: str | None) -> Decimal | None:
    """
    Callback amount as a Decimal.

    Unreadable, negative or out-of-range amounts (more than the amount column
    holds) become None.
    """
    if value is None or not str(value).strip():
        return None
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount < 0:
        return None
    try:
        amount = amount.quantize(Decimal("0.01"))
    except InvalidOperation:
        return None
    return amount if amount <= MAX_AMOUNT else None


def normalize_payload(payload: Mapping[str, Any]) -> dict[str, str]:
    """Flatten a QueryDict or dict into single stripped string values."""
    data = {}
    for name in payload.keys():
        value = payload.get(name)
        data[str(name)] = "" if value is None else str(value).strip()
    return data


@dataclass
class IngestResult:
    """
    What happened to one callback.

    Attributes:
        txnid: Transaction the callback was applied to
        status: Transaction status after the write
        hash_verified: Whether the digest authenticated
        suspicious: The digest did not authenticate (possible tampering)
        transaction: The stored row
        event: The CallbackEvent recording this delivery
    """

    txnid: str
    status: str
    hash_verified: bool
    suspicious: bool
    transaction: PaymentTransaction
    event: CallbackEvent


class CallbackIngestor(BaseService):
    """Single entry point for gateway callbacks (webhook and redirects)."""

    @classmethod
    def ingest(
        cls,
        payload: Mapping[str, Any],
        channel: str = CallbackChannel.WEBHOOK,
        now: datetime | None = None,
    ) -> ServiceResult[IngestResult]:
        now = now or timezone.now()
        event = None
        try:
            data = normalize_payload(payload)
            txnid = data.get("txnid", "")

            event = CallbackEvent.objects.create(
                txnid=txnid,
                channel=channel,
                gateway_status=data.get("status", ""),
                payload=data,
            )

            if not txnid:
                logger.warning(
                    "Callback without txnid rejected",
                    extra={"channel": channel, "event_id": str(event.id)},
                )
                event.mark_failed("Missing txnid")
                event.save()
                return ServiceResult.failure(
                    "Callback is missing txnid",
                    error_code=ErrorKind.VALIDATION_ERROR,
                    errors={"txnid": ["This field is required."]},
                )

            return cls._apply(data, txnid, channel, event, now)

        except Exception as e:
            result = cls.handle_exception(
                e,
                context=f"Callback processing failed on {channel}",
                error_code=ErrorKind.INTERNAL_ERROR,
            )
            if event is not None:
                cls._record_event_failure(event, str(e))
            return result

    # =========================================================================
    # Internals
    # =========================================================================

    @classmethod
    def _apply(
        cls,
        data: dict[str, str],
        txnid: str,
        channel: str,
        event: CallbackEvent,
        now: datetime,
    ) -> ServiceResult[IngestResult]:
        udfs = tuple(data.get(f"udf{slot}", "") for slot in range(1, hashing.UDF_SLOTS + 1))
        merchant = MerchantDirectory.lookup(udfs[0])
        credentials = MerchantDirectory.resolve_credentials(merchant)

        layout = hashing.verify_reverse_digest(
            data.get("hash"),
            salt=credentials.salt,
            status=data.get("status", ""),
            udfs=udfs,
            email=data.get("email", ""),
            firstname=data.get("firstname", ""),
            productinfo=data.get("productinfo", ""),
            amount=data.get("amount", ""),
            txnid=txnid,
            key=credentials.key,
        )
        hash_verified = layout is not None

        if hash_verified:
            target_status = map_gateway_status(data.get("status"))
        else:
            target_status = TransactionStatus.HASH_MISMATCH
            logger.warning(
                "Callback hash verification failed",
                extra={
                    "txnid": txnid,
                    "channel": channel,
                    "gateway_status": data.get("status", ""),
                    "merchant_id": udfs[0],
                },
            )

        update = TransactionUpdate(
            txnid=txnid,
            status=target_status,
            hash_verified=hash_verified,
            hash=data.get("hash", ""),
            amount=parse_amount(data.get("amount")),
            udfs=udfs,
            productinfo=data.get("productinfo", ""),
            firstname=data.get("firstname", ""),
            email=data.get("email", ""),
            phone=data.get("phone", ""),
            gateway_txn_id=data.get("easepayid", ""),
            bank_ref_num=data.get("bank_ref_num", ""),
            bank_code=data.get("bankcode", ""),
            bank_name=data.get("bank_name", ""),
            issuing_bank=data.get("issuing_bank", ""),
            card_type=data.get("card_type", ""),
            payment_mode=data.get("mode", ""),
            payment_source=data.get("payment_source", ""),
            auth_code=data.get("auth_code", ""),
            error_message=data.get("error_Message", ""),
            raw_response={name: value for name, value in data.items() if value},
        )
        outcome = TransactionStore.upsert(update, now=now)
        txn = outcome.transaction

        event.mark_processed(
            hash_verified=hash_verified,
            hash_layout=layout or "",
            resulting_status=txn.status,
        )
        event.save()

        if hash_verified and txn.status in (TransactionStatus.SUCCESS, TransactionStatus.FAILED):
            cls._route_to_ledger(txn, merchant)

        logger.info(
            "Callback processed",
            extra={
                "txnid": txnid,
                "channel": channel,
                "status": txn.status,
                "hash_verified": hash_verified,
                "hash_layout": layout or "",
                "row_created": outcome.created,
                "changed": outcome.changed,
            },
        )
        return ServiceResult.success(
            IngestResult(
                txnid=txnid,
                status=txn.status,
                hash_verified=hash_verified,
                suspicious=not hash_verified,
                transaction=txn,
                event=event,
            )
        )

    @classmethod
    def _route_to_ledger(cls, txn: PaymentTransaction, merchant: Merchant | None) -> None:
        try:
            result = MerchantLedger.record(txn, merchant)
        except Exception:
            logger.exception(
                "Ledger routing failed",
                extra={"txnid": txn.txnid, "merchant_id": txn.merchant_id},
            )
            return
        if not result.success:
            logger.warning(
                f"Ledger routing skipped: {result.error}",
                extra={"txnid": txn.txnid, "error_code": result.error_code},
            )

    @staticmethod
    def _record_event_failure(event: CallbackEvent, message: str) -> None:
        try:
            event.mark_failed(message)
            event.save()
        except Exception:
            logger.exception(
                "Could not record callback failure",
                extra={"event_id": str(event.id)},
            )
