"""
TransactionStore: the only code that writes PaymentTransaction rows.

Every write is one ``transaction.atomic()`` block around a
``select_for_update()`` of the row identified by txnid. A first insert that
races another first insert loses on the unique txnid constraint inside a
savepoint and continues with the winner's row, so callers never see a
duplicate and never need to retry.

Operations:
    get_transaction(txnid): Find by id (None when unknown)
    create_initiated(...): INITIATED row for a new payment (duplicate → failure)
    mark_processing(txnid, access_key): Gateway accepted the initiation
    annotate_error(txnid, message): Record an initiation failure on the row
    upsert(update): Idempotent create-or-merge of a gateway callback
    find_stale(cutoff): Snapshot of txnids the sweep should look at
    expire_if_stale(txnid, cutoff): Re-check under lock and fail the row
    count_by_status(): Status histogram for monitoring

Usage:
    from payments.services import TransactionStore, TransactionUpdate

    outcome = TransactionStore.upsert(
        TransactionUpdate(txnid="TXN2", status=TransactionStatus.SUCCESS,
                          hash_verified=True, hash=payload["hash"], ...)
    )
    if outcome.conflict:
        ...  # gateway changed its mind; the row is flagged for review
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from django.db import IntegrityError, transaction
from django.db.models import Count
from django.utils import timezone
from django_fsm import TransitionNotAllowed

from core.services import BaseService, ServiceResult

from payments.exceptions import ErrorKind, InvalidStateTransitionError
from payments.hashing import normalize_udfs
from payments.models import PaymentTransaction
from payments.models.transaction import RECONCILIATION_FAILURE_MESSAGE
from payments.state_machines import TransactionStatus

if TYPE_CHECKING:
    from typing import Any


logger = logging.getLogger(__name__)


# =============================================================================
# Data Types
# =============================================================================


@dataclass(frozen=True)
class TransactionUpdate:
    """
    What one gateway callback wants to write.

    ``status`` is the already-mapped target (SUCCESS, FAILED, PROCESSING, or
    HASH_MISMATCH when ``hash_verified`` is False). Fields the gateway
    signed are only trusted when ``hash_verified`` is True; otherwise they
    are kept as evidence on a brand-new row and ignored on an existing one.
    """

    txnid: str
    status: str
    hash_verified: bool
    hash: str = ""
    amount: Decimal | None = None
    udfs: tuple[str, ...] = field(default_factory=normalize_udfs)
    productinfo: str = ""
    firstname: str = ""
    email: str = ""
    phone: str = ""
    gateway_txn_id: str = ""
    bank_ref_num: str = ""
    bank_code: str = ""
    bank_name: str = ""
    issuing_bank: str = ""
    card_type: str = ""
    payment_mode: str = ""
    payment_source: str = ""
    auth_code: str = ""
    error_message: str = ""
    raw_response: dict[str, Any] = field(default_factory=dict)

    def claimed_fields(self) -> dict[str, Any]:
        """Payment and gateway fields as sent, trusted only after verification."""
        return {
            "amount": self.amount,
            "udfs": list(normalize_udfs(self.udfs)),
            "productinfo": self.productinfo,
            "firstname": self.firstname,
            "email": self.email,
            "phone": self.phone,
            "gateway_txn_id": self.gateway_txn_id,
            "bank_ref_num": self.bank_ref_num,
            "bank_code": self.bank_code,
            "bank_name": self.bank_name,
            "issuing_bank": self.issuing_bank,
            "card_type": self.card_type,
            "payment_mode": self.payment_mode,
            "payment_source": self.payment_source,
            "auth_code": self.auth_code,
            "error_message": self.error_message,
        }

    def present_claimed_fields(self) -> dict[str, Any]:
        """Claimed fields the callback actually carried; blanks never erase stored data."""
        return {
            name: value
            for name, value in self.claimed_fields().items()
            if value is not None and value != ""
        }

    def evidence_fields(self) -> dict[str, Any]:
        """Fields recorded whatever the verification outcome."""
        return {
            "hash": self.hash,
            "hash_verified": self.hash_verified,
            "raw_response": self.raw_response,
        }


@dataclass
class UpsertOutcome:
    """
    Result of TransactionStore.upsert.

    Attributes:
        transaction: The row after the write
        created: The callback created the row
        changed: Any column other than updated_at changed
        previous_status: Status before the write (None when created)
        conflict: A verified callback replaced a different SUCCESS/FAILED outcome
    """

    transaction: PaymentTransaction
    created: bool
    changed: bool
    previous_status: str | None = None
    conflict: bool = False


_SETTLED = frozenset({TransactionStatus.SUCCESS, TransactionStatus.FAILED})


# =============================================================================
# Store
# =============================================================================


class TransactionStore(BaseService):
    """
    Durable transaction records, upserted by txnid.

    Writers pass ``now`` explicitly (defaulting to the current time): the
    model has no auto_now fields, so created_at and updated_at are exactly
    what the writer says.
    """

    # =========================================================================
    # Reads
    # =========================================================================

    @classmethod
    def get_transaction(cls, txnid: str) -> PaymentTransaction | None:
        if not txnid:
            return None
        return PaymentTransaction.objects.filter(txnid=txnid).first()

    @classmethod
    def find_stale(cls, cutoff: datetime, limit: int | None = None) -> list[str]:
        """
        txnids still INITIATED/PROCESSING and created at or before ``cutoff``.

        This is a snapshot. Rows can move on before the sweep reaches them,
        which is why expire_if_stale re-checks under lock.
        """
        queryset = (
            PaymentTransaction.objects.filter(
                status__in=TransactionStatus.sweepable(),
                created_at__lte=cutoff,
            )
            .order_by("created_at")
            .values_list("txnid", flat=True)
        )
        if limit is not None:
            queryset = queryset[:limit]
        return list(queryset)

    @classmethod
    def count_by_status(cls) -> dict[str, int]:
        counts = {status: 0 for status in TransactionStatus.values}
        rows = PaymentTransaction.objects.values("status").annotate(total=Count("id"))
        for row in rows:
            counts[row["status"]] = row["total"]
        return counts

    # =========================================================================
    # Initiation writes
    # =========================================================================

    @classmethod
    def create_initiated(
        cls,
        *,
        txnid: str,
        amount: Decimal,
        udfs: tuple[str, ...] = (),
        productinfo: str = "",
        firstname: str = "",
        email: str = "",
        phone: str = "",
        hash: str = "",
        now: datetime | None = None,
    ) -> ServiceResult[PaymentTransaction]:
        """
        Insert the INITIATED row for a new payment.

        No existence check is made first: the unique txnid constraint is the
        check, and a violation is reported as DUPLICATE_TRANSACTION.
        """
        now = now or timezone.now()
        try:
            with cls.atomic():
                txn = PaymentTransaction.objects.create(
                    txnid=txnid,
                    amount=amount,
                    udfs=list(normalize_udfs(udfs)),
                    productinfo=productinfo,
                    firstname=firstname,
                    email=email,
                    phone=phone,
                    hash=hash,
                    created_at=now,
                    updated_at=now,
                )
        except IntegrityError:
            logger.warning(
                "Initiation rejected: txnid already exists",
                extra={"txnid": txnid},
            )
            return ServiceResult.failure(
                f"Transaction {txnid} already exists",
                error_code=ErrorKind.DUPLICATE_TRANSACTION,
            )

        logger.info(
            "Transaction initiated",
            extra={"txnid": txnid, "amount": str(amount)},
        )
        return ServiceResult.success(txn)

    @classmethod
    def mark_processing(
        cls, txnid: str, access_key: str, now: datetime | None = None
    ) -> PaymentTransaction | None:
        """
        Record the gateway's access key and move INITIATED → PROCESSING.

        A callback may already have settled the row (the payer can be very
        fast); then only the access key is stored.
        """
        now = now or timezone.now()
        with cls.atomic():
            txn = cls._lock(txnid)
            if txn is None:
                return None
            txn.access_key = access_key
            if txn.status == TransactionStatus.INITIATED:
                txn.start_processing()
            txn.updated_at = now
            txn.save()
        return txn

    @classmethod
    def annotate_error(
        cls, txnid: str, message: str, now: datetime | None = None
    ) -> PaymentTransaction | None:
        """
        Store an initiation failure on a still-open row.

        The status stays INITIATED so the sweep eventually fails it with
        the reconciliation annotation.
        """
        now = now or timezone.now()
        with cls.atomic():
            txn = cls._lock(txnid)
            if txn is None or txn.is_terminal:
                return txn
            txn.error_message = message
            txn.updated_at = now
            txn.save()
        return txn

    # =========================================================================
    # Callback writes
    # =========================================================================

    @classmethod
    def upsert(cls, update: TransactionUpdate, now: datetime | None = None) -> UpsertOutcome:
        """
        Create or merge the row for ``update.txnid``.

        Applying the same update any number of times leaves the row as the
        first application left it, except for updated_at.

        Raises:
            InvalidStateTransitionError: The merge asked the FSM for a
                transition it refuses (a bug, never an expected outcome)
        """
        now = now or timezone.now()
        with cls.atomic():
            txn = cls._lock(update.txnid)
            if txn is None:
                txn, created = cls._insert_or_lock(update, now)
                if created:
                    logger.info(
                        "Transaction created from callback",
                        extra={
                            "txnid": update.txnid,
                            "status": txn.status,
                            "hash_verified": update.hash_verified,
                        },
                    )
                    return UpsertOutcome(transaction=txn, created=True, changed=True)
            return cls._merge(txn, update, now)

    # =========================================================================
    # Reconciliation writes
    # =========================================================================

    @classmethod
    def expire_if_stale(
        cls,
        txnid: str,
        cutoff: datetime,
        now: datetime | None = None,
        reason: str = RECONCILIATION_FAILURE_MESSAGE,
    ) -> bool:
        """
        Fail the row if, under lock, it is still open and old enough.

        Returns:
            True if the row was expired, False if it was skipped (gone,
            already moved by a callback, or newer than the cutoff)
        """
        now = now or timezone.now()
        with cls.atomic():
            txn = cls._lock(txnid)
            if txn is None:
                return False
            if txn.status not in TransactionStatus.sweepable() or txn.created_at > cutoff:
                return False
            previous_status = txn.status
            txn.expire(reason)
            txn.updated_at = now
            txn.save()

        logger.info(
            "Stale transaction expired",
            extra={"txnid": txnid, "previous_status": previous_status},
        )
        return True

    # =========================================================================
    # Internals
    # =========================================================================

    @staticmethod
    def _lock(txnid: str) -> PaymentTransaction | None:
        return PaymentTransaction.objects.select_for_update().filter(txnid=txnid).first()

    @classmethod
    def _insert_or_lock(
        cls, update: TransactionUpdate, now: datetime
    ) -> tuple[PaymentTransaction, bool]:
        """Insert a row born from a callback, or lock the row that won the race."""
        txn = PaymentTransaction(
            txnid=update.txnid,
            status=update.status,
            flagged_for_review=not update.hash_verified,
            created_at=now,
            updated_at=now,
            **update.claimed_fields(),
            **update.evidence_fields(),
        )
        try:
            with transaction.atomic():
                txn.save(force_insert=True)
        except IntegrityError:
            logger.info(
                "Lost first-insert race, merging into existing row",
                extra={"txnid": update.txnid},
            )
            return PaymentTransaction.objects.select_for_update().get(txnid=update.txnid), False
        return txn, True

    @classmethod
    def _merge(cls, txn: PaymentTransaction, update: TransactionUpdate, now: datetime) -> UpsertOutcome:
        previous_status = txn.status
        target_status = previous_status
        changes: dict[str, Any] = {}
        conflict = False

        if not update.hash_verified:
            if previous_status in _SETTLED:
                # An unauthenticated payload cannot overturn a settled outcome.
                logger.warning(
                    "Unverified callback for settled transaction ignored",
                    extra={"txnid": txn.txnid, "status": previous_status},
                )
                changes["flagged_for_review"] = True
            else:
                target_status = TransactionStatus.HASH_MISMATCH
                changes.update(update.evidence_fields())
                changes["flagged_for_review"] = True

        elif update.status == TransactionStatus.PROCESSING:
            if txn.is_terminal:
                logger.info(
                    "Pending callback after final outcome ignored",
                    extra={"txnid": txn.txnid, "status": previous_status},
                )
            else:
                target_status = TransactionStatus.PROCESSING
                changes.update(update.present_claimed_fields())
                changes.update(update.evidence_fields())

        else:
            target_status = update.status
            changes.update(update.present_claimed_fields())
            changes.update(update.evidence_fields())

            if previous_status in _SETTLED and previous_status != target_status:
                conflict = True
                changes["flagged_for_review"] = True
                logger.warning(
                    "Conflicting gateway outcome, last write wins",
                    extra={
                        "txnid": txn.txnid,
                        "previous_status": previous_status,
                        "new_status": target_status,
                        "previous_error": txn.error_message,
                    },
                )

            if txn.amount is not None and update.amount is not None and txn.amount != update.amount:
                changes["amount"] = txn.amount
                changes["flagged_for_review"] = True
                logger.warning(
                    "Verified callback amount differs from initiated amount",
                    extra={
                        "txnid": txn.txnid,
                        "initiated_amount": str(txn.amount),
                        "callback_amount": str(update.amount),
                    },
                )

        dirty = {name: value for name, value in changes.items() if getattr(txn, name) != value}

        if target_status == previous_status and not dirty:
            PaymentTransaction.objects.filter(pk=txn.pk).update(updated_at=now)
            txn.updated_at = now
            return UpsertOutcome(
                transaction=txn,
                created=False,
                changed=False,
                previous_status=previous_status,
            )

        for name, value in dirty.items():
            setattr(txn, name, value)

        if target_status != previous_status:
            cls._transition(txn, target_status, update)

        txn.updated_at = now
        txn.save()

        logger.info(
            "Transaction updated from callback",
            extra={
                "txnid": txn.txnid,
                "previous_status": previous_status,
                "status": txn.status,
                "hash_verified": txn.hash_verified,
            },
        )
        return UpsertOutcome(
            transaction=txn,
            created=False,
            changed=True,
            previous_status=previous_status,
            conflict=conflict,
        )

    @staticmethod
    def _transition(txn: PaymentTransaction, target_status: str, update: TransactionUpdate) -> None:
        try:
            if target_status == TransactionStatus.SUCCESS:
                txn.mark_success()
            elif target_status == TransactionStatus.FAILED:
                txn.mark_failed(update.error_message or None)
            elif target_status == TransactionStatus.HASH_MISMATCH:
                txn.mark_hash_mismatch()
            elif target_status == TransactionStatus.PROCESSING:
                txn.start_processing()
            else:
                raise TransitionNotAllowed(f"No callback transition to {target_status}")
        except TransitionNotAllowed as e:
            raise InvalidStateTransitionError(
                f"Cannot move transaction {txn.txnid} from {txn.status} to {target_status}",
                details={
                    "txnid": txn.txnid,
                    "current_status": txn.status,
                    "target_status": target_status,
                },
            ) from e
