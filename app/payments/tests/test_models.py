"""
Tests for payment models.

Tests cover:
- PaymentTransaction constraints, properties and version counter
- Merchant active flag
- Ledger uniqueness per (merchant, txnid)
- CallbackEvent status helpers
- Seeded merchants
"""

from decimal import Decimal

import pytest
from django.db import IntegrityError, transaction

from payments.models import CallbackEvent, Merchant, PaymentTransaction
from payments.state_machines import (
    CallbackEventStatus,
    HashLayout,
    MerchantStatus,
    TransactionStatus,
)
from payments.tests.factories import (
    CallbackEventFactory,
    MerchantFactory,
    MerchantPaymentLedgerFactory,
    PaymentTransactionFactory,
)


class TestPaymentTransaction:
    def test_defaults(self, db):
        txn = PaymentTransactionFactory()

        assert txn.status == TransactionStatus.INITIATED
        assert txn.udfs == [""] * 10
        assert txn.hash_verified is False
        assert txn.flagged_for_review is False
        assert txn.version == 1

    def test_txnid_is_unique(self, db):
        PaymentTransactionFactory(txnid="DUP1")

        with pytest.raises(IntegrityError), transaction.atomic():
            PaymentTransactionFactory(txnid="DUP1")

    def test_negative_amount_rejected(self, db):
        with pytest.raises(IntegrityError), transaction.atomic():
            PaymentTransactionFactory(amount=Decimal("-1.00"))

    def test_amount_may_be_empty(self, db):
        txn = PaymentTransactionFactory(amount=None)

        assert PaymentTransaction.objects.get(pk=txn.pk).amount is None

    def test_merchant_and_order_from_udfs(self, db):
        txn = PaymentTransactionFactory(udfs=["M123", "ORD-9"] + [""] * 8)

        assert txn.merchant_id == "M123"
        assert txn.order_id == "ORD-9"

    def test_short_udf_list_is_padded(self, db):
        txn = PaymentTransactionFactory(udfs=["M123"])

        assert len(txn.udf_values) == 10
        assert txn.order_id == ""

    def test_save_increments_version(self, db):
        txn = PaymentTransactionFactory()

        txn.productinfo = "Changed"
        txn.save()

        assert txn.version == 2
        assert PaymentTransaction.objects.get(pk=txn.pk).version == 2

    @pytest.mark.parametrize(
        "status, terminal",
        [
            (TransactionStatus.INITIATED, False),
            (TransactionStatus.PROCESSING, False),
            (TransactionStatus.SUCCESS, True),
            (TransactionStatus.FAILED, True),
            (TransactionStatus.HASH_MISMATCH, True),
        ],
    )
    def test_is_terminal(self, db, status, terminal):
        assert PaymentTransactionFactory(status=status).is_terminal is terminal

    def test_str(self, db):
        txn = PaymentTransactionFactory(txnid="TXN9")

        assert str(txn) == "PaymentTransaction(TXN9, INITIATED, 100.00)"


class TestMerchant:
    def test_is_active(self, db):
        assert MerchantFactory().is_active
        assert not MerchantFactory(status=MerchantStatus.INACTIVE).is_active

    def test_seeded_merchants_exist(self, db):
        seeded = {m.merchant_id: m for m in Merchant.objects.filter(merchant_id__in=["M123", "M456", "M789"])}

        assert seeded["M123"].salt == "secret_salt_key_123"
        assert seeded["M123"].is_active
        assert seeded["M456"].name == "Production Merchant"
        assert not seeded["M789"].is_active


class TestMerchantPaymentLedger:
    def test_one_entry_per_merchant_and_txnid(self, db, merchant):
        MerchantPaymentLedgerFactory(merchant=merchant, txnid="TXN1")

        with pytest.raises(IntegrityError), transaction.atomic():
            MerchantPaymentLedgerFactory(merchant=merchant, txnid="TXN1")

    def test_same_txnid_for_other_merchant_allowed(self, db, merchant):
        MerchantPaymentLedgerFactory(merchant=merchant, txnid="TXN1")
        MerchantPaymentLedgerFactory(txnid="TXN1")

        assert merchant.ledger_entries.count() == 1


class TestCallbackEvent:
    def test_mark_processed(self, db):
        event = CallbackEventFactory()

        event.mark_processed(
            hash_verified=True,
            hash_layout=HashLayout.STANDARD,
            resulting_status=TransactionStatus.SUCCESS,
        )
        event.save()

        stored = CallbackEvent.objects.get(pk=event.pk)
        assert stored.status == CallbackEventStatus.PROCESSED
        assert stored.hash_verified is True
        assert stored.hash_layout == HashLayout.STANDARD
        assert stored.resulting_status == TransactionStatus.SUCCESS
        assert stored.processed_at is not None

    def test_mark_failed(self, db):
        event = CallbackEventFactory()

        event.mark_failed("Missing txnid")

        assert event.status == CallbackEventStatus.FAILED
        assert event.error_message == "Missing txnid"
