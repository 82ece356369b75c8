"""
Tests for ReconciliationSweeper.

Tests cover:
- Rows older than the threshold are failed with the reconciliation message
- Fresh and terminal rows are left alone
- Threshold boundary and overrides
- One bad row does not stop the batch
"""

from datetime import timedelta

import pytest
from django.utils import timezone
from freezegun import freeze_time

from payments.models import PaymentTransaction
from payments.models.transaction import RECONCILIATION_FAILURE_MESSAGE
from payments.services import ReconciliationSweeper, TransactionStore
from payments.state_machines import TransactionStatus
from payments.tests.factories import PaymentTransactionFactory

SWEEP_TIME = "2026-03-01 12:00:00"


def _status(txnid):
    return PaymentTransaction.objects.get(txnid=txnid).status


@pytest.mark.usefixtures("gateway_settings")
class TestSweep:
    def test_stale_row_is_failed(self, db, stale_transaction):
        report = ReconciliationSweeper.sweep()

        txn = PaymentTransaction.objects.get(txnid="TXN3")
        assert txn.status == TransactionStatus.FAILED
        assert txn.error_message == RECONCILIATION_FAILURE_MESSAGE
        assert report.processed == 1
        assert report.status_counts[TransactionStatus.FAILED] == 1

    def test_stale_processing_row_is_failed(self, db):
        PaymentTransactionFactory(
            txnid="TXN4",
            status=TransactionStatus.PROCESSING,
            created_at=timezone.now() - timedelta(minutes=20),
        )

        ReconciliationSweeper.sweep()

        assert _status("TXN4") == TransactionStatus.FAILED

    def test_fresh_row_is_left_alone(self, db, initiated_transaction):
        report = ReconciliationSweeper.sweep()

        assert _status("TXN1") == TransactionStatus.INITIATED
        assert report.candidates == 0

    @pytest.mark.parametrize(
        "status",
        [TransactionStatus.SUCCESS, TransactionStatus.FAILED, TransactionStatus.HASH_MISMATCH],
    )
    def test_terminal_rows_are_never_touched(self, db, status):
        txn = PaymentTransactionFactory(
            status=status,
            created_at=timezone.now() - timedelta(days=1),
        )

        report = ReconciliationSweeper.sweep()

        stored = PaymentTransaction.objects.get(pk=txn.pk)
        assert stored.status == status
        assert stored.version == txn.version
        assert report.candidates == 0

    def test_row_exactly_at_threshold_is_stale(self, db):
        with freeze_time(SWEEP_TIME):
            PaymentTransactionFactory(
                txnid="EDGE",
                created_at=timezone.now() - timedelta(minutes=15),
            )

            ReconciliationSweeper.sweep()

        assert _status("EDGE") == TransactionStatus.FAILED

    def test_row_ages_into_sweep(self, db):
        with freeze_time(SWEEP_TIME) as frozen:
            PaymentTransactionFactory(txnid="TXN5")

            ReconciliationSweeper.sweep()
            assert _status("TXN5") == TransactionStatus.INITIATED

            frozen.tick(timedelta(minutes=16))
            ReconciliationSweeper.sweep()

        assert _status("TXN5") == TransactionStatus.FAILED

    def test_threshold_override(self, db, stale_transaction):
        report = ReconciliationSweeper.sweep(threshold_minutes=60)

        assert report.candidates == 0
        assert _status("TXN3") == TransactionStatus.INITIATED

    def test_threshold_from_settings(self, db, gateway_settings, stale_transaction):
        gateway_settings.RECONCILIATION_STALE_MINUTES = 30

        ReconciliationSweeper.sweep()

        assert _status("TXN3") == TransactionStatus.INITIATED

    def test_second_sweep_is_a_no_op(self, db, stale_transaction):
        ReconciliationSweeper.sweep()

        report = ReconciliationSweeper.sweep()

        assert report.candidates == 0
        assert report.processed == 0

    def test_failing_row_does_not_stop_batch(self, db, mocker):
        now = timezone.now()
        for txnid in ("TXN6", "TXN7"):
            PaymentTransactionFactory(txnid=txnid, created_at=now - timedelta(minutes=30))
        real_expire = TransactionStore.expire_if_stale

        def expire(txnid, *args, **kwargs):
            if txnid == "TXN6":
                raise RuntimeError("database hiccup")
            return real_expire(txnid, *args, **kwargs)

        mocker.patch.object(TransactionStore, "expire_if_stale", side_effect=expire)

        report = ReconciliationSweeper.sweep(now=now)

        assert report.failed == 1
        assert report.processed == 1
        assert _status("TXN6") == TransactionStatus.INITIATED
        assert _status("TXN7") == TransactionStatus.FAILED

    def test_report_to_dict(self, db, stale_transaction):
        data = ReconciliationSweeper.sweep().to_dict()

        assert data["status"] == "completed"
        assert data["processed"] == 1
        assert "cutoff" in data
