"""
Tests for payment Celery tasks.

The task is called directly (synchronously); scheduling is covered by the
PeriodicTask created in migration 0002.
"""

from datetime import timedelta

from django.utils import timezone
from django_celery_beat.models import PeriodicTask

from payments.models import PaymentTransaction
from payments.state_machines import TransactionStatus
from payments.tasks import sweep_stale_transactions
from payments.tests.factories import PaymentTransactionFactory


class TestCeleryTaskConfiguration:
    def test_is_shared_task(self):
        assert hasattr(sweep_stale_transactions, "delay")
        assert hasattr(sweep_stale_transactions, "apply_async")

    def test_registered_name(self):
        assert sweep_stale_transactions.name == "payments.tasks.sweep_stale_transactions"

    def test_hourly_schedule_installed(self, db):
        task = PeriodicTask.objects.get(task="payments.tasks.sweep_stale_transactions")

        assert task.enabled
        assert task.interval.every == 1
        assert task.interval.period == "hours"


class TestSweepStaleTransactions:
    def test_expires_stale_rows(self, db, gateway_settings, stale_transaction):
        result = sweep_stale_transactions()

        assert result["status"] == "completed"
        assert result["processed"] == 1
        assert (
            PaymentTransaction.objects.get(txnid="TXN3").status == TransactionStatus.FAILED
        )

    def test_threshold_argument(self, db, gateway_settings):
        PaymentTransactionFactory(
            txnid="TXN4",
            created_at=timezone.now() - timedelta(minutes=40),
        )

        result = sweep_stale_transactions(threshold_minutes=60)

        assert result["processed"] == 0
        assert PaymentTransaction.objects.get(txnid="TXN4").status == TransactionStatus.INITIATED

    def test_empty_run(self, db, gateway_settings):
        result = sweep_stale_transactions()

        assert result["status"] == "completed"
        assert result["candidates"] == 0

    def test_unexpected_error_reported(self, db, mocker):
        mocker.patch(
            "payments.services.ReconciliationSweeper.sweep",
            side_effect=RuntimeError("db down"),
        )

        result = sweep_stale_transactions()

        assert result["status"] == "failed"
        assert result["error"] == "db down"
        assert result["error_code"] == "UNEXPECTED_ERROR"
