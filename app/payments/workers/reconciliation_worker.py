"""
Reconciliation worker: periodic expiry of unconfirmed transactions.

The task is registered as ``payments.tasks.sweep_stale_transactions`` and
scheduled hourly by the django-celery-beat PeriodicTask created in
migration 0002 (the interval can be changed from the admin).

Usage:
    from payments.tasks import sweep_stale_transactions

    # Trigger a sweep by hand
    sweep_stale_transactions.delay()

    # Use a different threshold for one run
    sweep_stale_transactions.delay(threshold_minutes=60)
"""

from __future__ import annotations

import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(bind=True, name="payments.tasks.sweep_stale_transactions")
def sweep_stale_transactions(self, threshold_minutes: int | None = None) -> dict:
    """
    Fail INITIATED/PROCESSING transactions older than the threshold.

    Args:
        threshold_minutes: Override RECONCILIATION_STALE_MINUTES for this run

    Returns:
        Dict with:
        - status: "completed" or "failed"
        - candidates / processed / skipped / failed: Row counts
        - status_counts: Transactions per status after the sweep
        - error: Error message if the sweep itself could not run

    Note:
        Per-row failures never fail the task; they are counted in "failed".
    """
    from payments.services import ReconciliationSweeper

    logger.info(
        "Starting scheduled reconciliation sweep",
        extra={"task_id": self.request.id, "threshold_minutes": threshold_minutes},
    )

    try:
        report = ReconciliationSweeper.sweep(threshold_minutes=threshold_minutes)
    except Exception as e:
        logger.exception(
            f"Unexpected error during reconciliation sweep: {e}",
            extra={"error": str(e)},
        )
        return {
            "status": "failed",
            "error": str(e),
            "error_code": "UNEXPECTED_ERROR",
        }

    return report.to_dict()
