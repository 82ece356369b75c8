"""
ReconciliationSweeper: fail transactions the gateway never confirmed.

Runs from Celery beat (payments.tasks.sweep_stale_transactions). The sweep
takes a snapshot of candidate txnids, then expires each one in its own
locked transaction after re-checking status and age, so a callback that
lands mid-sweep always wins over the sweep.

A failure on one row is logged and counted; the rest of the batch still
runs. Overlapping sweeps are harmless: the second one skips every row the
first already failed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from django.conf import settings
from django.utils import timezone

from core.services import BaseService

from payments.models.transaction import RECONCILIATION_FAILURE_MESSAGE
from payments.services.transaction_store import TransactionStore

DEFAULT_STALE_MINUTES = 15


@dataclass
class SweepReport:
    """
    Counts from one sweep.

    Attributes:
        candidates: Rows in the snapshot
        processed: Rows expired to FAILED
        skipped: Rows a callback (or another sweep) moved first
        failed: Rows whose expiry raised
        status_counts: Status histogram after the sweep
    """

    cutoff: datetime
    candidates: int = 0
    processed: int = 0
    skipped: int = 0
    failed: int = 0
    status_counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "status": "completed",
            "cutoff": self.cutoff.isoformat(),
            "candidates": self.candidates,
            "processed": self.processed,
            "skipped": self.skipped,
            "failed": self.failed,
            "status_counts": self.status_counts,
        }


class ReconciliationSweeper(BaseService):
    """Expire INITIATED/PROCESSING rows older than the staleness threshold."""

    @classmethod
    def threshold(cls) -> timedelta:
        minutes = getattr(settings, "RECONCILIATION_STALE_MINUTES", DEFAULT_STALE_MINUTES)
        return timedelta(minutes=minutes)

    @classmethod
    def sweep(
        cls,
        now: datetime | None = None,
        threshold_minutes: int | None = None,
        limit: int | None = None,
    ) -> SweepReport:
        """
        Run one sweep.

        A row qualifies when ``created_at <= now - threshold``: a row
        exactly at the threshold is stale.
        """
        logger = cls.get_logger()
        now = now or timezone.now()
        threshold = timedelta(minutes=threshold_minutes) if threshold_minutes is not None else cls.threshold()
        cutoff = now - threshold

        candidates = TransactionStore.find_stale(cutoff, limit=limit)
        report = SweepReport(cutoff=cutoff, candidates=len(candidates))

        logger.info(
            "Reconciliation sweep started",
            extra={"cutoff": cutoff.isoformat(), "candidates": report.candidates},
        )

        for txnid in candidates:
            try:
                expired = TransactionStore.expire_if_stale(
                    txnid,
                    cutoff,
                    now=now,
                    reason=RECONCILIATION_FAILURE_MESSAGE,
                )
            except Exception:
                report.failed += 1
                logger.exception(
                    "Failed to expire stale transaction",
                    extra={"txnid": txnid},
                )
                continue

            if expired:
                report.processed += 1
            else:
                report.skipped += 1

        report.status_counts = TransactionStore.count_by_status()

        logger.info(
            "Reconciliation sweep completed",
            extra={
                "candidates": report.candidates,
                "processed": report.processed,
                "skipped": report.skipped,
                "failed": report.failed,
            },
        )
        return report
