"""
Workers for background payment processing.

- ReconciliationWorker: Hourly sweep of transactions the gateway never confirmed

Usage:
    from payments.workers import sweep_stale_transactions

    sweep_stale_transactions.delay()
"""

from payments.workers.reconciliation_worker import sweep_stale_transactions

__all__ = [
    "sweep_stale_transactions",
]
