"""
Celery tasks for payment processing.

This module provides async tasks for:
- Expiring stale transactions (hourly, via celery-beat)

Usage:
    from payments.tasks import sweep_stale_transactions

    sweep_stale_transactions.delay()
"""

# =============================================================================
# Re-exported Worker Tasks
# =============================================================================
# Tasks are defined in payments.workers and re-exported here so Celery
# autodiscover finds them.

from payments.workers import sweep_stale_transactions  # noqa: F401
