"""
Tests for payments app.

This package contains test modules for:
- test_hashing.py: Forward/reverse digests and the legacy layout
- test_models.py / test_state_transitions.py: Models and FSM transitions
- test_transaction_store.py: Upsert, idempotency and sweep helpers
- test_callback_ingestor.py: Callback authentication and application
- test_merchant_ledger.py: Merchant credentials and ledger routing
- test_payment_initiator.py: Initiation against a patched gateway
- test_adapters.py: Gateway error classification and form building
- test_reconciliation_sweeper.py / test_tasks.py: Stale transaction sweep
- test_views.py: Webhook, redirect pages and API endpoints
- test_integration.py: End-to-end payment journeys

Usage:
    pytest payments/tests/
    pytest payments/tests/test_transaction_store.py
"""
