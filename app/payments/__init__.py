"""
Payments app: broker between merchant integrations and a hosted-checkout gateway.

This app handles:
- Payment initiation (forward hash, access key, payment URL)
- Gateway callbacks by webhook and browser redirect (reverse hash)
- Per-merchant salts and ledger routing
- Reconciliation of transactions the gateway never confirmed

Usage:
    from payments.services import PaymentInitiator, InitiationRequest

    result = PaymentInitiator.initiate(InitiationRequest(txnid="TXN1", amount="100.00", ...))

    # Celery beat runs this hourly
    from payments.tasks import sweep_stale_transactions
"""
