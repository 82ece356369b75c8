"""
Payment services for the gateway broker.

This module provides:
- TransactionStore: The only writer of PaymentTransaction rows (upsert by txnid)
- CallbackIngestor: Authenticates and applies webhook / redirect callbacks
- PaymentInitiator: Signs a payment and obtains the hosted checkout URL
- ReconciliationSweeper: Fails rows the gateway never confirmed
- MerchantDirectory / MerchantLedger: Merchant lookup, salts and ledger routing

Usage:
    from payments.services import PaymentInitiator, InitiationRequest

    result = PaymentInitiator.initiate(
        InitiationRequest(
            txnid="TXN1",
            amount="100.00",
            productinfo="Order",
            firstname="John",
            email="j@x.com",
            udfs=("M123", "ORD-9"),
        )
    )
    if result.success:
        redirect_to(result.data.payment_url)

    # Apply a gateway callback
    from payments.services import CallbackIngestor

    result = CallbackIngestor.ingest(request.POST, channel=CallbackChannel.WEBHOOK)

    # Run a sweep by hand
    from payments.services import ReconciliationSweeper

    report = ReconciliationSweeper.sweep()
"""

from payments.services.callback_ingestor import (
    CallbackIngestor,
    IngestResult,
    map_gateway_status,
    parse_amount,
)
from payments.services.merchant_directory import GatewayCredentials, MerchantDirectory
from payments.services.merchant_ledger import MerchantLedger
from payments.services.payment_initiator import (
    InitiationRequest,
    InitiationResult,
    PaymentInitiator,
)
from payments.services.reconciliation_sweeper import ReconciliationSweeper, SweepReport
from payments.services.transaction_store import (
    TransactionStore,
    TransactionUpdate,
    UpsertOutcome,
)

__all__ = [
    # Callbacks
    "CallbackIngestor",
    "IngestResult",
    "map_gateway_status",
    "parse_amount",
    # Merchants
    "GatewayCredentials",
    "MerchantDirectory",
    "MerchantLedger",
    # Initiation
    "InitiationRequest",
    "InitiationResult",
    "PaymentInitiator",
    # Reconciliation
    "ReconciliationSweeper",
    "SweepReport",
    # Storage
    "TransactionStore",
    "TransactionUpdate",
    "UpsertOutcome",
]
