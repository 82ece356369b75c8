"""
Payment domain models.

Models:
    PaymentTransaction: One payment attempt, keyed by txnid (FSM status)
    Merchant: Merchant identity, salt and active flag
    MerchantPaymentLedger: Per-merchant record of routed payments
    CallbackEvent: Append-only log of gateway deliveries

Usage:
    from payments.models import PaymentTransaction, Merchant
"""

from payments.models.callback_event import CallbackEvent
from payments.models.ledger import MerchantPaymentLedger
from payments.models.merchant import Merchant
from payments.models.transaction import PaymentTransaction

__all__ = [
    "CallbackEvent",
    "Merchant",
    "MerchantPaymentLedger",
    "PaymentTransaction",
]
