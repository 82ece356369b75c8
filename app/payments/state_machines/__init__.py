"""
State machine enums for payment models.

This module defines the state enums used by payment models with django-fsm.
"""

from payments.state_machines.states import (
    CallbackChannel,
    CallbackEventStatus,
    HashLayout,
    MerchantStatus,
    SettlementStatus,
    TransactionStatus,
)

__all__ = [
    "CallbackChannel",
    "CallbackEventStatus",
    "HashLayout",
    "MerchantStatus",
    "SettlementStatus",
    "TransactionStatus",
]
