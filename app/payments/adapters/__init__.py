"""
Payment adapters for external services.

All outbound gateway calls go through these adapters so timeouts, error
classification and logging stay consistent.

Usage:
    from payments.adapters import GatewayAdapter, InitiationParams

    access_key = GatewayAdapter.initiate(InitiationParams(...))
"""

from payments.adapters.gateway_adapter import (
    DEFAULT_USER_MESSAGE,
    GatewayAdapter,
    InitiationParams,
    classify_gateway_error,
    to_user_message,
)

__all__ = [
    "DEFAULT_USER_MESSAGE",
    "GatewayAdapter",
    "InitiationParams",
    "classify_gateway_error",
    "to_user_message",
]
