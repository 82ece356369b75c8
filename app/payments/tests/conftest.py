"""
Pytest fixtures for payment tests.

This module provides fixtures for creating payment-related test data:
gateway credentials, merchants, transactions in each status, and a
builder for correctly (or deliberately incorrectly) signed callbacks.

Usage:
    def test_success_callback(db, gateway_settings, callback_payload):
        payload = callback_payload(txnid="TXN2", status="success")
        result = CallbackIngestor.ingest(payload)
        assert result.data.hash_verified
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from payments import hashing
from payments.state_machines import MerchantStatus, TransactionStatus
from payments.tests.factories import (
    MerchantFactory,
    PaymentTransactionFactory,
    UserFactory,
)

GATEWAY_KEY = "K1"
GATEWAY_SALT = "S1"


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture
def gateway_settings(settings):
    """Deterministic gateway configuration with no real network endpoint."""
    settings.GATEWAY_KEY = GATEWAY_KEY
    settings.GATEWAY_SALT = GATEWAY_SALT
    settings.GATEWAY_INITIATE_URL = "https://gateway.test/payment/initiateLink"
    settings.GATEWAY_PAYMENT_URL = "https://gateway.test/pay/"
    settings.GATEWAY_SUCCESS_URL = "https://broker.test/api/v1/payments/redirect/success/"
    settings.GATEWAY_FAILURE_URL = "https://broker.test/api/v1/payments/redirect/failure/"
    settings.GATEWAY_TIMEOUT_SECONDS = 5
    settings.RECONCILIATION_STALE_MINUTES = 15
    return settings


# =============================================================================
# User and Merchant Fixtures
# =============================================================================


@pytest.fixture
def user(db):
    """Create a test API user."""
    return UserFactory()


@pytest.fixture
def merchant(db):
    """Create an active merchant with its own salt."""
    return MerchantFactory()


@pytest.fixture
def inactive_merchant(db):
    return MerchantFactory(status=MerchantStatus.INACTIVE)


# =============================================================================
# Transaction Fixtures
# =============================================================================


@pytest.fixture
def initiated_transaction(db):
    """Create a fresh INITIATED transaction (TXN1, 100.00)."""
    return PaymentTransactionFactory(txnid="TXN1")


@pytest.fixture
def processing_transaction(db):
    return PaymentTransactionFactory(txnid="TXN1", status=TransactionStatus.PROCESSING)


@pytest.fixture
def stale_transaction(db):
    """An INITIATED transaction created 20 minutes ago."""
    return PaymentTransactionFactory(
        txnid="TXN3",
        created_at=timezone.now() - timedelta(minutes=20),
    )


# =============================================================================
# Callback Builders
# =============================================================================


@pytest.fixture
def callback_payload():
    """
    Build a gateway callback payload signed like the gateway signs it.

    Returns a function accepting the callback fields; ``salt``/``key``
    override the signing credentials and ``hash`` overrides the digest.
    """

    def build(
        txnid="TXN2",
        status="success",
        amount="100.00",
        productinfo="Order",
        firstname="John",
        email="j@x.com",
        udfs=(),
        salt=GATEWAY_SALT,
        key=GATEWAY_KEY,
        legacy=False,
        **extra,
    ):
        if legacy:
            builder = hashing.build_legacy_reverse_digest
            signed_udfs = hashing.normalize_udfs(udfs, hashing.LEGACY_UDF_SLOTS)
        else:
            builder = hashing.build_reverse_digest
            signed_udfs = hashing.normalize_udfs(udfs)
        payload = {
            "txnid": txnid,
            "status": status,
            "amount": amount,
            "productinfo": productinfo,
            "firstname": firstname,
            "email": email,
            "easepayid": f"E{txnid}",
            "bank_ref_num": f"BRN{txnid}",
            "mode": "UPI",
        }
        for slot, value in enumerate(hashing.normalize_udfs(udfs), start=1):
            payload[f"udf{slot}"] = value
        payload["hash"] = builder(
            salt,
            status,
            signed_udfs,
            email,
            firstname,
            productinfo,
            amount,
            txnid,
            key,
        )
        payload.update(extra)
        return payload

    return build
