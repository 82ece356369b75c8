"""
Factory Boy factories for payment test data.

This module provides factories for creating test instances of payment models.
Factories generate realistic test data while allowing easy customization.

Usage:
    from payments.tests.factories import (
        CallbackEventFactory,
        MerchantFactory,
        PaymentTransactionFactory,
    )

    # Create a basic INITIATED transaction
    txn = PaymentTransactionFactory()

    # Create a transaction in a specific status
    txn = PaymentTransactionFactory(status=TransactionStatus.PROCESSING)

    # Route it to a merchant
    txn = PaymentTransactionFactory(udfs=[merchant.merchant_id, "ORD-1"] + [""] * 8)
"""

from decimal import Decimal

import factory
from django.utils import timezone

from payments.models import (
    CallbackEvent,
    Merchant,
    MerchantPaymentLedger,
    PaymentTransaction,
)
from payments.state_machines import (
    CallbackChannel,
    MerchantStatus,
    TransactionStatus,
)


class UserFactory(factory.django.DjangoModelFactory):
    """Factory for API users (django.contrib.auth)."""

    class Meta:
        model = "auth.User"
        skip_postgeneration_save = True

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    password = factory.PostGenerationMethodCall("set_password", "testpass123")
    is_active = True


class MerchantFactory(factory.django.DjangoModelFactory):
    """
    Factory for creating Merchant instances.

    Default creates an ACTIVE merchant with its own salt. Identifiers never
    collide with the seeded M123 / M456 / M789 merchants.
    """

    class Meta:
        model = Merchant

    merchant_id = factory.Sequence(lambda n: f"MT{n:04d}")
    name = factory.Sequence(lambda n: f"Merchant {n}")
    salt = factory.Sequence(lambda n: f"merchant_salt_{n}")
    status = MerchantStatus.ACTIVE


class PaymentTransactionFactory(factory.django.DjangoModelFactory):
    """
    Factory for creating PaymentTransaction instances.

    Default creates an INITIATED transaction of 100.00 with no merchant.
    created_at / updated_at default to now; pass ``created_at`` to age it.

    Example:
        # A row the sweep should pick up
        txn = PaymentTransactionFactory(
            created_at=timezone.now() - timedelta(minutes=20),
        )

        # A settled row
        txn = PaymentTransactionFactory(status=TransactionStatus.SUCCESS, hash_verified=True)
    """

    class Meta:
        model = PaymentTransaction

    txnid = factory.Sequence(lambda n: f"TXN{n:06d}")
    amount = Decimal("100.00")
    productinfo = "Order"
    firstname = "John"
    email = factory.Sequence(lambda n: f"payer{n}@example.com")
    phone = "9999999999"
    udfs = factory.LazyFunction(lambda: [""] * 10)
    status = TransactionStatus.INITIATED
    created_at = factory.LazyFunction(timezone.now)
    updated_at = factory.LazyAttribute(lambda o: o.created_at)


class MerchantPaymentLedgerFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = MerchantPaymentLedger

    merchant = factory.SubFactory(MerchantFactory)
    txnid = factory.Sequence(lambda n: f"TXN{n:06d}")
    amount = Decimal("100.00")
    status = TransactionStatus.SUCCESS


class CallbackEventFactory(factory.django.DjangoModelFactory):
    """Factory for creating CallbackEvent instances (webhook by default)."""

    class Meta:
        model = CallbackEvent

    txnid = factory.Sequence(lambda n: f"TXN{n:06d}")
    channel = CallbackChannel.WEBHOOK
    gateway_status = "success"
    payload = factory.LazyAttribute(lambda o: {"txnid": o.txnid, "status": o.gateway_status})
