"""
DRF serializers for payments app.

This module provides serializers for:
- Payment initiation requests
- Transaction status lookups

Related files:
    - services/payment_initiator.py: PaymentInitiator
    - views.py: Payment API views

Usage:
    serializer = InitiatePaymentSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    result = PaymentInitiator.initiate(serializer.to_request())
"""

from __future__ import annotations

from decimal import Decimal

from drf_spectacular.utils import OpenApiExample, extend_schema_serializer
from rest_framework import serializers

from payments.hashing import UDF_SLOTS
from payments.models import PaymentTransaction
from payments.services import InitiationRequest


@extend_schema_serializer(
    examples=[
        OpenApiExample(
            "Merchant payment",
            value={
                "txnid": "TXN20240115001",
                "amount": "100.00",
                "productinfo": "Order #9",
                "firstname": "John",
                "email": "john@example.com",
                "phone": "9999999999",
                "udf1": "M123",
                "udf2": "ORD-9",
            },
            request_only=True,
        ),
    ]
)
class InitiatePaymentSerializer(serializers.Serializer):
    """
    Request body for POST /api/v1/payments/initiate/.

    udf1 names the merchant (its salt signs the request), udf2 carries the
    merchant's order reference; udf3..udf10 are passed through untouched.
    """

    txnid = serializers.CharField(max_length=64)
    amount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0.01"),
    )
    productinfo = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    firstname = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")

    def get_fields(self):
        fields = super().get_fields()
        for slot in range(1, UDF_SLOTS + 1):
            fields[f"udf{slot}"] = serializers.CharField(
                max_length=255,
                required=False,
                allow_blank=True,
                default="",
            )
        return fields

    def validate_txnid(self, value: str) -> str:
        if "|" in value:
            raise serializers.ValidationError("txnid must not contain '|'.")
        return value

    def to_request(self) -> InitiationRequest:
        data = self.validated_data
        return InitiationRequest(
            txnid=data["txnid"],
            amount=data["amount"],
            productinfo=data.get("productinfo", ""),
            firstname=data["firstname"],
            email=data["email"],
            phone=data.get("phone", ""),
            udfs=tuple(data.get(f"udf{slot}", "") for slot in range(1, UDF_SLOTS + 1)),
        )


class InitiationResultSerializer(serializers.Serializer):
    txnid = serializers.CharField()
    access_key = serializers.CharField()
    payment_url = serializers.URLField()


class PaymentTransactionSerializer(serializers.ModelSerializer):
    """
    Read-only view of a transaction for status lookups.

    The hash, access key and raw gateway payload are never exposed.
    """

    udfs = serializers.ListField(child=serializers.CharField(allow_blank=True), read_only=True)

    class Meta:
        model = PaymentTransaction
        fields = [
            "txnid",
            "status",
            "amount",
            "productinfo",
            "firstname",
            "email",
            "udfs",
            "hash_verified",
            "flagged_for_review",
            "gateway_txn_id",
            "bank_ref_num",
            "payment_mode",
            "error_message",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
