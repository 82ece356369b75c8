"""
DRF views for payments app.

This module provides API views for:
- Payment initiation (hosted checkout URL)
- Transaction status lookup

Related files:
    - services/: PaymentInitiator, TransactionStore
    - serializers.py: Request/response serializers
    - webhooks/views.py: Gateway callback endpoints (plain Django views)
    - urls.py: URL routing

Endpoints:
    POST /api/v1/payments/initiate/ - Start a payment
    GET /api/v1/payments/transactions/{txnid}/ - Transaction status

Security:
    - Both endpoints require JWT authentication
    - An inactive merchant is refused with 403
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import BaseApplicationError

from payments.exceptions import ErrorKind
from payments.serializers import (
    InitiatePaymentSerializer,
    InitiationResultSerializer,
    PaymentTransactionSerializer,
)
from payments.services import PaymentInitiator, TransactionStore

logger = logging.getLogger(__name__)


class InitiatePaymentView(APIView):
    """
    Start a payment with the gateway.

    POST /api/v1/payments/initiate/

    Response:
        200 OK: {"success": true, "data": {"txnid", "access_key", "payment_url"}}
        400 Bad Request: Validation error or unknown merchant
        403 Forbidden: Merchant inactive
        409 Conflict: txnid already used
        502 / 503: Gateway refused or did not answer
        500: Gateway not configured or unexpected fault
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="initiate_payment",
        summary="Initiate payment",
        description=(
            "Sign the payment with the merchant's salt, record it as INITIATED "
            "and obtain a hosted checkout URL from the gateway."
        ),
        request=InitiatePaymentSerializer,
        responses={
            200: OpenApiResponse(response=InitiationResultSerializer, description="Payment URL issued"),
            400: OpenApiResponse(description="Validation error"),
            403: OpenApiResponse(description="Merchant inactive"),
            409: OpenApiResponse(description="Duplicate transaction"),
            502: OpenApiResponse(description="Gateway rejected the request"),
            503: OpenApiResponse(description="Gateway unavailable, retry later"),
        },
        tags=["Payments"],
    )
    def post(self, request):
        serializer = InitiatePaymentSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {
                    "success": False,
                    "error": "Invalid payment request",
                    "error_code": ErrorKind.VALIDATION_ERROR,
                    "errors": serializer.errors,
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            result = PaymentInitiator.initiate(serializer.to_request())
        except BaseApplicationError as e:
            logger.exception(
                "Payment initiation fault",
                extra={"txnid": serializer.validated_data["txnid"]},
            )
            return Response(
                {
                    "success": False,
                    "error": "Payment initiation failed. Please try again later.",
                    "error_code": ErrorKind.INTERNAL_ERROR,
                    "details": {"reason": e.error_code},
                },
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        if result.success:
            return Response(
                {"success": True, "data": result.data.to_dict()},
                status=status.HTTP_200_OK,
            )

        http_status = ErrorKind(result.error_code).http_status
        return Response(result.to_response(), status=http_status)


class TransactionDetailView(APIView):
    """
    Look up a transaction by txnid.

    GET /api/v1/payments/transactions/{txnid}/

    Response:
        200 OK: Transaction status and gateway references
        404 Not Found: Unknown txnid
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_payment_transaction",
        summary="Get transaction status",
        responses={
            200: OpenApiResponse(response=PaymentTransactionSerializer, description="Transaction"),
            404: OpenApiResponse(description="Transaction not found"),
        },
        tags=["Payments"],
    )
    def get(self, request, txnid):
        txn = TransactionStore.get_transaction(txnid)
        if txn is None:
            return Response(
                {"error": "Transaction not found"},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(PaymentTransactionSerializer(txn).data)
