"""
PaymentInitiator: sign a payment request and obtain the hosted checkout URL.

Flow:
    1. Validate the request (txnid, firstname, email, amount > 0)
    2. Gate on the merchant named by udf1 (unknown → VALIDATION_ERROR,
       inactive → UNAUTHORIZED)
    3. Compute the forward digest and commit the INITIATED row
    4. Call the gateway; on refusal annotate the row and return the
       classified failure
    5. Store the access key, move to PROCESSING, return the payment URL

The row is committed before the gateway call, so a callback can never
arrive for a txnid the store has not seen. A row whose gateway call failed
stays INITIATED and is failed later by the reconciliation sweep.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from django.utils import timezone

from core.services import BaseService, ServiceResult

from payments import hashing
from payments.adapters import GatewayAdapter, InitiationParams
from payments.exceptions import ErrorKind, GatewayError
from payments.models.transaction import MAX_AMOUNT
from payments.services.merchant_directory import MerchantDirectory
from payments.services.transaction_store import TransactionStore


@dataclass
class InitiationRequest:
    """Payment details as submitted by the merchant integration."""

    txnid: str
    amount: Decimal | str
    productinfo: str = ""
    firstname: str = ""
    email: str = ""
    phone: str = ""
    udfs: tuple[str, ...] = field(default_factory=tuple)


@dataclass
class InitiationResult:
    txnid: str
    access_key: str
    payment_url: str

    def to_dict(self) -> dict[str, str]:
        return {
            "txnid": self.txnid,
            "access_key": self.access_key,
            "payment_url": self.payment_url,
        }


class PaymentInitiator(BaseService):
    """Entry point for starting a payment."""

    @classmethod
    def initiate(cls, request: InitiationRequest) -> ServiceResult[InitiationResult]:
        """
        Start a payment and return the URL the payer should be sent to.

        Returns:
            ServiceResult with InitiationResult on success, or a failure
            whose error_code is an ErrorKind

        Raises:
            GatewayConfigurationError: Gateway key or salt is not configured
        """
        logger = cls.get_logger()

        validation = cls.validate_required(
            txnid=request.txnid,
            firstname=request.firstname,
            email=request.email,
        )
        if validation is not None:
            return validation

        amount = cls._parse_amount(request.amount)
        if amount is None:
            return ServiceResult.failure(
                "Amount must be a positive number",
                error_code=ErrorKind.VALIDATION_ERROR,
                errors={"amount": ["Amount must be a positive number."]},
            )

        try:
            udfs = hashing.normalize_udfs(request.udfs)
        except ValueError as e:
            return ServiceResult.failure(str(e), error_code=ErrorKind.VALIDATION_ERROR)

        merchant_id = udfs[0]
        merchant = None
        if merchant_id:
            merchant = MerchantDirectory.lookup(merchant_id)
            if merchant is None:
                return ServiceResult.failure(
                    f"Unknown merchant {merchant_id}",
                    error_code=ErrorKind.VALIDATION_ERROR,
                    errors={"udf1": ["Unknown merchant."]},
                )
            if not merchant.is_active:
                logger.warning(
                    "Initiation refused for inactive merchant",
                    extra={"txnid": request.txnid, "merchant_id": merchant_id},
                )
                return ServiceResult.failure(
                    f"Merchant {merchant_id} is not active",
                    error_code=ErrorKind.UNAUTHORIZED,
                )
        else:
            logger.warning(
                "Initiation without merchant id, using default salt",
                extra={"txnid": request.txnid},
            )

        credentials = MerchantDirectory.resolve_credentials(merchant)
        digest = hashing.build_forward_digest(
            credentials.key,
            request.txnid,
            amount,
            request.productinfo,
            request.firstname,
            request.email,
            udfs=udfs,
            salt=credentials.salt,
        )

        created = TransactionStore.create_initiated(
            txnid=request.txnid,
            amount=amount,
            udfs=udfs,
            productinfo=request.productinfo,
            firstname=request.firstname,
            email=request.email,
            phone=request.phone,
            hash=digest,
            now=timezone.now(),
        )
        if not created:
            return created

        params = InitiationParams(
            key=credentials.key,
            txnid=request.txnid,
            amount=amount,
            productinfo=request.productinfo,
            firstname=request.firstname,
            email=request.email,
            phone=request.phone,
            hash=digest,
            udfs=udfs,
        )

        try:
            access_key = GatewayAdapter.initiate(params)
        except GatewayError as e:
            TransactionStore.annotate_error(request.txnid, e.gateway_message, now=timezone.now())
            logger.warning(
                "Payment initiation failed",
                extra={"txnid": request.txnid, "kind": e.kind},
            )
            return ServiceResult.failure(e.user_message, error_code=e.kind)

        TransactionStore.mark_processing(request.txnid, access_key, now=timezone.now())

        logger.info(
            "Payment initiated",
            extra={"txnid": request.txnid, "merchant_id": merchant_id},
        )
        return ServiceResult.success(
            InitiationResult(
                txnid=request.txnid,
                access_key=access_key,
                payment_url=GatewayAdapter.payment_url(access_key),
            )
        )

    @staticmethod
    def _parse_amount(value: Decimal | str | None) -> Decimal | None:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, TypeError):
            return None
        if not amount.is_finite():
            return None
        try:
            amount = amount.quantize(Decimal("0.01"))
        except InvalidOperation:
            return None
        return amount if Decimal("0") < amount <= MAX_AMOUNT else None
