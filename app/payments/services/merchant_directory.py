"""
Merchant lookup and gateway credential resolution.

UDF1 carries the merchant identifier through the gateway round-trip. The
merchant's salt signs both directions for its transactions; without a
merchant the configured GATEWAY_SALT is used. The gateway key is always
GATEWAY_KEY.

Usage:
    from payments.services import MerchantDirectory

    merchant = MerchantDirectory.lookup("M123")
    credentials = MerchantDirectory.resolve_credentials(merchant)
    digest = hashing.build_forward_digest(credentials.key, ..., salt=credentials.salt)
"""

from __future__ import annotations

from dataclasses import dataclass

from django.conf import settings

from core.services import BaseService

from payments.exceptions import GatewayConfigurationError
from payments.models import Merchant


@dataclass(frozen=True)
class GatewayCredentials:
    """Key and salt used to sign one transaction."""

    key: str
    salt: str
    merchant_id: str = ""

    def __repr__(self) -> str:
        return f"GatewayCredentials(merchant_id={self.merchant_id!r})"


class MerchantDirectory(BaseService):
    """Read-only access to merchants for hashing and the active-status gate."""

    @classmethod
    def lookup(cls, merchant_id: str | None) -> Merchant | None:
        if not merchant_id:
            return None
        return Merchant.objects.filter(merchant_id=merchant_id).first()

    @classmethod
    def resolve_credentials(cls, merchant: Merchant | None = None) -> GatewayCredentials:
        """
        Key and salt for a transaction routed to ``merchant``.

        Raises:
            GatewayConfigurationError: No gateway key, or no salt from either
                the merchant or settings
        """
        key = getattr(settings, "GATEWAY_KEY", "")
        salt = merchant.salt if merchant and merchant.salt else getattr(settings, "GATEWAY_SALT", "")

        missing = [name for name, value in (("GATEWAY_KEY", key), ("GATEWAY_SALT", salt)) if not value]
        if missing:
            cls.get_logger().critical(
                "Gateway credentials are not configured",
                extra={"missing": missing},
            )
            raise GatewayConfigurationError(
                "Gateway credentials are not configured",
                details={"missing": missing},
            )

        return GatewayCredentials(
            key=key,
            salt=salt,
            merchant_id=merchant.merchant_id if merchant else "",
        )
