"""
Merchant model: who a payment is routed to, and the salt used to sign it.

The broker only reads merchants. UDF1 of a transaction names the merchant;
its salt replaces GATEWAY_SALT in both hash directions and its status gates
payment initiation.
"""

from __future__ import annotations

from django.db import models

from core.models import BaseModel, UUIDPrimaryKeyMixin

from payments.state_machines import MerchantStatus


class Merchant(UUIDPrimaryKeyMixin, BaseModel):
    """
    A merchant onboarded on the broker.

    Fields:
        merchant_id: Public identifier carried in UDF1
        name: Display name
        salt: Shared secret (stored in plaintext, one per merchant)
        status: ACTIVE merchants may initiate payments
    """

    merchant_id = models.CharField(
        max_length=64,
        unique=True,
        help_text="Public merchant identifier, sent to the gateway as udf1",
    )
    name = models.CharField(max_length=255)
    salt = models.CharField(
        max_length=255,
        help_text="Shared secret used as the last field of both hash directions",
    )
    status = models.CharField(
        max_length=10,
        choices=MerchantStatus.choices,
        default=MerchantStatus.ACTIVE,
        db_index=True,
    )

    class Meta:
        ordering = ["merchant_id"]
        verbose_name = "Merchant"
        verbose_name_plural = "Merchants"

    def __str__(self) -> str:
        return f"Merchant({self.merchant_id}, {self.status})"

    @property
    def is_active(self) -> bool:
        return self.status == MerchantStatus.ACTIVE
