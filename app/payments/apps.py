"""
Payments app configuration.

This app provides the gateway broker:
- Keyed-hash signing and verification of gateway traffic
- Durable transaction records upserted by txnid
- Webhook and redirect callback ingestion
- Hourly reconciliation of unconfirmed transactions
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Configuration for the payments application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
