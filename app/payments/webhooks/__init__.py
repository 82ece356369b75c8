"""
Callback endpoints for the payment gateway.

Webhooks and browser redirects are recorded, authenticated and applied
synchronously through payments.services.CallbackIngestor.

Usage:
    # In urls.py
    from payments.webhooks.views import gateway_webhook

    urlpatterns = [
        path("webhooks/gateway/", gateway_webhook, name="gateway_webhook"),
    ]
"""

from payments.webhooks.views import gateway_webhook, redirect_failure, redirect_success

__all__ = [
    "gateway_webhook",
    "redirect_failure",
    "redirect_success",
]
