"""
URL configuration for the payments app.

Routes:
    - POST /initiate/ - Start a payment (JWT)
    - GET /transactions/<txnid>/ - Transaction status (JWT)
    - POST /webhooks/gateway/ - Gateway webhook (always 200 OK)
    - POST /redirect/success/ - Gateway success redirect (surl)
    - POST /redirect/failure/ - Gateway failure redirect (furl)

All routes are prefixed with /api/v1/payments/ when included in the main URLconf.

Usage:
    # In config/urls.py
    api_v1_patterns = [
        path("payments/", include("payments.urls")),
    ]
"""

from django.urls import path

from payments.views import InitiatePaymentView, TransactionDetailView
from payments.webhooks.views import gateway_webhook, redirect_failure, redirect_success

app_name = "payments"

urlpatterns = [
    # API
    path("initiate/", InitiatePaymentView.as_view(), name="initiate"),
    path("transactions/<str:txnid>/", TransactionDetailView.as_view(), name="transaction_detail"),
    # Gateway callbacks
    path("webhooks/gateway/", gateway_webhook, name="gateway_webhook"),
    path("redirect/success/", redirect_success, name="redirect_success"),
    path("redirect/failure/", redirect_failure, name="redirect_failure"),
]
