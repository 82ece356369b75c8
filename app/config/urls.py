"""
URL configuration for the payment broker.

URL Structure:
    /admin/                          - Django admin interface
    /health/                         - Health check endpoint (load balancers, Docker)
    /api/schema/                     - OpenAPI schema
    /api/docs/                       - ReDoc API documentation
    /api/v1/auth/token/              - Obtain JWT pair
    /api/v1/auth/token/refresh/      - Refresh JWT access token
    /api/v1/payments/                - Payment endpoints
        initiate/                    - Start a payment with the gateway (POST)
        transactions/{txnid}/        - Transaction status lookup (GET)
        webhooks/gateway/            - Gateway server-to-server callback (POST)
        redirect/success/            - Payer browser return, success variant (POST)
        redirect/failure/            - Payer browser return, failure variant (POST)

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
api_v1_patterns = [
    path("auth/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("payments/", include("payments.urls")),
]

urlpatterns = [
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("admin/", admin.site.urls),
    path("health/", health_check, name="health_check"),
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Payment Broker Admin"
admin.site.site_title = "Payment Broker"
admin.site.index_title = "Transactions and merchants"
