"""
Gateway callback endpoints.

The gateway reports outcomes two ways, both form-encoded POSTs carrying the
same fields and the same reverse digest:

- Webhook (server to server): always answered ``200 OK``. The gateway
  retries on anything else, and a retry of a delivery we could not process
  would fail the same way again.
- Browser redirect (surl / furl): the payer lands on an outcome page.

Both go through CallbackIngestor, which stores the delivery, verifies the
digest and upserts the transaction.

Usage:
    # In urls.py
    from payments.webhooks.views import gateway_webhook, redirect_failure, redirect_success

    urlpatterns = [
        path("webhooks/gateway/", gateway_webhook, name="gateway_webhook"),
        path("redirect/success/", redirect_success, name="redirect_success"),
        path("redirect/failure/", redirect_failure, name="redirect_failure"),
    ]
"""

from __future__ import annotations

import logging

from django.http import HttpRequest, HttpResponse
from django.shortcuts import render
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from payments.services import CallbackIngestor
from payments.state_machines import CallbackChannel, TransactionStatus

logger = logging.getLogger(__name__)

OUTCOME_TEMPLATE = "payments/outcome.html"

SUCCESS_TITLE = "Payment Successful"
FAILURE_TITLE = "Payment Failed"
PENDING_TITLE = "Payment Pending"
ERROR_TITLE = "Payment Processing Error"

# A verified outcome is titled by the stored status, not by the redirect used
STATUS_TITLES = {
    TransactionStatus.SUCCESS: SUCCESS_TITLE,
    TransactionStatus.FAILED: FAILURE_TITLE,
    TransactionStatus.PROCESSING: PENDING_TITLE,
}

SUSPICIOUS_SUCCESS_MESSAGE = (
    "Payment received but hash verification failed. Please contact support."
)
SUSPICIOUS_FAILURE_MESSAGE = (
    "Payment failed and hash verification also failed. "
    "Possible tampering detected. Please contact support."
)
ERROR_MESSAGE = (
    "An error occurred while processing your payment. Please contact support."
)


@csrf_exempt
@require_POST
def gateway_webhook(request: HttpRequest) -> HttpResponse:
    """
    Receive a server-to-server gateway callback.

    Returns:
        HttpResponse "OK" with status 200, whatever happened internally.
        Failures are logged and recorded on the CallbackEvent.
    """
    try:
        result = CallbackIngestor.ingest(request.POST, channel=CallbackChannel.WEBHOOK)
        if result.success:
            logger.info(
                "Gateway webhook processed",
                extra={
                    "txnid": result.data.txnid,
                    "status": result.data.status,
                    "hash_verified": result.data.hash_verified,
                },
            )
        else:
            logger.warning(
                f"Gateway webhook not applied: {result.error}",
                extra={"error_code": result.error_code},
            )
    except Exception:
        logger.exception("Unexpected error handling gateway webhook")

    return HttpResponse("OK", status=200)


@csrf_exempt
@require_POST
def redirect_success(request: HttpRequest) -> HttpResponse:
    """Outcome page for the gateway's success redirect (surl)."""
    return _render_outcome(
        request,
        channel=CallbackChannel.REDIRECT_SUCCESS,
        title=SUCCESS_TITLE,
        suspicious_message=SUSPICIOUS_SUCCESS_MESSAGE,
    )


@csrf_exempt
@require_POST
def redirect_failure(request: HttpRequest) -> HttpResponse:
    """Outcome page for the gateway's failure redirect (furl)."""
    return _render_outcome(
        request,
        channel=CallbackChannel.REDIRECT_FAILURE,
        title=FAILURE_TITLE,
        suspicious_message=SUSPICIOUS_FAILURE_MESSAGE,
    )


def _render_outcome(
    request: HttpRequest,
    channel: str,
    title: str,
    suspicious_message: str,
) -> HttpResponse:
    payment_data = {name: request.POST.get(name) for name in request.POST.keys()}
    payment_data.pop("hash", None)
    context = {
        "title": ERROR_TITLE,
        "message": ERROR_MESSAGE,
        "payment_data": payment_data,
        "transaction": None,
        "hash_verified": False,
        "suspicious_activity": False,
    }

    try:
        result = CallbackIngestor.ingest(request.POST, channel=channel)
    except Exception:
        logger.exception("Unexpected error handling gateway redirect", extra={"channel": channel})
        result = None

    if result is not None and result.success:
        outcome = result.data
        if outcome.hash_verified:
            title = STATUS_TITLES.get(outcome.status, title)
        context.update(
            title=title,
            message="",
            transaction=outcome.transaction,
            hash_verified=outcome.hash_verified,
        )
        if outcome.suspicious:
            logger.warning(
                "Redirect with failed hash verification",
                extra={"txnid": outcome.txnid, "channel": channel},
            )
            context.update(suspicious_activity=True, message=suspicious_message)
    elif result is not None:
        logger.warning(
            f"Gateway redirect not applied: {result.error}",
            extra={"channel": channel, "error_code": result.error_code},
        )

    return render(request, OUTCOME_TEMPLATE, context)
