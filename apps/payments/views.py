"""Payment gateway webhook intake."""

from __future__ import annotations

import json

import structlog
from django.conf import settings
from django.db import DatabaseError
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .errors import MalformedEventError, SignatureInvalidError, UnsupportedEventTypeError
from .events import parse_event
from .reconciler import get_reconciler
from .signatures import SIGNATURE_HEADER, verify_signature

logger = structlog.get_logger(__name__)


@csrf_exempt
@require_POST
def payment_webhook(request):
    """
    Receive a payment gateway event.

    Responds 2xx only once the event is recorded in the ledger, so the
    gateway keeps redelivering until then. Transition problems are
    absorbed; only an unavailable database produces a retryable 503.
    """
    try:
        verify_signature(
            request.body,
            request.headers.get(SIGNATURE_HEADER),
            settings.PAYMENT_WEBHOOK_SECRET,
            tolerance=settings.PAYMENT_WEBHOOK_TOLERANCE_SECONDS,
        )
    except SignatureInvalidError as exc:
        logger.error("payment_webhook.signature_invalid", reason=exc.detail, remote_addr=request.META.get("REMOTE_ADDR"))
        return JsonResponse(exc.as_dict(), status=401)

    try:
        payload = json.loads(request.body)
    except ValueError:
        logger.warning("payment_webhook.invalid_json")
        return JsonResponse({"detail": "Invalid JSON"}, status=400)

    try:
        event = parse_event(payload)
    except UnsupportedEventTypeError as exc:
        logger.info("payment_webhook.ignored", event_type=exc.event_type)
        return JsonResponse({"status": "ignored"}, status=200)
    except MalformedEventError as exc:
        logger.warning("payment_webhook.malformed", errors=exc.errors)
        return JsonResponse({"detail": "Malformed event", "errors": exc.errors}, status=400)

    log = logger.bind(event_id=event.event_id, event_type=event.event_type, session_ref=event.session_ref)
    try:
        result = get_reconciler().reconcile(event, payload)
    except DatabaseError as exc:
        log.error("payment_webhook.store_unavailable", error=str(exc))
        return JsonResponse({"detail": "Temporarily unavailable"}, status=503)

    log.info("payment_webhook.processed", outcome=result.outcome, duplicate=result.duplicate, booking_id=result.booking_id)
    return JsonResponse({"status": "ok", "outcome": result.outcome, "duplicate": result.duplicate}, status=200)
