"""Celery tasks for the payment event ledger."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from .ledger import PaymentEventLedger

logger = logging.getLogger(__name__)


@shared_task(name="payments.archive_processed_events", soft_time_limit=300)
def archive_processed_events() -> dict[str, int]:
    """
    Mark applied ledger rows older than the retention window as archived.

    Rows stay in the table; archiving only takes them out of operational
    queries.

    Returns:
        dict: {"archived": rows archived}
    """
    now = timezone.now()
    cutoff = now - timedelta(days=settings.PAYMENT_EVENT_RETENTION_DAYS)
    archived = PaymentEventLedger().archive_applied_before(cutoff, now=now)
    if archived:
        logger.info(f"Archived {archived} payment events applied before {cutoff:%Y-%m-%d}")
    return {"archived": archived}
