"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from .models import Booking
from .repositories import BookingRepository
from .sweeper import HoldExpirySweeper, advance_bookings

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (scheduled by Celery Beat, see config/celery.py)
# ============================================================================

@shared_task(name="bookings.expire_stale_holds", soft_time_limit=50)
def expire_stale_holds() -> dict[str, int]:
    """
    Cancel holds that were not paid within the hold TTL.

    Runs every minute. Each expired hold ends up (cancelled, expired) and
    its interval can be booked again.

    Returns:
        dict: {"expired": holds expired, "skipped": holds that moved on meanwhile}
    """
    return HoldExpirySweeper().sweep()


@shared_task(name="bookings.start_due_bookings", soft_time_limit=240)
def start_due_bookings() -> dict[str, int]:
    """Move confirmed bookings whose start time has passed to in_progress."""

    now = timezone.now()
    result = advance_bookings(BookingRepository().due_to_start(now), Booking.Status.IN_PROGRESS, now=now)
    if result["updated"]:
        logger.info(f"Started {result['updated']} bookings")
    return result


@shared_task(name="bookings.complete_finished_bookings", soft_time_limit=240)
def complete_finished_bookings() -> dict[str, int]:
    """Move in_progress bookings whose end time has passed to completed."""

    now = timezone.now()
    result = advance_bookings(BookingRepository().due_to_complete(now), Booking.Status.COMPLETED, now=now)
    if result["updated"]:
        logger.info(f"Completed {result['updated']} bookings")
    return result
