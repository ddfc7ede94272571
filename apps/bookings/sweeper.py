"""Expiry of unpaid holds and time-driven session transitions."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from django.db.models import QuerySet  # type: ignore
from django.utils import timezone  # type: ignore

from .errors import IllegalTransitionError, StaleVersionError
from .models import Booking, hold_ttl
from .repositories import BookingRepository
from .state_machine import BookingStateMachine

logger = logging.getLogger(__name__)


class HoldExpirySweeper:
    """Moves holds older than the hold TTL to (cancelled, expired).

    A hold confirmed by a webhook between our read and our write fails
    with StaleVersionError; that booking is no longer stale, so it is
    counted as skipped.
    """

    def __init__(
        self,
        repository: BookingRepository | None = None,
        state_machine: BookingStateMachine | None = None,
        ttl: timedelta | None = None,
    ):
        self.repository = repository or BookingRepository()
        self.state_machine = state_machine or BookingStateMachine(self.repository)
        self.ttl = ttl

    def sweep(self, *, now: datetime | None = None) -> dict[str, int]:
        now = now or timezone.now()
        cutoff = now - (self.ttl or hold_ttl())
        expired = skipped = 0

        for booking_id, version in list(self.repository.stale_holds(cutoff).values_list("pk", "version")):
            try:
                self.state_machine.transition(
                    booking_id,
                    version,
                    Booking.Status.CANCELLED,
                    Booking.PaymentStatus.EXPIRED,
                    reason="hold expired before payment",
                    now=now,
                )
            except StaleVersionError:
                logger.info(f"Hold {booking_id} changed while expiring, leaving it alone")
                skipped += 1
                continue
            except IllegalTransitionError:
                skipped += 1
                continue
            expired += 1

        if expired:
            logger.info(f"Expired {expired} stale holds")
        return {"expired": expired, "skipped": skipped}


def advance_bookings(
    bookings: QuerySet[Booking],
    target_status: str,
    *,
    state_machine: BookingStateMachine | None = None,
    now: datetime | None = None,
) -> dict[str, int]:
    """Move each booking in ``bookings`` to ``target_status`` keeping its payment status."""

    state_machine = state_machine or BookingStateMachine()
    updated = skipped = 0
    for booking_id, version, payment_status in list(bookings.values_list("pk", "version", "payment_status")):
        try:
            state_machine.transition(booking_id, version, target_status, payment_status, now=now)
        except (StaleVersionError, IllegalTransitionError) as exc:
            logger.info(f"Booking {booking_id} not moved to {target_status}: {exc}")
            skipped += 1
            continue
        updated += 1
    return {"updated": updated, "skipped": skipped}
