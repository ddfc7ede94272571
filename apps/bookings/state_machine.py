"""Booking state machine with optimistic versioning."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from django.utils import timezone  # type: ignore

from shared.application.uow import DjangoUnitOfWork

from .domain.events import PaymentSessionAttached
from .domain.transitions import State, check_transition, events_for, is_legal
from .errors import IllegalTransitionError, StaleVersionError
from .models import Booking
from .repositories import BookingRepository

logger = logging.getLogger(__name__)


class BookingStateMachine:
    """Owns writes to ``status``, ``payment_status`` and ``version``.

    Every write is a compare-and-set on ``version``: callers pass the
    version they read and get StaleVersionError if someone else moved the
    booking in between. Nothing here takes a lock on the booking row.
    """

    def __init__(self, repository: BookingRepository | None = None, uow_class=DjangoUnitOfWork):
        self.repository = repository or BookingRepository()
        self.uow_class = uow_class

    def can_transition(self, booking: Booking, target_status: str, target_payment_status: str) -> bool:
        return is_legal(
            State.of(booking),
            State(target_status, target_payment_status),
            requires_deposit=booking.requires_deposit,
        )

    def transition(
        self,
        booking_id: int,
        expected_version: int,
        target_status: str,
        target_payment_status: str,
        *,
        changes: dict[str, Any] | None = None,
        reason: str = "",
        now: datetime | None = None,
    ) -> Booking:
        now = now or timezone.now()
        booking = self.repository.get(booking_id)
        if booking.version != expected_version:
            raise StaleVersionError(
                f"Booking {booking_id} is at version {booking.version}, expected {expected_version}"
            )

        target = State(target_status, target_payment_status)
        try:
            check_transition(State.of(booking), target, requires_deposit=booking.requires_deposit)
        except IllegalTransitionError as exc:
            logger.warning(f"Illegal transition for booking {booking_id} {State.of(booking)} -> {target}: {exc}")
            raise

        fields = dict(changes or {})
        fields["status"] = target_status
        fields["payment_status"] = target_payment_status
        if target_status == Booking.Status.CANCELLED and booking.status != Booking.Status.CANCELLED:
            fields["cancelled_at"] = now
            fields["cancellation_reason"] = reason[:255]

        with self.uow_class() as uow:
            if not self.repository.compare_and_set(booking_id, expected_version, fields, now=now):
                raise StaleVersionError(f"Booking {booking_id} moved past version {expected_version}")
            uow.add_events(events_for(booking, target, reason))

        logger.info(
            f"Booking {booking_id} {State.of(booking)} -> {target} (version {expected_version + 1})"
        )
        return self.repository.get(booking_id)

    def attach_payment_session(self, booking_id: int, expected_version: int, reference: str) -> Booking:
        """Store the checkout session reference on a hold."""

        booking = self.repository.get(booking_id)
        if booking.version != expected_version:
            raise StaleVersionError(
                f"Booking {booking_id} is at version {booking.version}, expected {expected_version}"
            )
        if booking.status != Booking.Status.PENDING_PAYMENT or booking.payment_session_ref:
            logger.warning(f"Refusing to attach payment session to booking {booking_id} in {State.of(booking)}")
            raise IllegalTransitionError("Payment session can only be attached once to a pending hold")

        with self.uow_class() as uow:
            if not self.repository.compare_and_set(
                booking_id, expected_version, {"payment_session_ref": reference}
            ):
                raise StaleVersionError(f"Booking {booking_id} moved past version {expected_version}")
            uow.add_event(
                PaymentSessionAttached(booking_id=booking_id, payment_session_ref=reference, aggregate_id=booking_id)
            )

        return self.repository.get(booking_id)
