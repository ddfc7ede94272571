"""
Booking Transition Tables

Legal moves of the two booking state fields and the rules that tie them
together. Pure functions: no database access.

status:
    pending_payment -> confirmed | cancelled
    confirmed       -> in_progress | cancelled | no_show
    in_progress     -> completed

payment_status:
    pending      -> deposit_paid | paid | expired
    deposit_paid -> paid | refunded
    paid         -> refunded

A transition may leave one field unchanged while the other moves. Moving
neither is not a transition.
"""

from dataclasses import dataclass
from typing import List

from apps.bookings.domain import events as booking_events
from apps.bookings.errors import IllegalTransitionError
from apps.bookings.models import Booking
from shared.domain.base import DomainEvent

Status = Booking.Status
PaymentStatus = Booking.PaymentStatus

STATUS_TRANSITIONS = {
    Status.PENDING_PAYMENT: {Status.CONFIRMED, Status.CANCELLED},
    Status.CONFIRMED: {Status.IN_PROGRESS, Status.CANCELLED, Status.NO_SHOW},
    Status.IN_PROGRESS: {Status.COMPLETED},
}

PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.DEPOSIT_PAID, PaymentStatus.PAID, PaymentStatus.EXPIRED},
    PaymentStatus.DEPOSIT_PAID: {PaymentStatus.PAID, PaymentStatus.REFUNDED},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
}

CONFIRMING_PAYMENT_STATUSES = {PaymentStatus.DEPOSIT_PAID, PaymentStatus.PAID}


@dataclass(frozen=True)
class State:
    status: str
    payment_status: str

    @classmethod
    def of(cls, booking: Booking) -> 'State':
        return cls(booking.status, booking.payment_status)

    def __str__(self):
        return f"({self.status}, {self.payment_status})"


def check_transition(current: State, target: State, *, requires_deposit: bool) -> None:
    """Raise IllegalTransitionError unless ``current -> target`` is allowed."""

    if current == target:
        raise IllegalTransitionError(f"Booking is already {current}")

    if target.status != current.status and target.status not in STATUS_TRANSITIONS.get(current.status, ()):
        raise IllegalTransitionError(f"status cannot move {current.status} -> {target.status}")

    if (
        target.payment_status != current.payment_status
        and target.payment_status not in PAYMENT_TRANSITIONS.get(current.payment_status, ())
    ):
        raise IllegalTransitionError(
            f"payment_status cannot move {current.payment_status} -> {target.payment_status}"
        )

    if target.status == Status.CONFIRMED and target.payment_status not in CONFIRMING_PAYMENT_STATUSES:
        raise IllegalTransitionError("A booking can only be confirmed once a deposit or full payment arrived")

    if (
        target.payment_status == PaymentStatus.DEPOSIT_PAID
        and current.payment_status != PaymentStatus.DEPOSIT_PAID
        and not requires_deposit
    ):
        raise IllegalTransitionError("Booking was made without a deposit option")


def is_legal(current: State, target: State, *, requires_deposit: bool) -> bool:
    try:
        check_transition(current, target, requires_deposit=requires_deposit)
    except IllegalTransitionError:
        return False
    return True


def events_for(booking: Booking, target: State, reason: str = '') -> List[DomainEvent]:
    """Domain events describing the move of ``booking`` to ``target``."""

    found: List[DomainEvent] = []
    common = {'booking_id': booking.pk}
    meta = {'aggregate_id': booking.pk}

    if target.status != booking.status:
        if target.status == Status.CONFIRMED:
            found.append(booking_events.BookingConfirmed(
                studio_id=booking.studio_id, payment_status=target.payment_status, **common, **meta
            ))
        elif target.status == Status.CANCELLED and target.payment_status == PaymentStatus.EXPIRED:
            found.append(booking_events.BookingExpired(studio_id=booking.studio_id, reason=reason, **common, **meta))
        elif target.status == Status.CANCELLED:
            found.append(booking_events.BookingCancelled(
                studio_id=booking.studio_id, reason=reason, previous_status=booking.status, **common, **meta
            ))
        elif target.status == Status.IN_PROGRESS:
            found.append(booking_events.BookingStarted(studio_id=booking.studio_id, **common, **meta))
        elif target.status == Status.COMPLETED:
            found.append(booking_events.BookingCompleted(studio_id=booking.studio_id, **common, **meta))
        elif target.status == Status.NO_SHOW:
            found.append(booking_events.BookingNoShow(studio_id=booking.studio_id, **common, **meta))

    if target.payment_status != booking.payment_status:
        if target.payment_status == PaymentStatus.REFUNDED:
            found.append(booking_events.PaymentRefunded(
                previous_payment_status=booking.payment_status, **common, **meta
            ))
        elif (
            target.payment_status == PaymentStatus.PAID
            and booking.payment_status == PaymentStatus.DEPOSIT_PAID
        ):
            found.append(booking_events.PaymentCompleted(**common, **meta))

    return found
