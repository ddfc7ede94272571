import pytest

from apps.bookings.domain import events as booking_events
from apps.bookings.domain.transitions import State, check_transition, events_for, is_legal
from apps.bookings.errors import IllegalTransitionError
from apps.bookings.models import Booking

S = Booking.Status
P = Booking.PaymentStatus


@pytest.mark.parametrize(
    "current, target",
    [
        (State(S.PENDING_PAYMENT, P.PENDING), State(S.CONFIRMED, P.PAID)),
        (State(S.PENDING_PAYMENT, P.PENDING), State(S.CANCELLED, P.EXPIRED)),
        (State(S.PENDING_PAYMENT, P.PENDING), State(S.CANCELLED, P.PENDING)),
        (State(S.CONFIRMED, P.DEPOSIT_PAID), State(S.CONFIRMED, P.PAID)),
        (State(S.CONFIRMED, P.PAID), State(S.IN_PROGRESS, P.PAID)),
        (State(S.CONFIRMED, P.PAID), State(S.CANCELLED, P.REFUNDED)),
        (State(S.IN_PROGRESS, P.PAID), State(S.COMPLETED, P.PAID)),
        (State(S.COMPLETED, P.PAID), State(S.COMPLETED, P.REFUNDED)),
    ],
)
def test_legal_moves(current, target):
    assert is_legal(current, target, requires_deposit=False)


@pytest.mark.parametrize(
    "current, target",
    [
        # nothing moves
        (State(S.CONFIRMED, P.PAID), State(S.CONFIRMED, P.PAID)),
        # terminal statuses never move again
        (State(S.CANCELLED, P.EXPIRED), State(S.CONFIRMED, P.PAID)),
        (State(S.COMPLETED, P.PAID), State(S.IN_PROGRESS, P.PAID)),
        # status skipping a step
        (State(S.PENDING_PAYMENT, P.PAID), State(S.IN_PROGRESS, P.PAID)),
        # payment status going backwards
        (State(S.CONFIRMED, P.PAID), State(S.CONFIRMED, P.DEPOSIT_PAID)),
        (State(S.CANCELLED, P.EXPIRED), State(S.CANCELLED, P.PAID)),
        # confirmation without money
        (State(S.PENDING_PAYMENT, P.PENDING), State(S.CONFIRMED, P.PENDING)),
    ],
)
def test_illegal_moves(current, target):
    with pytest.raises(IllegalTransitionError):
        check_transition(current, target, requires_deposit=True)


def test_deposit_only_for_deposit_bookings():
    current = State(S.PENDING_PAYMENT, P.PENDING)
    target = State(S.CONFIRMED, P.DEPOSIT_PAID)

    assert is_legal(current, target, requires_deposit=True)
    assert not is_legal(current, target, requires_deposit=False)


def test_events_for_confirmation_and_expiry():
    booking = Booking(pk=5, studio_id=2, status=S.PENDING_PAYMENT, payment_status=P.PENDING)

    confirmed = events_for(booking, State(S.CONFIRMED, P.PAID))
    assert [type(e) for e in confirmed] == [booking_events.BookingConfirmed]
    assert confirmed[0].aggregate_id == 5

    expired = events_for(booking, State(S.CANCELLED, P.EXPIRED), "hold expired")
    assert [type(e) for e in expired] == [booking_events.BookingExpired]
    assert expired[0].reason == "hold expired"


def test_events_for_refund_of_confirmed_booking():
    booking = Booking(pk=5, studio_id=2, status=S.CONFIRMED, payment_status=P.DEPOSIT_PAID)

    found = events_for(booking, State(S.CANCELLED, P.REFUNDED), "refunded")

    assert [type(e) for e in found] == [booking_events.BookingCancelled, booking_events.PaymentRefunded]
