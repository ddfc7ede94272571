from decimal import Decimal

import pytest

from apps.bookings.domain.events import BookingConfirmed, BookingExpired, PaymentSessionAttached
from apps.bookings.errors import IllegalTransitionError, StaleVersionError
from apps.bookings.models import Booking
from apps.bookings.state_machine import BookingStateMachine

from conftest import MONDAY, NOW, at

pytestmark = pytest.mark.django_db

S = Booking.Status
P = Booking.PaymentStatus


def test_transition_bumps_version(service, make_booking):
    booking = make_booking(service, at(MONDAY, 10))

    updated = BookingStateMachine().transition(booking.pk, 1, S.CONFIRMED, P.PAID)

    assert (updated.status, updated.payment_status, updated.version) == (S.CONFIRMED, P.PAID, 2)


def test_stale_version_is_rejected_without_writing(service, make_booking):
    booking = make_booking(service, at(MONDAY, 10))
    machine = BookingStateMachine()
    machine.transition(booking.pk, 1, S.CONFIRMED, P.PAID)

    with pytest.raises(StaleVersionError):
        machine.transition(booking.pk, 1, S.CANCELLED, P.PAID)

    booking.refresh_from_db()
    assert (booking.status, booking.version) == (S.CONFIRMED, 2)


def test_illegal_transition_leaves_booking_untouched(service, make_booking):
    booking = make_booking(service, at(MONDAY, 10), status=S.CANCELLED, payment_status=P.EXPIRED)

    with pytest.raises(IllegalTransitionError):
        BookingStateMachine().transition(booking.pk, 1, S.CONFIRMED, P.PAID)

    booking.refresh_from_db()
    assert (booking.status, booking.payment_status, booking.version) == (S.CANCELLED, P.EXPIRED, 1)


def test_compare_and_set_loses_to_concurrent_write(service, make_booking):
    """A write that lands between our read and our update makes the update stale."""

    booking = make_booking(service, at(MONDAY, 10))
    machine = BookingStateMachine()
    read = machine.repository.get

    def read_then_cancel(booking_id):
        booking = read(booking_id)
        Booking.objects.filter(pk=booking_id).update(version=booking.version + 1, status=S.CANCELLED)
        return booking

    machine.repository.get = read_then_cancel

    with pytest.raises(StaleVersionError):
        machine.transition(booking.pk, 1, S.CONFIRMED, P.PAID)

    booking.refresh_from_db()
    assert (booking.status, booking.payment_status, booking.version) == (S.CANCELLED, P.PENDING, 2)


def test_cancellation_records_reason_and_time(service, make_booking):
    booking = make_booking(service, at(MONDAY, 10))

    updated = BookingStateMachine().transition(
        booking.pk, 1, S.CANCELLED, P.EXPIRED, reason="hold expired", now=NOW
    )

    assert updated.cancelled_at == NOW
    assert updated.cancellation_reason == "hold expired"


def test_changes_are_written_with_the_transition(deposit_service, make_booking):
    booking = make_booking(deposit_service, at(MONDAY, 10))

    updated = BookingStateMachine().transition(
        booking.pk, 1, S.CONFIRMED, P.DEPOSIT_PAID, changes={"deposit_amount_paid": Decimal("30.00")}
    )

    assert updated.deposit_amount_paid == Decimal("30.00")


def test_only_transition_fields_are_writable(service, make_booking):
    booking = make_booking(service, at(MONDAY, 10))

    with pytest.raises(ValueError):
        BookingStateMachine().transition(booking.pk, 1, S.CONFIRMED, P.PAID, changes={"total_price": 0})


def test_events_published_after_commit(service, make_booking, django_capture_on_commit_callbacks):
    booking = make_booking(service, at(MONDAY, 10))
    machine = BookingStateMachine()

    with django_capture_on_commit_callbacks() as callbacks:
        machine.transition(booking.pk, 1, S.CONFIRMED, P.PAID)
        machine.transition(booking.pk, 2, S.CANCELLED, P.REFUNDED)

    published = [event for callback in callbacks for event in callback.args[0]]
    assert isinstance(published[0], BookingConfirmed)
    assert [type(e).__name__ for e in published[1:]] == ["BookingCancelled", "PaymentRefunded"]


def test_expiry_event(service, make_booking, django_capture_on_commit_callbacks):
    booking = make_booking(service, at(MONDAY, 10))

    with django_capture_on_commit_callbacks() as callbacks:
        BookingStateMachine().transition(booking.pk, 1, S.CANCELLED, P.EXPIRED, reason="gone")

    assert isinstance(callbacks[0].args[0][0], BookingExpired)


def test_attach_payment_session_once(service, make_booking, django_capture_on_commit_callbacks):
    booking = make_booking(service, at(MONDAY, 10), payment_session_ref=None)
    machine = BookingStateMachine()

    with django_capture_on_commit_callbacks() as callbacks:
        updated = machine.attach_payment_session(booking.pk, 1, "cs_123")

    assert updated.payment_session_ref == "cs_123"
    assert updated.version == 2
    assert isinstance(callbacks[0].args[0][0], PaymentSessionAttached)
    with pytest.raises(IllegalTransitionError):
        machine.attach_payment_session(booking.pk, 2, "cs_456")


def test_can_transition_reads_current_state(deposit_service, make_booking):
    booking = make_booking(deposit_service, at(MONDAY, 10))
    machine = BookingStateMachine()

    assert machine.can_transition(booking, S.CONFIRMED, P.DEPOSIT_PAID)
    assert not machine.can_transition(booking, S.IN_PROGRESS, P.PAID)
