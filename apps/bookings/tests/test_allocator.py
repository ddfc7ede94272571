import threading
from datetime import timedelta
from decimal import Decimal

import pytest
from django.db import connection

from apps.bookings.allocator import ClientInfo, ReservationAllocator
from apps.bookings.conflicts import ConflictDetector
from apps.bookings.domain.events import BookingHeld
from apps.bookings.errors import BookingUnavailableError, ErrorCode
from apps.bookings.models import Booking

from conftest import MONDAY, NOW, at

CLIENT = ClientInfo(name="Ada Client", email="ada@example.com", phone="+100000000")


@pytest.mark.django_db
def test_allocate_creates_pending_hold_with_snapshot(deposit_service, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks() as callbacks:
        booking = ReservationAllocator().allocate(deposit_service, at(MONDAY, 10), CLIENT)

    assert booking.status == Booking.Status.PENDING_PAYMENT
    assert booking.payment_status == Booking.PaymentStatus.PENDING
    assert booking.version == 1
    assert booking.end_time - booking.start_time == timedelta(minutes=60)
    assert booking.total_price == deposit_service.price
    assert booking.requires_deposit
    assert booking.deposit_percentage == 30
    assert booking.amount_due.amount == deposit_service.price * 30 / 100
    assert len(callbacks) == 1
    assert isinstance(callbacks[0].args[0][0], BookingHeld)


@pytest.mark.django_db
def test_price_change_does_not_touch_existing_booking(service):
    booking = ReservationAllocator().allocate(service, at(MONDAY, 10), CLIENT)
    service.price = service.price * 2
    service.duration_minutes = 120
    service.save()

    booking.refresh_from_db()
    assert booking.total_price == Decimal("100.00")
    assert booking.end_time == at(MONDAY, 11)


@pytest.mark.django_db
def test_check_then_allocate_race_is_lost_with_slot_taken(service):
    """Both requests pass the advisory check; only the first insert wins."""

    detector = ConflictDetector()
    allocator = ReservationAllocator()
    assert detector.check(service, at(MONDAY, 10), now=NOW).available
    assert detector.check(service, at(MONDAY, 10, 30), now=NOW).available

    allocator.allocate(service, at(MONDAY, 10), CLIENT)
    with pytest.raises(BookingUnavailableError) as excinfo:
        allocator.allocate(service, at(MONDAY, 10, 30), CLIENT)

    assert excinfo.value.code == ErrorCode.SLOT_TAKEN
    assert Booking.objects.count() == 1


@pytest.mark.django_db
def test_released_interval_can_be_allocated_again(service):
    allocator = ReservationAllocator()
    first = allocator.allocate(service, at(MONDAY, 10), CLIENT)
    Booking.objects.filter(pk=first.pk).update(
        status=Booking.Status.CANCELLED, payment_status=Booking.PaymentStatus.EXPIRED
    )

    second = allocator.allocate(service, at(MONDAY, 10, 30), CLIENT)

    assert second.pk != first.pk


@pytest.mark.django_db(transaction=True)
def test_concurrent_allocations_admit_exactly_one(service):
    starts = [at(MONDAY, 10, minute) for minute in range(0, 60, 10)]
    barrier = threading.Barrier(len(starts))
    outcomes = []

    def attempt(start):
        try:
            barrier.wait()
            ReservationAllocator().allocate(service, start, CLIENT)
            outcomes.append("ok")
        except BookingUnavailableError as exc:
            outcomes.append(exc.code)
        finally:
            connection.close()

    threads = [threading.Thread(target=attempt, args=(start,)) for start in starts]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count(ErrorCode.SLOT_TAKEN) == len(starts) - 1
    assert Booking.objects.count() == 1
