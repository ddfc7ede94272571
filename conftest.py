"""Shared pytest fixtures: a studio open on Mondays and its services."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest

from apps.bookings.models import Booking
from apps.payments.gateway import PaymentGateway, PaymentSession
from apps.payments.errors import PaymentGatewayError
from apps.studios.models import AvailabilityWindow, Service, Studio

# A Thursday; the Monday after it is MONDAY
NOW = datetime(2030, 1, 3, 12, 0, tzinfo=dt_timezone.utc)
MONDAY = date(2030, 1, 7)


def at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime.combine(day, time(hour, minute), tzinfo=dt_timezone.utc)


class FakeGateway(PaymentGateway):
    """Hands out sequential session references, or fails when asked to."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[tuple[int, object]] = []

    def create_session(self, booking, amount_due):
        self.calls.append((booking.pk, amount_due))
        if self.fail:
            raise PaymentGatewayError()
        reference = f"cs_test_{len(self.calls)}"
        return PaymentSession(reference=reference, checkout_url=f"https://pay.test/{reference}")


@pytest.fixture
def studio(db):
    studio = Studio.objects.create(name="Studio A", email="desk@studio-a.test", timezone="UTC")
    AvailabilityWindow.objects.create(
        studio=studio,
        weekday=AvailabilityWindow.Weekday.MONDAY,
        open_time=time(9, 0),
        close_time=time(22, 0),
    )
    return studio


@pytest.fixture
def service(studio):
    return Service.objects.create(
        studio=studio,
        name="Recording session",
        duration_minutes=60,
        price=Decimal("100.00"),
        currency="USD",
        min_advance_hours=24,
        max_advance_days=30,
    )


@pytest.fixture
def deposit_service(studio):
    return Service.objects.create(
        studio=studio,
        name="Mixing session",
        category=Service.Category.MIXING,
        duration_minutes=60,
        price=Decimal("100.00"),
        currency="USD",
        requires_deposit=True,
        deposit_percentage=30,
    )


@pytest.fixture
def make_booking(studio):
    """Insert a booking row directly, bypassing the allocator."""

    counter = iter(range(1, 1000))

    def factory(service, start_time, **fields):
        values = {
            "studio": studio,
            "service": service,
            "client_name": "Ada Client",
            "client_email": "ada@example.com",
            "start_time": start_time,
            "end_time": start_time + timedelta(minutes=service.duration_minutes),
            "total_price": service.price,
            "currency": service.currency,
            "requires_deposit": service.requires_deposit,
            "deposit_percentage": service.deposit_percentage if service.requires_deposit else 0,
            "payment_session_ref": f"cs_fixture_{next(counter)}",
        }
        values.update(fields)
        return Booking.objects.create(**values)

    return factory


@pytest.fixture
def fake_gateway():
    return FakeGateway()
