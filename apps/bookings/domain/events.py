"""
Booking Domain Events

Events raised by the allocator and the booking state machine. They are
published through the message bus after the transaction that caused them
has committed.
"""

from dataclasses import dataclass
from datetime import datetime

from shared.domain.base import DomainEvent
from shared.domain.value_objects import Money


@dataclass
class BookingHeld(DomainEvent):
    """
    Event: A slot was allocated and is waiting for payment

    Triggers:
    - Hold expiry is picked up by the periodic sweeper
    """
    booking_id: int
    studio_id: int
    service_id: int
    start_time: datetime
    end_time: datetime
    total_price: Money


@dataclass
class PaymentSessionAttached(DomainEvent):
    """Event: A checkout session was opened for a hold"""
    booking_id: int
    payment_session_ref: str


@dataclass
class BookingConfirmed(DomainEvent):
    """
    Event: Payment (deposit or full) arrived for a hold

    (pending_payment -> confirmed)
    """
    booking_id: int
    studio_id: int
    payment_status: str


@dataclass
class PaymentCompleted(DomainEvent):
    """Event: The remaining balance of a deposit booking was paid"""
    booking_id: int


@dataclass
class BookingCancelled(DomainEvent):
    """
    Event: Booking was cancelled and its slot released

    Triggers:
    - Refund handling for paid bookings (outside this service)
    """
    booking_id: int
    studio_id: int
    reason: str
    previous_status: str


@dataclass
class BookingExpired(DomainEvent):
    """Event: Hold ended without payment (pending_payment -> cancelled/expired)"""
    booking_id: int
    studio_id: int
    reason: str


@dataclass
class PaymentRefunded(DomainEvent):
    """Event: The gateway refunded what was paid for a booking"""
    booking_id: int
    previous_payment_status: str


@dataclass
class BookingStarted(DomainEvent):
    """Event: Session start time was reached (confirmed -> in_progress)"""
    booking_id: int
    studio_id: int


@dataclass
class BookingCompleted(DomainEvent):
    """Event: Session end time was reached (in_progress -> completed)"""
    booking_id: int
    studio_id: int


@dataclass
class BookingNoShow(DomainEvent):
    """Event: Client did not turn up (confirmed -> no_show)"""
    booking_id: int
    studio_id: int
