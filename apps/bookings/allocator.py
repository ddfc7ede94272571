"""Reservation allocator: atomic check-and-insert of holds."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from django.db import IntegrityError, transaction  # type: ignore

from apps.studios.models import Service
from shared.application.uow import DjangoUnitOfWork
from shared.domain.value_objects import TimeRange

from .domain.events import BookingHeld
from .errors import BookingUnavailableError, ErrorCode
from .models import Booking
from .repositories import BookingRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientInfo:
    name: str
    email: str
    phone: str = ""
    notes: str = ""


class ReservationAllocator:
    """
    Creates holds so that two non-released bookings of one studio never overlap.

    Strategy:
    1. Open a transaction and lock the studio row (SELECT FOR UPDATE), so
       competing allocations for the same studio queue up behind each other
    2. Re-run the overlap query inside that transaction
    3. Insert the booking before the transaction ends
    4. On PostgreSQL an EXCLUDE constraint on (studio, tstzrange) rejects
       any overlapping insert that still slips through; the resulting
       IntegrityError is reported as SLOT_TAKEN

    On SQLite the transaction is opened in IMMEDIATE mode (see settings),
    which serializes writers the same way.
    """

    def __init__(self, repository: BookingRepository | None = None, uow_class=DjangoUnitOfWork):
        self.repository = repository or BookingRepository()
        self.uow_class = uow_class

    def allocate(self, service: Service, start_time: datetime, client: ClientInfo) -> Booking:
        candidate = TimeRange.starting_at(start_time, service.duration)
        studio_id = service.studio_id

        try:
            with self.uow_class() as uow:
                self.repository.lock_studio(studio_id)
                if self.repository.has_overlap(studio_id, candidate):
                    raise BookingUnavailableError(ErrorCode.SLOT_TAKEN)

                with transaction.atomic():
                    booking = self.repository.create(
                        studio_id=studio_id,
                        service=service,
                        client_name=client.name,
                        client_email=client.email,
                        client_phone=client.phone,
                        notes=client.notes,
                        start_time=candidate.start,
                        end_time=candidate.end,
                        total_price=service.price,
                        currency=service.currency,
                        requires_deposit=service.requires_deposit,
                        deposit_percentage=service.deposit_percentage if service.requires_deposit else 0,
                    )
                uow.add_event(
                    BookingHeld(
                        booking_id=booking.pk,
                        studio_id=studio_id,
                        service_id=service.pk,
                        start_time=booking.start_time,
                        end_time=booking.end_time,
                        total_price=booking.total_money,
                        aggregate_id=booking.pk,
                    )
                )
        except IntegrityError as exc:
            logger.info(f"Allocation for studio {studio_id} at {candidate} lost to a concurrent booking: {exc}")
            raise BookingUnavailableError(ErrorCode.SLOT_TAKEN) from exc
        except BookingUnavailableError:
            logger.info(f"Allocation for studio {studio_id} at {candidate} rejected: slot taken")
            raise

        logger.info(f"Booking {booking.pk} held for studio {studio_id} at {candidate}")
        return booking
