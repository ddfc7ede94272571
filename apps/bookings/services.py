"""Booking workflows exposed to the booking UI."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from django.utils import timezone  # type: ignore

from apps.payments.errors import PaymentGatewayError
from apps.payments.gateway import PaymentGateway, PaymentSession, get_payment_gateway
from apps.studios.models import Service
from apps.studios.store import AvailabilityStore

from .allocator import ClientInfo, ReservationAllocator
from .conflicts import AvailabilityResult, ConflictDetector
from .errors import BookingUnavailableError, IllegalTransitionError, ServiceNotFoundError, StaleVersionError
from .models import Booking
from .repositories import BookingRepository
from .state_machine import BookingStateMachine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HoldResult:
    booking: Booking
    session: PaymentSession

    @property
    def booking_id(self) -> int:
        return self.booking.pk

    @property
    def payment_session_ref(self) -> str:
        return self.session.reference


class BookingService:
    """Entry point for availability checks, holds and explicit cancellations.

    Collaborators are injected so tests can swap the payment gateway and
    the repositories for fakes.
    """

    def __init__(
        self,
        *,
        store: AvailabilityStore | None = None,
        repository: BookingRepository | None = None,
        detector: ConflictDetector | None = None,
        allocator: ReservationAllocator | None = None,
        state_machine: BookingStateMachine | None = None,
        gateway: PaymentGateway | None = None,
    ):
        self.store = store or AvailabilityStore()
        self.repository = repository or BookingRepository()
        self.detector = detector or ConflictDetector(self.store, self.repository)
        self.allocator = allocator or ReservationAllocator(self.repository)
        self.state_machine = state_machine or BookingStateMachine(self.repository)
        self.gateway = gateway or get_payment_gateway()

    def _service(self, studio_id: int, service_id: int) -> Service:
        service = self.store.get_service(studio_id, service_id)
        if service is None:
            raise ServiceNotFoundError()
        return service

    def check_availability(
        self, studio_id: int, service_id: int, start_time: datetime, *, now: datetime | None = None
    ) -> AvailabilityResult:
        return self.detector.check(self._service(studio_id, service_id), start_time, now=now)

    def create_hold(
        self,
        studio_id: int,
        service_id: int,
        start_time: datetime,
        client: ClientInfo,
        *,
        now: datetime | None = None,
    ) -> HoldResult:
        """Allocate a hold and open a checkout session for it.

        If the session cannot be opened the hold is cancelled right away,
        freeing the slot, and the gateway error is re-raised. A hold that
        cannot be released stays for the sweeper.
        """

        service = self._service(studio_id, service_id)
        result = self.detector.check(service, start_time, now=now)
        if not result.available:
            raise BookingUnavailableError(result.reason)

        booking = self.allocator.allocate(service, start_time, client)

        try:
            session = self.gateway.create_session(booking, booking.amount_due)
        except PaymentGatewayError:
            logger.error(f"Payment session for booking {booking.pk} failed, releasing the hold")
            try:
                self._transition_with_retry(
                    booking.pk,
                    lambda current: (Booking.Status.CANCELLED, Booking.PaymentStatus.EXPIRED),
                    reason="payment session could not be created",
                )
            except (StaleVersionError, IllegalTransitionError) as exc:
                logger.warning(f"Could not release hold {booking.pk} after the gateway failure: {exc}")
            raise

        booking = self.state_machine.attach_payment_session(booking.pk, booking.version, session.reference)
        return HoldResult(booking=booking, session=session)

    def get_booking_status(self, booking_id: int) -> dict:
        booking = self.repository.get(booking_id)
        return {
            "booking_id": booking.pk,
            "status": booking.status,
            "payment_status": booking.payment_status,
            "hold_expires_at": booking.hold_expires_at if booking.status == Booking.Status.PENDING_PAYMENT else None,
        }

    def cancel_booking(self, booking_id: int, reason: str = "") -> Booking:
        """Cancel a hold or a confirmed booking; payment state is left for the refund flow."""

        return self._transition_with_retry(
            booking_id,
            lambda booking: (Booking.Status.CANCELLED, booking.payment_status),
            reason=reason or "cancelled by studio",
        )

    def mark_no_show(self, booking_id: int, *, now: datetime | None = None) -> Booking:
        now = now or timezone.now()
        booking = self.repository.get(booking_id)
        if now < booking.start_time:
            raise IllegalTransitionError("A booking can only be marked as no-show after its start time")
        return self._transition_with_retry(
            booking_id,
            lambda current: (Booking.Status.NO_SHOW, current.payment_status),
            now=now,
        )

    def _transition_with_retry(self, booking_id: int, target_for, *, reason: str = "", now: datetime | None = None) -> Booking:
        def attempt() -> Booking:
            booking = self.repository.get(booking_id)
            status, payment_status = target_for(booking)
            return self.state_machine.transition(
                booking.pk, booking.version, status, payment_status, reason=reason, now=now
            )

        try:
            return attempt()
        except StaleVersionError:
            logger.info(f"Booking {booking_id} changed concurrently, retrying once")
            return attempt()


def get_booking_service() -> BookingService:
    return BookingService()
