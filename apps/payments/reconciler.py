"""
Payment Event Reconciler

Applies gateway events to bookings. Deliveries may be duplicated and may
arrive in any order; correctness comes from the ledger (one application
per event_id) and the booking version check, never from arrival order.

Processing of one event:
1. Record it in the ledger (own transaction, committed before the ack)
2. Skip if the ledger row is already applied
3. Resolve the booking by payment session reference
4. Decide the target (status, payment_status) from the event
5. Apply through the state machine and mark the ledger row applied, both
   in one transaction; on a version conflict re-read once and retry

A refund that arrives before any payment is recorded stays unapplied in
the ledger as deferred. Each applied payment replays the deferred rows of
its session.

A payment that arrives after its session expired is dropped: expired is
terminal, so (session_expired, session_completed) ends differently
depending on which comes first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from django.db import transaction

from apps.bookings.domain.transitions import State
from apps.bookings.errors import IllegalTransitionError, StaleVersionError
from apps.bookings.models import Booking
from apps.bookings.repositories import BookingRepository
from apps.bookings.state_machine import BookingStateMachine
from shared.domain.value_objects import Money

from .events import (
    AnyGatewayEvent,
    PaymentFailed,
    PaymentSucceeded,
    RefundIssued,
    SessionCompleted,
    SessionExpired,
)
from .ledger import PaymentEventLedger
from .models import PaymentEvent

logger = logging.getLogger(__name__)

Status = Booking.Status
PaymentStatus = Booking.PaymentStatus
Outcome = PaymentEvent.Outcome

PAID_STATUSES = (PaymentStatus.DEPOSIT_PAID, PaymentStatus.PAID)


@dataclass(frozen=True)
class Decision:
    """What an event asks of a booking. ``target`` is None when nothing should change."""

    target: State | None = None
    changes: dict[str, Any] = field(default_factory=dict)
    note: str = ""
    rejected: bool = False
    deferred: bool = False

    @classmethod
    def noop(cls, note: str) -> 'Decision':
        return cls(note=note)

    @classmethod
    def reject(cls, note: str) -> 'Decision':
        return cls(note=note, rejected=True)

    @classmethod
    def defer(cls, note: str) -> 'Decision':
        return cls(note=note, deferred=True)


@dataclass(frozen=True)
class ReconcileResult:
    outcome: str
    booking_id: int | None = None
    duplicate: bool = False


class PaymentEventReconciler:
    def __init__(
        self,
        ledger: PaymentEventLedger | None = None,
        repository: BookingRepository | None = None,
        state_machine: BookingStateMachine | None = None,
    ):
        self.ledger = ledger or PaymentEventLedger()
        self.repository = repository or BookingRepository()
        self.state_machine = state_machine or BookingStateMachine(self.repository)

    # ----- decisions -----

    def decide(self, booking: Booking, event: AnyGatewayEvent) -> Decision:
        if isinstance(event, (SessionCompleted, PaymentSucceeded)):
            return self._decide_payment(booking, event.amount)

        if isinstance(event, SessionExpired):
            if booking.status != Status.PENDING_PAYMENT:
                return Decision.noop(f"session expired while booking is {booking.status}")
            return Decision(target=State(Status.CANCELLED, PaymentStatus.EXPIRED), note="payment session expired")

        if isinstance(event, PaymentFailed):
            # The hold stays until it expires so the client can retry payment
            return Decision.noop(f"payment failed: {event.failure_message or 'no reason given'}")

        if isinstance(event, RefundIssued):
            if booking.payment_status == PaymentStatus.REFUNDED:
                return Decision.noop("already refunded")
            if booking.payment_status == PaymentStatus.PENDING and booking.status == Status.PENDING_PAYMENT:
                return Decision.defer("refund arrived before the payment it refunds")
            status = booking.status
            if status in (Status.PENDING_PAYMENT, Status.CONFIRMED):
                status = Status.CANCELLED
            return Decision(target=State(status, PaymentStatus.REFUNDED), note="payment refunded")

        return Decision.reject(f"no rule for {type(event).__name__}")

    def _decide_payment(self, booking: Booking, amount: Money) -> Decision:
        if amount.currency != booking.currency.upper():
            return Decision.reject(f"currency {amount.currency} does not match booking currency {booking.currency}")

        if booking.payment_status == PaymentStatus.PAID:
            return Decision.noop("already paid")

        status = Status.CONFIRMED if booking.status == Status.PENDING_PAYMENT else booking.status

        if amount.amount >= booking.total_price:
            return Decision(target=State(status, PaymentStatus.PAID), note="paid in full")

        if booking.payment_status == PaymentStatus.DEPOSIT_PAID:
            # First deposit wins; later partial amounts are not added up
            return Decision.noop("deposit already recorded")

        if amount < booking.deposit_due:
            return Decision.reject(f"amount {amount} is below the deposit due {booking.deposit_due}")

        return Decision(
            target=State(status, PaymentStatus.DEPOSIT_PAID),
            changes={"deposit_amount_paid": amount.amount},
            note="deposit paid",
        )

    # ----- processing -----

    def reconcile(self, event: AnyGatewayEvent, payload: dict | None = None, *, now: datetime | None = None) -> ReconcileResult:
        entry, created = self.ledger.record(event, payload)
        if entry.applied:
            logger.info(f"Payment event {event.event_id} already applied ({entry.outcome}), skipping")
            return ReconcileResult(entry.outcome, duplicate=True)
        if not created:
            logger.info(f"Payment event {event.event_id} seen before but not applied, processing again")

        booking = self.repository.get_by_session_ref(event.session_ref)
        if booking is None:
            logger.warning(
                f"Payment event {event.event_id} ({event.event_type}) references unknown session {event.session_ref}"
            )
            self.ledger.mark_applied(entry, Outcome.UNKNOWN_BOOKING, now=now)
            return ReconcileResult(Outcome.UNKNOWN_BOOKING)

        decision = self.decide(booking, event)
        if decision.deferred:
            return self._defer(entry, booking, event, payload, decision, now)
        if decision.target is None:
            return self._finish_without_change(entry, booking, decision, now)

        for attempt in (1, 2):
            if State.of(booking) == decision.target:
                return self._finish_without_change(entry, booking, Decision.noop("booking already in target state"), now)
            try:
                with transaction.atomic():
                    booking = self.state_machine.transition(
                        booking.pk,
                        booking.version,
                        decision.target.status,
                        decision.target.payment_status,
                        changes=decision.changes,
                        reason=decision.note,
                        now=now,
                    )
                    self.ledger.mark_applied(entry, Outcome.APPLIED, decision.note, now=now)
            except StaleVersionError:
                if attempt == 2:
                    break
                logger.info(f"Booking {booking.pk} changed while applying {event.event_id}, retrying once")
                booking = self.repository.get(booking.pk)
                continue
            except IllegalTransitionError as exc:
                self.ledger.mark_applied(entry, Outcome.ILLEGAL, str(exc), now=now)
                return ReconcileResult(Outcome.ILLEGAL, booking.pk)

            logger.info(f"Payment event {event.event_id} ({event.event_type}) applied to booking {booking.pk}")
            if decision.target.payment_status in PAID_STATUSES:
                self._replay_deferred(event.session_ref, now)
            return ReconcileResult(Outcome.APPLIED, booking.pk)

        logger.warning(
            f"Dropping payment event {event.event_id} for booking {booking.pk}: version conflict persisted after retry"
        )
        self.ledger.mark_applied(entry, Outcome.ILLEGAL, "version conflict persisted", now=now)
        return ReconcileResult(Outcome.ILLEGAL, booking.pk)

    def _defer(self, entry: PaymentEvent, booking: Booking, event, payload, decision: Decision, now) -> ReconcileResult:
        self.ledger.mark_deferred(entry, decision.note)
        logger.info(f"Payment event {entry.event_id} deferred for booking {booking.pk}: {decision.note}")
        # The payment may have been applied after the booking was read
        if self.repository.get(booking.pk).payment_status in PAID_STATUSES:
            return self.reconcile(event, payload, now=now)
        return ReconcileResult(Outcome.DEFERRED, booking.pk)

    def _replay_deferred(self, booking_ref: str, now) -> None:
        for entry in self.ledger.deferred_for(booking_ref):
            logger.info(f"Replaying deferred payment event {entry.event_id}")
            self.reconcile(self.ledger.event_for(entry), now=now)

    def _finish_without_change(self, entry: PaymentEvent, booking: Booking, decision: Decision, now) -> ReconcileResult:
        if decision.rejected:
            logger.warning(f"Payment event {entry.event_id} rejected for booking {booking.pk}: {decision.note}")
            outcome = Outcome.ILLEGAL
        else:
            logger.info(f"Payment event {entry.event_id} needs no change on booking {booking.pk}: {decision.note}")
            outcome = Outcome.NOOP
        self.ledger.mark_applied(entry, outcome, decision.note, now=now)
        return ReconcileResult(outcome, booking.pk)


def get_reconciler() -> PaymentEventReconciler:
    return PaymentEventReconciler()
