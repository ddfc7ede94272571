"""Ledger access for received payment events."""

from __future__ import annotations

from datetime import datetime

from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.value_objects import Money

from .events import AMOUNT_EVENTS, EVENT_TYPES, AnyGatewayEvent, GatewayEvent, event_amount
from .models import PaymentEvent


class PaymentEventLedger:
    """Django ORM access to the PaymentEvent table."""

    def record(self, event: GatewayEvent, payload: dict | None = None) -> tuple[PaymentEvent, bool]:
        """Durably store ``event`` once; return the row and whether it is new.

        Runs in its own transaction so the row is committed before the
        webhook is acknowledged.
        """

        amount = event_amount(event)
        with transaction.atomic():
            return PaymentEvent.objects.get_or_create(
                event_id=event.event_id,
                defaults={
                    "event_type": event.event_type,
                    "booking_ref": event.session_ref,
                    "amount": amount.amount if amount else 0,
                    "currency": amount.currency if amount else "",
                    "payload": payload or {},
                },
            )

    def mark_applied(self, entry: PaymentEvent, outcome: str, note: str = "", *, now: datetime | None = None) -> None:
        entry.applied = True
        entry.outcome = outcome
        entry.note = note[:255]
        entry.applied_at = now or timezone.now()
        entry.save(update_fields=["applied", "outcome", "note", "applied_at"])

    def mark_deferred(self, entry: PaymentEvent, note: str = "") -> None:
        """Park ``entry`` unapplied until the payment it depends on is applied."""

        entry.outcome = PaymentEvent.Outcome.DEFERRED
        entry.note = note[:255]
        entry.save(update_fields=["outcome", "note"])

    def deferred_for(self, booking_ref: str) -> list[PaymentEvent]:
        return list(
            PaymentEvent.objects.filter(
                booking_ref=booking_ref,
                applied=False,
                outcome=PaymentEvent.Outcome.DEFERRED,
            ).order_by("received_at", "pk")
        )

    def event_for(self, entry: PaymentEvent) -> AnyGatewayEvent:
        """Rebuild the parsed event a ledger row was recorded from."""

        event_cls = EVENT_TYPES[entry.event_type]
        fields = {
            "event_id": entry.event_id,
            "session_ref": entry.booking_ref,
            "occurred_at": entry.received_at,
        }
        if event_cls in AMOUNT_EVENTS:
            fields["amount"] = Money(entry.amount, entry.currency)
        return event_cls(**fields)

    def archive_applied_before(self, cutoff: datetime, *, now: datetime | None = None) -> int:
        return PaymentEvent.objects.filter(
            applied=True,
            archived_at__isnull=True,
            applied_at__lt=cutoff,
        ).update(archived_at=now or timezone.now())
