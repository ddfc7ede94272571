"""Payment event ledger."""

from __future__ import annotations

from decimal import Decimal

from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class PaymentEvent(models.Model):
    """One row per distinct gateway event, written before the event is acted on.

    Append-only: rows are marked applied and later archived, never deleted.
    """

    class EventType(models.TextChoices):
        SESSION_COMPLETED = "session_completed", _("Session completed")
        SESSION_EXPIRED = "session_expired", _("Session expired")
        PAYMENT_SUCCEEDED = "payment_succeeded", _("Payment succeeded")
        PAYMENT_FAILED = "payment_failed", _("Payment failed")
        REFUND_ISSUED = "refund_issued", _("Refund issued")

    class Outcome(models.TextChoices):
        APPLIED = "applied", _("Transition applied")
        NOOP = "noop", _("Nothing to change")
        ILLEGAL = "illegal", _("Dropped as illegal transition")
        UNKNOWN_BOOKING = "unknown_booking", _("No booking for session")
        DEFERRED = "deferred", _("Waiting for the payment it refunds")

    event_id = models.CharField(max_length=255, unique=True)
    event_type = models.CharField(max_length=32, choices=EventType.choices)
    booking_ref = models.CharField(
        max_length=255,
        db_index=True,
        help_text=_("Payment session reference the event points at."),
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, blank=True)
    payload = models.JSONField(default=dict, blank=True)
    received_at = models.DateTimeField(default=timezone.now)
    applied = models.BooleanField(default=False)
    outcome = models.CharField(max_length=20, choices=Outcome.choices, blank=True)
    note = models.CharField(max_length=255, blank=True)
    applied_at = models.DateTimeField(null=True, blank=True)
    archived_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _("Payment event")
        verbose_name_plural = _("Payment events")
        ordering = ["received_at"]
        indexes = [
            models.Index(fields=["booking_ref", "received_at"], name="payment_event_ref_idx"),
            models.Index(fields=["applied", "applied_at"], name="payment_event_applied_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.event_type} {self.event_id}"
