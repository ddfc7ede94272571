"""Booking models."""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import Money, TimeRange


def hold_ttl() -> timedelta:
    return timedelta(minutes=settings.BOOKING_HOLD_TTL_MINUTES)


class Booking(models.Model):
    """A reservation of a studio for one service session.

    Rows are written only by the allocator (insert) and the state machine
    (versioned updates). They are never deleted.
    """

    class Status(models.TextChoices):
        PENDING_PAYMENT = "pending_payment", _("Pending payment")
        CONFIRMED = "confirmed", _("Confirmed")
        IN_PROGRESS = "in_progress", _("In progress")
        COMPLETED = "completed", _("Completed")
        CANCELLED = "cancelled", _("Cancelled")
        NO_SHOW = "no_show", _("No show")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        DEPOSIT_PAID = "deposit_paid", _("Deposit paid")
        PAID = "paid", _("Paid")
        EXPIRED = "expired", _("Expired")
        REFUNDED = "refunded", _("Refunded")

    # Statuses whose interval no longer occupies the studio
    RELEASED_STATUSES = (Status.CANCELLED, Status.NO_SHOW)

    studio = models.ForeignKey("studios.Studio", on_delete=models.PROTECT, related_name="bookings")
    service = models.ForeignKey("studios.Service", on_delete=models.PROTECT, related_name="bookings")
    client_name = models.CharField(max_length=255)
    client_email = models.EmailField()
    client_phone = models.CharField(max_length=32, blank=True)
    notes = models.TextField(blank=True)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING_PAYMENT,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    total_price = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default="USD")
    requires_deposit = models.BooleanField(
        default=False,
        help_text=_("Copied from the service when the booking was made."),
    )
    deposit_percentage = models.PositiveSmallIntegerField(default=0)
    deposit_amount_paid = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    payment_session_ref = models.CharField(max_length=255, unique=True, null=True, blank=True)
    version = models.PositiveIntegerField(default=1)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F("start_time")),
                name="booking_valid_interval",
            ),
            models.CheckConstraint(
                condition=models.Q(deposit_amount_paid__gte=0),
                name="booking_non_negative_deposit",
            ),
        ]
        indexes = [
            models.Index(fields=["studio", "start_time", "end_time"], name="booking_studio_span_idx"),
            models.Index(fields=["status", "created_at"], name="booking_status_created_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.pk} {self.studio_id} {self.start_time:%Y-%m-%d %H:%M}"

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(self.start_time, self.end_time)

    @property
    def hold_expires_at(self) -> datetime | None:
        if self.created_at is None:
            return None
        return self.created_at + hold_ttl()

    @property
    def total_money(self) -> Money:
        return Money(self.total_price, self.currency)

    @property
    def deposit_due(self) -> Money:
        return self.total_money.percentage(self.deposit_percentage)

    @property
    def amount_due(self) -> Money:
        """Amount the checkout session is opened for."""

        if self.requires_deposit:
            return self.deposit_due
        return self.total_money

