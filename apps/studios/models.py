"""Studio catalog models."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from django.conf import settings  # type: ignore
from django.core.exceptions import ValidationError  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.value_objects import Money


def validate_timezone(value: str) -> None:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(_("Unknown timezone: %(value)s"), params={"value": value}) from exc


def default_timezone() -> str:
    return settings.TIME_ZONE


class Studio(models.Model):
    """A bookable studio. All opening hours are expressed in its timezone."""

    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=32, blank=True)
    timezone = models.CharField(
        max_length=64,
        default=default_timezone,
        validators=[validate_timezone],
        help_text=_("IANA timezone name used for opening hours."),
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Studio")
        verbose_name_plural = _("Studios")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


class Service(models.Model):
    """A service sold by a studio: a fixed duration at a fixed price."""

    class Category(models.TextChoices):
        RECORDING = "recording", _("Recording")
        MIXING = "mixing", _("Mixing")
        MASTERING = "mastering", _("Mastering")
        CONSULTATION = "consultation", _("Consultation")
        OTHER = "other", _("Other")

    studio = models.ForeignKey(Studio, on_delete=models.CASCADE, related_name="services")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=20, choices=Category.choices, default=Category.RECORDING)
    duration_minutes = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="USD")
    requires_deposit = models.BooleanField(default=False)
    deposit_percentage = models.PositiveSmallIntegerField(
        default=50,
        validators=[MinValueValidator(1), MaxValueValidator(100)],
    )
    min_advance_hours = models.PositiveIntegerField(
        default=24,
        help_text=_("Bookings must start at least this many hours from now."),
    )
    max_advance_days = models.PositiveIntegerField(
        default=30,
        help_text=_("Bookings may start at most this many days from now."),
    )
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Service")
        verbose_name_plural = _("Services")
        ordering = ["studio", "name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(duration_minutes__gt=0),
                name="service_positive_duration",
            ),
            models.CheckConstraint(
                condition=models.Q(requires_deposit=False)
                | models.Q(deposit_percentage__gt=0, deposit_percentage__lte=100),
                name="service_valid_deposit_percentage",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.studio})"

    @property
    def duration(self) -> timedelta:
        return timedelta(minutes=self.duration_minutes)

    @property
    def min_advance(self) -> timedelta:
        return timedelta(hours=self.min_advance_hours)

    @property
    def max_advance(self) -> timedelta:
        return timedelta(days=self.max_advance_days)

    @property
    def price_money(self) -> Money:
        return Money(self.price, self.currency)


class AvailabilityWindow(models.Model):
    """Weekly opening hours of a studio for one weekday."""

    class Weekday(models.IntegerChoices):
        SUNDAY = 0, _("Sunday")
        MONDAY = 1, _("Monday")
        TUESDAY = 2, _("Tuesday")
        WEDNESDAY = 3, _("Wednesday")
        THURSDAY = 4, _("Thursday")
        FRIDAY = 5, _("Friday")
        SATURDAY = 6, _("Saturday")

    studio = models.ForeignKey(Studio, on_delete=models.CASCADE, related_name="availability_windows")
    weekday = models.PositiveSmallIntegerField(choices=Weekday.choices)
    open_time = models.TimeField()
    close_time = models.TimeField()
    is_available = models.BooleanField(default=True)

    class Meta:
        verbose_name = _("Availability window")
        verbose_name_plural = _("Availability windows")
        ordering = ["studio", "weekday"]
        constraints = [
            models.UniqueConstraint(fields=["studio", "weekday"], name="availability_one_window_per_weekday"),
            models.CheckConstraint(
                condition=models.Q(is_available=False) | models.Q(close_time__gt=models.F("open_time")),
                name="availability_close_after_open",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.studio} {self.get_weekday_display()} {self.open_time}-{self.close_time}"

    def clean(self) -> None:
        if self.is_available and self.close_time <= self.open_time:
            raise ValidationError(_("Closing time must be later than opening time."))


class BlockedTime(models.Model):
    """A one-off period during which the studio takes no bookings."""

    studio = models.ForeignKey(Studio, on_delete=models.CASCADE, related_name="blocked_times")
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Blocked time")
        verbose_name_plural = _("Blocked times")
        ordering = ["start_time"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F("start_time")),
                name="blocked_time_valid_interval",
            ),
        ]
        indexes = [
            models.Index(fields=["studio", "start_time", "end_time"], name="blocked_time_span_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.studio} blocked {self.start_time:%Y-%m-%d %H:%M} - {self.end_time:%Y-%m-%d %H:%M}"
