"""Persistence access for bookings."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from django.db import transaction  # type: ignore
from django.db.models import F, QuerySet  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.studios.models import Studio
from shared.domain.value_objects import TimeRange

from .errors import BookingNotFoundError
from .models import Booking

# Fields the state machine may write alongside a transition
WRITABLE_FIELDS = frozenset(
    {
        "status",
        "payment_status",
        "deposit_amount_paid",
        "payment_session_ref",
        "cancellation_reason",
        "cancelled_at",
    }
)


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


class BookingRepository:
    """Django ORM access to Booking rows."""

    def get(self, booking_id: int) -> Booking:
        try:
            return Booking.objects.select_related("studio", "service").get(pk=booking_id)
        except Booking.DoesNotExist as exc:
            raise BookingNotFoundError() from exc

    def get_by_session_ref(self, reference: str) -> Booking | None:
        if not reference:
            return None
        return Booking.objects.filter(payment_session_ref=reference).first()

    def occupying(self, studio_id: int) -> QuerySet[Booking]:
        return Booking.objects.filter(studio_id=studio_id).exclude(status__in=Booking.RELEASED_STATUSES)

    def overlapping(
        self,
        studio_id: int,
        time_range: TimeRange,
        *,
        exclude_booking_id: int | None = None,
    ) -> QuerySet[Booking]:
        qs = self.occupying(studio_id).filter(
            start_time__lt=time_range.end,
            end_time__gt=time_range.start,
        )
        if exclude_booking_id is not None:
            qs = qs.exclude(pk=exclude_booking_id)
        return qs

    def has_overlap(self, studio_id: int, time_range: TimeRange, *, exclude_booking_id: int | None = None) -> bool:
        return self.overlapping(studio_id, time_range, exclude_booking_id=exclude_booking_id).exists()

    def lock_studio(self, studio_id: int) -> None:
        """Serialize allocations for one studio until the current transaction ends."""

        list(_lock_queryset_if_possible(Studio.objects.filter(pk=studio_id)).values_list("pk", flat=True))

    def create(self, **fields: Any) -> Booking:
        return Booking.objects.create(**fields)

    def compare_and_set(
        self,
        booking_id: int,
        expected_version: int,
        changes: dict[str, Any],
        *,
        now: datetime | None = None,
    ) -> bool:
        """Write ``changes`` only if the row is still at ``expected_version``."""

        unknown = set(changes) - WRITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not writable through a transition: {sorted(unknown)}")

        updated = Booking.objects.filter(pk=booking_id, version=expected_version).update(
            version=F("version") + 1,
            updated_at=now or timezone.now(),
            **changes,
        )
        return updated == 1

    def stale_holds(self, created_before: datetime) -> QuerySet[Booking]:
        return Booking.objects.filter(
            status=Booking.Status.PENDING_PAYMENT,
            created_at__lt=created_before,
        ).order_by("created_at")

    def due_to_start(self, now: datetime) -> QuerySet[Booking]:
        return Booking.objects.filter(status=Booking.Status.CONFIRMED, start_time__lte=now).order_by("start_time")

    def due_to_complete(self, now: datetime) -> QuerySet[Booking]:
        return Booking.objects.filter(status=Booking.Status.IN_PROGRESS, end_time__lte=now).order_by("end_time")
