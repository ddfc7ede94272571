"""Conflict detection for candidate booking intervals."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from apps.studios.models import Service
from apps.studios.store import AvailabilityStore
from shared.domain.value_objects import TimeRange

from .errors import ErrorCode
from .repositories import BookingRepository


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool
    reason: ErrorCode | None = None

    def as_dict(self) -> dict:
        data: dict = {"available": self.available}
        if self.reason is not None:
            data["reason"] = self.reason.value
        return data


AVAILABLE = AvailabilityResult(True)


class ConflictDetector:
    """Advisory availability check.

    The answer can be outdated the moment it is returned; the allocator
    repeats the overlap test atomically before inserting.
    """

    def __init__(self, store: AvailabilityStore | None = None, repository: BookingRepository | None = None):
        self.store = store or AvailabilityStore()
        self.repository = repository or BookingRepository()

    def check(
        self,
        service: Service,
        start_time: datetime,
        *,
        exclude_booking_id: int | None = None,
        now: datetime | None = None,
    ) -> AvailabilityResult:
        now = now or timezone.now()
        candidate = TimeRange.starting_at(start_time, service.duration)

        if candidate.start < now + service.min_advance:
            return AvailabilityResult(False, ErrorCode.TOO_SOON)
        if candidate.start > now + service.max_advance:
            return AvailabilityResult(False, ErrorCode.TOO_FAR)

        if not self.store.fits_opening_hours(service.studio, candidate):
            return AvailabilityResult(False, ErrorCode.OUTSIDE_HOURS)

        if self.repository.has_overlap(service.studio_id, candidate, exclude_booking_id=exclude_booking_id):
            return AvailabilityResult(False, ErrorCode.OVERLAP)

        return AVAILABLE

    def available_slots(self, service: Service, day: date, *, now: datetime | None = None) -> list[datetime]:
        """Bookable start times on ``day`` (a date in the studio's timezone).

        Candidates start at opening time and are spaced by the service
        duration plus the configured buffer between sessions.
        """

        hours = self.store.opening_hours(service.studio, day)
        if hours is None:
            return []

        step = service.duration + timedelta(minutes=settings.BOOKING_SLOT_BUFFER_MINUTES)
        slots = []
        candidate = hours.start
        while candidate + service.duration <= hours.end:
            if self.check(service, candidate, now=now).available:
                slots.append(candidate)
            candidate += step
        return slots
