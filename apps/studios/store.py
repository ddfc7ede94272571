"""Availability store: opening hours and blocked periods per studio."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterable

from django.db import transaction  # type: ignore
from django.db.models import QuerySet  # type: ignore

from shared.domain.value_objects import TimeRange

from .models import AvailabilityWindow, BlockedTime, Service, Studio

logger = logging.getLogger(__name__)


def weekday_of(day: date) -> int:
    """Weekday number with Sunday as 0 and Saturday as 6."""

    return day.isoweekday() % 7


@dataclass(frozen=True)
class WeeklyHours:
    weekday: int
    open_time: time
    close_time: time
    is_available: bool = True


class AvailabilityStore:
    """Read and replace a studio's opening hours."""

    def get_service(self, studio_id: int, service_id: int) -> Service | None:
        return (
            Service.objects.select_related("studio")
            .filter(pk=service_id, studio_id=studio_id, active=True, studio__is_active=True)
            .first()
        )

    def window_for(self, studio: Studio, weekday: int) -> AvailabilityWindow | None:
        return AvailabilityWindow.objects.filter(studio=studio, weekday=weekday).first()

    def blocked_periods(self, studio: Studio, time_range: TimeRange) -> QuerySet[BlockedTime]:
        return BlockedTime.objects.filter(
            studio=studio,
            start_time__lt=time_range.end,
            end_time__gt=time_range.start,
        )

    def opening_hours(self, studio: Studio, day: date) -> TimeRange | None:
        """Opening hours of ``day`` (a date in the studio's timezone) as aware datetimes."""

        window = self.window_for(studio, weekday_of(day))
        if window is None or not window.is_available:
            return None
        tz = studio.tzinfo
        return TimeRange(
            datetime.combine(day, window.open_time, tzinfo=tz),
            datetime.combine(day, window.close_time, tzinfo=tz),
        )

    def fits_opening_hours(self, studio: Studio, time_range: TimeRange) -> bool:
        """True when the range lies inside a single day's hours and hits no blocked period."""

        tz = studio.tzinfo
        local_start = time_range.start.astimezone(tz)
        local_end = time_range.end.astimezone(tz)
        if local_start.date() != local_end.date():
            return False

        hours = self.opening_hours(studio, local_start.date())
        if hours is None or not hours.contains(time_range):
            return False

        return not self.blocked_periods(studio, time_range).exists()

    @transaction.atomic
    def set_weekly_hours(self, studio: Studio, hours: Iterable[WeeklyHours]) -> list[AvailabilityWindow]:
        """Replace the studio's weekly schedule with ``hours``."""

        windows = []
        seen: set[int] = set()
        for entry in hours:
            if entry.weekday in seen:
                raise ValueError(f"Weekday {entry.weekday} listed twice")
            seen.add(entry.weekday)
            window = AvailabilityWindow(
                studio=studio,
                weekday=entry.weekday,
                open_time=entry.open_time,
                close_time=entry.close_time,
                is_available=entry.is_available,
            )
            window.full_clean(exclude=["studio"], validate_unique=False, validate_constraints=False)
            windows.append(window)

        AvailabilityWindow.objects.filter(studio=studio).delete()
        created = AvailabilityWindow.objects.bulk_create(windows)
        logger.info(f"Weekly hours of studio {studio.pk} replaced with {len(created)} windows")
        return created
