"""FilterSet definitions for the staff booking list."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    studio = django_filters.NumberFilter(field_name="studio_id")
    service = django_filters.NumberFilter(field_name="service_id")
    status = django_filters.MultipleChoiceFilter(choices=Booking.Status.choices)
    payment_status = django_filters.MultipleChoiceFilter(choices=Booking.PaymentStatus.choices)
    starts_after = django_filters.IsoDateTimeFilter(field_name="start_time", lookup_expr="gte")
    starts_before = django_filters.IsoDateTimeFilter(field_name="start_time", lookup_expr="lt")
    client_email = django_filters.CharFilter(field_name="client_email", lookup_expr="iexact")

    class Meta:
        model = Booking
        fields = ["studio", "service", "status", "payment_status"]
