"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .allocator import ClientInfo
from .models import Booking


class AvailabilityQuerySerializer(serializers.Serializer):
    studio = serializers.IntegerField(min_value=1)
    service = serializers.IntegerField(min_value=1)
    start_time = serializers.DateTimeField()


class AvailabilitySerializer(serializers.Serializer):
    available = serializers.BooleanField()
    reason = serializers.CharField(required=False)


class HoldCreateSerializer(serializers.Serializer):
    """Request for a hold on a slot."""

    studio = serializers.IntegerField(min_value=1)
    service = serializers.IntegerField(min_value=1)
    start_time = serializers.DateTimeField()
    client_name = serializers.CharField(max_length=255)
    client_email = serializers.EmailField()
    client_phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def client_info(self) -> ClientInfo:
        data = self.validated_data
        return ClientInfo(
            name=data["client_name"],
            email=data["client_email"],
            phone=data["client_phone"],
            notes=data["notes"],
        )


class HoldSerializer(serializers.Serializer):
    booking_id = serializers.IntegerField(source="booking.pk")
    payment_session_ref = serializers.CharField(source="session.reference")
    checkout_url = serializers.URLField(source="session.checkout_url")
    status = serializers.CharField(source="booking.status")
    payment_status = serializers.CharField(source="booking.payment_status")
    amount_due = serializers.DecimalField(source="booking.amount_due.amount", max_digits=10, decimal_places=2)
    currency = serializers.CharField(source="booking.currency")
    hold_expires_at = serializers.DateTimeField(source="booking.hold_expires_at")


class BookingStatusSerializer(serializers.Serializer):
    booking_id = serializers.IntegerField()
    status = serializers.CharField()
    payment_status = serializers.CharField()
    hold_expires_at = serializers.DateTimeField(allow_null=True)


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class BookingSerializer(serializers.ModelSerializer):
    """Full booking record for studio staff."""

    studio_id = serializers.ReadOnlyField(source="studio.id")
    service_id = serializers.ReadOnlyField(source="service.id")
    service_name = serializers.ReadOnlyField(source="service.name")
    hold_expires_at = serializers.DateTimeField(read_only=True)

    class Meta:
        model = Booking
        fields = [
            "id",
            "studio_id",
            "service_id",
            "service_name",
            "client_name",
            "client_email",
            "client_phone",
            "notes",
            "start_time",
            "end_time",
            "status",
            "payment_status",
            "total_price",
            "currency",
            "requires_deposit",
            "deposit_percentage",
            "deposit_amount_paid",
            "payment_session_ref",
            "version",
            "cancellation_reason",
            "cancelled_at",
            "hold_expires_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
