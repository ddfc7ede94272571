"""Serializers for the studio catalog."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import AvailabilityWindow, Service, Studio


class AvailabilityWindowSerializer(serializers.ModelSerializer):
    class Meta:
        model = AvailabilityWindow
        fields = ["weekday", "open_time", "close_time", "is_available"]


class ServiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Service
        fields = [
            "id",
            "name",
            "description",
            "category",
            "duration_minutes",
            "price",
            "currency",
            "requires_deposit",
            "deposit_percentage",
            "min_advance_hours",
            "max_advance_days",
        ]


class StudioSerializer(serializers.ModelSerializer):
    services = serializers.SerializerMethodField()
    availability_windows = AvailabilityWindowSerializer(many=True, read_only=True)

    class Meta:
        model = Studio
        fields = ["id", "name", "email", "phone", "timezone", "services", "availability_windows"]

    def get_services(self, obj: Studio):  # type: ignore
        return ServiceSerializer(obj.services.filter(active=True), many=True).data


class SlotQuerySerializer(serializers.Serializer):
    date = serializers.DateField()
