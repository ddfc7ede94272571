"""API views for the studio catalog."""

from __future__ import annotations

from django.shortcuts import get_object_or_404  # type: ignore
from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.bookings.conflicts import ConflictDetector

from .models import Service, Studio
from .serializers import SlotQuerySerializer, StudioSerializer


class StudioViewSet(viewsets.ReadOnlyModelViewSet):
    """Active studios with their bookable services and weekly hours."""

    queryset = Studio.objects.filter(is_active=True).prefetch_related("availability_windows")
    serializer_class = StudioSerializer
    permission_classes = [permissions.AllowAny]


class ServiceSlotsView(APIView):
    """Free start times for a service on one day of the studio's calendar."""

    permission_classes = [permissions.AllowAny]

    def get(self, request, studio_pk: int, service_pk: int):  # type: ignore
        service = get_object_or_404(
            Service.objects.select_related("studio"),
            pk=service_pk,
            studio_id=studio_pk,
            active=True,
            studio__is_active=True,
        )
        query = SlotQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        day = query.validated_data["date"]

        slots = ConflictDetector().available_slots(service, day)
        return Response(
            {
                "studio": service.studio_id,
                "service": service.pk,
                "date": day.isoformat(),
                "timezone": service.studio.timezone,
                "duration_minutes": service.duration_minutes,
                "slots": [slot.isoformat() for slot in slots],
            }
        )
