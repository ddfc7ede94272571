"""API views for the booking domain."""

from __future__ import annotations

from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from apps.payments.errors import PaymentGatewayError

from .errors import BookingError, NotFoundError
from .filters import BookingFilterSet
from .models import Booking
from .serializers import (
    AvailabilityQuerySerializer,
    AvailabilitySerializer,
    BookingSerializer,
    BookingStatusSerializer,
    CancelSerializer,
    HoldCreateSerializer,
    HoldSerializer,
)
from .services import get_booking_service


def error_response(exc: BookingError) -> Response:
    """Translate a booking engine error into an API response."""

    if isinstance(exc, NotFoundError):
        return Response(exc.as_dict(), status=status.HTTP_404_NOT_FOUND)
    if isinstance(exc, PaymentGatewayError):
        return Response(exc.as_dict(), status=status.HTTP_502_BAD_GATEWAY)
    return Response(exc.as_dict(), status=status.HTTP_409_CONFLICT)


class BookingViewSet(viewsets.ReadOnlyModelViewSet):
    """Booking flow for clients plus the staff view of all bookings."""

    queryset = Booking.objects.select_related("studio", "service").all()
    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAdminUser]
    filterset_class = BookingFilterSet
    lookup_value_regex = r"\d+"

    @action(detail=False, methods=["get"], permission_classes=[permissions.AllowAny])
    def availability(self, request):  # type: ignore
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        try:
            result = get_booking_service().check_availability(
                query.validated_data["studio"],
                query.validated_data["service"],
                query.validated_data["start_time"],
            )
        except BookingError as exc:
            return error_response(exc)
        return Response(AvailabilitySerializer(result.as_dict()).data)

    @action(detail=False, methods=["post"], permission_classes=[permissions.AllowAny])
    def holds(self, request):  # type: ignore
        serializer = HoldCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            hold = get_booking_service().create_hold(
                data["studio"],
                data["service"],
                data["start_time"],
                serializer.client_info(),
            )
        except BookingError as exc:
            return error_response(exc)
        return Response(HoldSerializer(hold).data, status=status.HTTP_201_CREATED)

    @action(
        detail=True,
        methods=["get"],
        url_path="status",
        url_name="status",
        permission_classes=[permissions.AllowAny],
    )
    def booking_status(self, request, pk=None):  # type: ignore
        try:
            result = get_booking_service().get_booking_status(int(pk))
        except BookingError as exc:
            return error_response(exc)
        return Response(BookingStatusSerializer(result).data)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        serializer = CancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            booking = get_booking_service().cancel_booking(booking.pk, serializer.validated_data["reason"])
        except BookingError as exc:
            return error_response(exc)
        return Response({"status": booking.status, "payment_status": booking.payment_status})

    @action(detail=True, methods=["post"], url_path="no-show", url_name="no-show")
    def no_show(self, request, pk=None):  # type: ignore
        booking: Booking = self.get_object()  # type: ignore
        try:
            booking = get_booking_service().mark_no_show(booking.pk)
        except BookingError as exc:
            return error_response(exc)
        return Response({"status": booking.status, "payment_status": booking.payment_status})
