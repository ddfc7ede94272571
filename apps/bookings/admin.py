"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """Read-only view: booking state only changes through the state machine."""

    list_display = (
        "id",
        "studio",
        "service",
        "client_email",
        "start_time",
        "status",
        "payment_status",
        "total_price",
        "version",
        "created_at",
    )
    list_filter = ("status", "payment_status", "studio", "requires_deposit")
    search_fields = ("client_name", "client_email", "payment_session_ref")
    date_hierarchy = "start_time"
    list_select_related = ("studio", "service")

    def get_readonly_fields(self, request, obj=None):  # type: ignore
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False
