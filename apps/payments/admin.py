"""Admin registration for the payment event ledger."""

from __future__ import annotations

from django.contrib import admin

from .models import PaymentEvent


@admin.register(PaymentEvent)
class PaymentEventAdmin(admin.ModelAdmin):
    list_display = (
        "event_id",
        "event_type",
        "booking_ref",
        "amount",
        "currency",
        "received_at",
        "applied",
        "outcome",
        "archived_at",
    )
    list_filter = ("event_type", "applied", "outcome")
    search_fields = ("event_id", "booking_ref")
    date_hierarchy = "received_at"

    def get_readonly_fields(self, request, obj=None):  # type: ignore
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request):  # type: ignore
        return False

    def has_delete_permission(self, request, obj=None):  # type: ignore
        return False
