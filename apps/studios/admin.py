"""Admin registration for the studio catalog."""

from __future__ import annotations

from django.contrib import admin

from .models import AvailabilityWindow, BlockedTime, Service, Studio


class AvailabilityWindowInline(admin.TabularInline):
    model = AvailabilityWindow
    extra = 0
    max_num = 7


class ServiceInline(admin.StackedInline):
    model = Service
    extra = 0
    fields = (
        "name",
        "category",
        "duration_minutes",
        "price",
        "currency",
        "requires_deposit",
        "deposit_percentage",
        "min_advance_hours",
        "max_advance_days",
        "active",
    )


@admin.register(Studio)
class StudioAdmin(admin.ModelAdmin):
    list_display = ("name", "timezone", "email", "is_active", "created_at")
    list_filter = ("is_active", "timezone")
    search_fields = ("name", "email")
    inlines = [AvailabilityWindowInline, ServiceInline]


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ("name", "studio", "category", "duration_minutes", "price", "requires_deposit", "active")
    list_filter = ("category", "requires_deposit", "active")
    search_fields = ("name", "studio__name")


@admin.register(BlockedTime)
class BlockedTimeAdmin(admin.ModelAdmin):
    list_display = ("studio", "start_time", "end_time", "reason")
    list_filter = ("studio",)
    date_hierarchy = "start_time"
