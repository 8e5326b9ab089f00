"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking, BookingAttempt


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_code",
        "session",
        "member",
        "status",
        "payment_method",
        "is_free_session",
        "price",
        "created_at",
    )
    list_filter = ("status", "payment_method", "is_free_session", "cancellation_source")
    search_fields = ("booking_code", "session__title", "member__email", "payment_reference")
    readonly_fields = (
        "booking_code",
        "status",
        "price",
        "is_free_session",
        "payment_reference",
        "origin",
        "confirmed_at",
        "cancelled_at",
        "created_at",
        "updated_at",
    )


@admin.register(BookingAttempt)
class BookingAttemptAdmin(admin.ModelAdmin):
    list_display = ("origin", "member", "created_at")
    search_fields = ("origin", "member__email")
    readonly_fields = ("origin", "member", "created_at")
