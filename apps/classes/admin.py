"""Admin registration for the schedule."""

from __future__ import annotations

from django.contrib import admin

from .models import ClassTemplate, Session


@admin.register(ClassTemplate)
class ClassTemplateAdmin(admin.ModelAdmin):
    list_display = ("title", "class_type", "day_of_week", "start_time", "capacity", "price", "is_active")
    list_filter = ("day_of_week", "class_type", "is_active")
    search_fields = ("title", "class_type")


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    list_display = ("title", "date", "start_time", "capacity", "booked_count", "price", "is_active", "template")
    list_filter = ("is_active", "class_type", "date")
    search_fields = ("title",)
    readonly_fields = ("booked_count", "created_at", "updated_at")
    date_hierarchy = "date"
