"""Admin registrations for members."""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import Member


@admin.register(Member)
class MemberAdmin(BaseUserAdmin):
    fieldsets = (
        (None, {"fields": ("email", "password")}),
        (_("Personal info"), {"fields": ("username", "first_name", "last_name", "phone")}),
        (_("Booking"), {"fields": ("email_verified", "has_used_free_session")}),
        (
            _("Permissions"),
            {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")},
        ),
        (_("Important dates"), {"fields": ("last_login", "date_joined", "created_at", "updated_at")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "password1", "password2")}),
    )
    list_display = ("email", "username", "phone", "email_verified", "has_used_free_session", "is_staff")
    list_filter = ("is_staff", "email_verified", "has_used_free_session")
    search_fields = ("email", "username", "phone")
    ordering = ("-created_at",)
    readonly_fields = ("has_used_free_session", "created_at", "updated_at", "last_login", "date_joined")
