"""Permission classes shared by the schedule and booking APIs."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


class IsAdmin(permissions.BasePermission):
    """Only staff accounts (administrators) may access."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return bool(getattr(user, "is_admin", False))


class IsAdminOrReadOnly(permissions.BasePermission):
    """Anyone may read; only administrators may write."""

    def has_permission(self, request, view) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        return IsAdmin().has_permission(request, view)
