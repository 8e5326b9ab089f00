"""Booking models for ClassBook."""

from __future__ import annotations

import secrets
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.bookings.domain import lifecycle


class Booking(models.Model):
    """A member's seat in one class session."""

    class Status(models.TextChoices):
        PENDING = lifecycle.PENDING, _("Pending payment")
        CONFIRMED = lifecycle.CONFIRMED, _("Confirmed")
        CANCELLED = lifecycle.CANCELLED, _("Cancelled")

    class PaymentMethod(models.TextChoices):
        CARD = "card", _("Card")
        CASH = "cash", _("Cash at the session")

    class CancellationSource(models.TextChoices):
        MEMBER = "member", _("Member")
        ADMIN = "admin", _("Admin")
        SYSTEM = "system", _("System")

    # Bookings outlive member accounts for audit purposes
    member = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="bookings",
    )
    session = models.ForeignKey(
        "classes.Session",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    booking_code = models.CharField(max_length=12, unique=True, editable=False)
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    payment_method = models.CharField(max_length=8, choices=PaymentMethod.choices)
    payment_reference = models.CharField(
        max_length=128,
        blank=True,
        help_text=_("Provider payment id for settled card payments."),
    )
    is_free_session = models.BooleanField(default=False)
    price = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Price charged at booking time."),
    )
    origin = models.CharField(
        max_length=64,
        blank=True,
        help_text=_("Client network origin the booking came from."),
    )
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_source = models.CharField(
        max_length=16,
        choices=CancellationSource.choices,
        blank=True,
    )
    cancellation_reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["member", "session"],
                condition=~models.Q(status=lifecycle.CANCELLED),
                name="booking_one_active_per_member_session",
            ),
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="booking_price_non_negative",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "created_at"], name="booking_status_created_idx"),
            models.Index(fields=["member", "status"], name="booking_member_status_idx"),
            models.Index(fields=["origin", "created_at"], name="booking_origin_created_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.booking_code} for session {self.session_id}"

    def save(self, *args, **kwargs):  # type: ignore
        if self._state.adding and not self.booking_code:
            self.booking_code = self.generate_booking_code()
        super().save(*args, **kwargs)

    @classmethod
    def generate_booking_code(cls) -> str:
        while True:
            code = secrets.token_hex(4).upper()
            if not cls.objects.filter(booking_code=code).exists():
                return code

    @property
    def is_active(self) -> bool:
        return self.status in lifecycle.ACTIVE_STATUSES


class BookingAttempt(models.Model):
    """One booking request admitted by the abuse guard, kept for the origin limit."""

    origin = models.CharField(max_length=64)
    member = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="booking_attempts",
    )
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["origin", "created_at"], name="attempt_origin_created_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking attempt from {self.origin} at {self.created_at:%Y-%m-%d %H:%M}"
