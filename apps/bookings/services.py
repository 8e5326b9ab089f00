"""Booking workflows exposed to views, tasks and management commands."""

from __future__ import annotations

from datetime import datetime, timedelta

from django.contrib.auth import get_user_model  # type: ignore
from django.db.models import QuerySet  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    CancellationResult,
    ConfirmCashBookingCommand,
    ConfirmCashBookingHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    ReclaimStaleBookingCommand,
    ReclaimStaleBookingHandler,
)
from apps.bookings.domain import lifecycle
from apps.bookings.models import Booking
from apps.bookings.payments import PaymentGateway, get_payment_gateway
from apps.classes.services import list_upcoming_sessions


def create_booking(
    member_id: int,
    session_id: int,
    payment_method: str,
    *,
    payment_token: str | None = None,
    origin: str | None = None,
    now: datetime | None = None,
    gateway: PaymentGateway | None = None,
) -> Booking:
    handler = CreateBookingHandler(gateway or get_payment_gateway())
    return handler.handle(
        CreateBookingCommand(
            member_id=member_id,
            session_id=session_id,
            payment_method=payment_method,
            payment_token=payment_token,
            origin=origin,
            now=now,
        )
    )


def cancel_booking(
    booking_id: int,
    acting_member_id: int,
    *,
    reason: str = "",
    now: datetime | None = None,
) -> CancellationResult:
    return CancelBookingHandler().handle(
        CancelBookingCommand(booking_id=booking_id, acting_member_id=acting_member_id, reason=reason, now=now)
    )


def confirm_cash_booking(booking_id: int, now: datetime | None = None) -> Booking:
    return ConfirmCashBookingHandler().handle(ConfirmCashBookingCommand(booking_id=booking_id, now=now))


def reclaim_stale_booking(booking_id: int, now: datetime | None = None) -> bool:
    return ReclaimStaleBookingHandler().handle(ReclaimStaleBookingCommand(booking_id=booking_id, now=now))


def stale_pending_bookings(now: datetime) -> QuerySet:
    return Booking.objects.filter(
        status=Booking.Status.PENDING,
        created_at__lt=now - lifecycle.STALE_PENDING_AFTER,
    ).order_by("created_at")


def list_member_bookings(member_id: int) -> QuerySet:
    return Booking.objects.filter(member_id=member_id).select_related("session").order_by(
        "-session__date", "-session__start_time"
    )


def list_all_bookings() -> QuerySet:
    return Booking.objects.select_related("session", "member").order_by("-created_at")


def booking_stats(now: datetime | None = None) -> dict[str, int]:
    """Headline numbers for the admin dashboard."""
    now = now or timezone.now()
    upcoming = list_upcoming_sessions(now)
    week_end = timezone.localdate(now) + timedelta(days=7)
    return {
        "upcoming_sessions": upcoming.count(),
        "sessions_next_7_days": upcoming.filter(date__lt=week_end).count(),
        "confirmed_bookings": Booking.objects.filter(status=Booking.Status.CONFIRMED).count(),
        "pending_bookings": Booking.objects.filter(status=Booking.Status.PENDING).count(),
        "members": get_user_model().objects.filter(is_staff=False, is_superuser=False).count(),
    }
