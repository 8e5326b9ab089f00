"""Abuse guard evaluated before any seat is reserved.

Two limits apply to every booking attempt:

- a member may hold at most ``BOOKING_MAX_ACTIVE_PER_MEMBER`` pending or
  confirmed bookings for sessions that have not started yet;
- at most ``BOOKING_MAX_PER_ORIGIN_PER_DAY`` booking attempts may originate
  from one client network origin in any rolling 24 hour window.

Every admitted attempt is written to ``BookingAttempt`` whatever happens to
it afterwards, so declined card charges count against the origin too. Counts
are taken from the database, so the limits hold across processes without
shared in-memory state.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from django.conf import settings  # type: ignore
from django.db.models import Q  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.domain import lifecycle
from apps.bookings.exceptions import RateLimited, TooManyActiveBookings
from apps.bookings.models import Booking, BookingAttempt

logger = logging.getLogger(__name__)

ORIGIN_WINDOW = timedelta(hours=24)


def upcoming_active_bookings(member_id: int, now: datetime):
    local_now = timezone.localtime(now)
    not_started = Q(session__date__gt=local_now.date()) | Q(
        session__date=local_now.date(), session__start_time__gt=local_now.time()
    )
    return Booking.objects.filter(
        member_id=member_id,
        status__in=lifecycle.ACTIVE_STATUSES,
    ).filter(not_started)


def attempts_from_origin(origin: str, now: datetime):
    return BookingAttempt.objects.filter(origin=origin, created_at__gt=now - ORIGIN_WINDOW)


def check_member_limit(member_id: int, now: datetime) -> None:
    limit = settings.BOOKING_MAX_ACTIVE_PER_MEMBER
    active = upcoming_active_bookings(member_id, now).count()
    if active >= limit:
        logger.warning(f"Member {member_id} blocked: {active} upcoming bookings (limit {limit})")
        raise TooManyActiveBookings()


def check_origin_limit(origin: str | None, now: datetime) -> None:
    if not origin:
        return
    limit = settings.BOOKING_MAX_PER_ORIGIN_PER_DAY
    recent = attempts_from_origin(origin, now).count()
    if recent >= limit:
        logger.warning(f"[SECURITY] Suspicious activity from {origin}: {recent} booking attempts in 24h")
        raise RateLimited()


def admit_booking_attempt(member_id: int, origin: str | None, now: datetime | None = None) -> None:
    """
    Raise RateLimited or TooManyActiveBookings when the attempt must be
    refused, otherwise record it against its origin.
    """
    now = now or timezone.now()
    check_origin_limit(origin, now)
    check_member_limit(member_id, now)
    if origin:
        BookingAttempt.objects.create(origin=origin, member_id=member_id, created_at=now)


def prune_booking_attempts(now: datetime | None = None) -> int:
    """Delete attempts that no longer fall inside the origin window."""
    now = now or timezone.now()
    deleted, _ = BookingAttempt.objects.filter(created_at__lte=now - ORIGIN_WINDOW).delete()
    return deleted
