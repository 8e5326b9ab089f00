"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import datetime

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from .guard import prune_booking_attempts
from .services import reclaim_stale_booking, stale_pending_bookings

logger = logging.getLogger(__name__)


def reclaim_stale_bookings(now: datetime | None = None) -> int:
    """
    Cancel every pending booking created more than 24 hours ago and give
    its seat back. A booking that fails is logged and left for the next run.
    """
    now = now or timezone.now()
    reclaimed = 0

    for booking_id in list(stale_pending_bookings(now).values_list("pk", flat=True)):
        try:
            if reclaim_stale_booking(booking_id, now=now):
                reclaimed += 1
        except Exception as e:
            logger.error(f"Error reclaiming stale booking {booking_id}: {e}", exc_info=True)

    if reclaimed > 0:
        logger.info(f"Reclaimed {reclaimed} stale pending bookings")

    return reclaimed


# ============================================================================
# PERIODIC TASKS (run through Celery Beat)
# ============================================================================

@shared_task(name="bookings.sweep_stale_bookings")
def sweep_stale_bookings() -> dict[str, int]:
    """
    Reclaim seats held by pending bookings nobody paid for, and drop booking
    attempts older than the origin window.

    Runs every hour through Celery Beat and once when a worker starts.

    Returns:
        dict: {"reclaimed": bookings cancelled, "pruned": attempts deleted}
    """
    return {"reclaimed": reclaim_stale_bookings(), "pruned": prune_booking_attempts()}
