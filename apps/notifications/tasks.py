"""Celery tasks that deliver booking notifications."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from apps.bookings.models import Booking

from .services import (
    send_booking_cancelled_email,
    send_booking_confirmation_email,
    send_cash_payment_received_email,
)

logger = logging.getLogger(__name__)


def _load(booking_id: int) -> Booking | None:
    booking = Booking.objects.select_related("member", "session").filter(pk=booking_id).first()
    if booking is None:
        logger.error(f"Booking {booking_id} not found for notification")
        return None
    if booking.member is None:
        logger.info(f"Booking {booking_id} has no member account, notification skipped")
        return None
    return booking


@shared_task(name="notifications.notify_booking_placed")
def notify_booking_placed(booking_id: int) -> bool:
    """Booking confirmation (or cash reservation) email to the member."""
    booking = _load(booking_id)
    if booking is None:
        return False
    sent = send_booking_confirmation_email(booking)
    logger.info(f"[NOTIFICATION] Booking placed email for {booking.booking_code}: sent={sent}")
    return sent


@shared_task(name="notifications.notify_cash_payment_received")
def notify_cash_payment_received(booking_id: int) -> bool:
    booking = _load(booking_id)
    if booking is None:
        return False
    return send_cash_payment_received_email(booking)


@shared_task(name="notifications.notify_booking_cancelled")
def notify_booking_cancelled(
    booking_id: int,
    free_session_restored: bool = False,
    free_session_forfeited: bool = False,
) -> bool:
    """Cancellation email, stating what happened to a free session."""
    booking = _load(booking_id)
    if booking is None:
        return False
    sent = send_booking_cancelled_email(
        booking,
        free_session_restored=free_session_restored,
        free_session_forfeited=free_session_forfeited,
    )
    logger.info(f"[NOTIFICATION] Booking cancelled email for {booking.booking_code}: sent={sent}")
    return sent
