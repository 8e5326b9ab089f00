"""Message bus subscribers for booking events."""

from __future__ import annotations

import logging

from apps.bookings.domain.events import BookingCancelled, BookingConfirmed, BookingPlaced
from shared.application.message_bus import message_bus

from . import tasks

logger = logging.getLogger(__name__)


def on_booking_placed(event: BookingPlaced) -> None:
    tasks.notify_booking_placed.delay(event.booking_id)


def on_booking_confirmed(event: BookingConfirmed) -> None:
    tasks.notify_cash_payment_received.delay(event.booking_id)


def on_booking_cancelled(event: BookingCancelled) -> None:
    tasks.notify_booking_cancelled.delay(
        event.booking_id,
        free_session_restored=event.free_session_restored,
        free_session_forfeited=event.free_session_forfeited,
    )


def register_handlers() -> None:
    message_bus.register_event_handler(BookingPlaced, on_booking_placed)
    message_bus.register_event_handler(BookingConfirmed, on_booking_confirmed)
    message_bus.register_event_handler(BookingCancelled, on_booking_cancelled)
    logger.debug("Booking notification handlers registered")
