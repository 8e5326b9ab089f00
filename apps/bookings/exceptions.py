"""Booking errors surfaced to callers.

Each error carries a stable ``code`` and an HTTP ``status_code`` so the API
layer can render an accurate message without inspecting the type.
"""

from __future__ import annotations


class BookingError(Exception):
    """Base class for booking engine errors."""

    code = "booking_error"
    status_code = 400
    default_message = "The booking could not be completed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class SessionFull(BookingError):
    code = "session_full"
    status_code = 409
    default_message = "This class is fully booked."


class SessionUnavailable(BookingError):
    code = "session_unavailable"
    default_message = "This class is not available for booking."


class AlreadyBooked(BookingError):
    code = "already_booked"
    status_code = 409
    default_message = "You have already booked this class."


class RateLimited(BookingError):
    code = "rate_limited"
    status_code = 429
    default_message = "Too many bookings from this network today. Please wait and try again later."


class TooManyActiveBookings(BookingError):
    code = "too_many_active_bookings"
    status_code = 429
    default_message = "You have reached the maximum number of upcoming bookings."


class PaymentFailed(BookingError):
    code = "payment_failed"
    status_code = 402
    default_message = "The card payment did not go through. No seat was taken; please try again."


class BookingNotFound(BookingError):
    code = "not_found"
    status_code = 404
    default_message = "Booking not found."


class Forbidden(BookingError):
    code = "forbidden"
    status_code = 403
    default_message = "You are not allowed to change this booking."


class AlreadyCancelled(BookingError):
    code = "already_cancelled"
    status_code = 409
    default_message = "This booking has already been cancelled."


class InvalidTransition(BookingError):
    code = "invalid_transition"
    status_code = 409
    default_message = "The booking cannot move to the requested state."
