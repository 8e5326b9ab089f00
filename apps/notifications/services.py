"""Notification services for sending booking emails."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.template.loader import render_to_string  # type: ignore
from django.utils.html import strip_tags  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.models import Booking

logger = logging.getLogger(__name__)


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(
    recipient_email: str,
    subject: str,
    template_name: str | None,
    context: dict,
    *,
    html_message: str | None = None,
) -> bool:
    """
    Send one email notification.

    Args:
        recipient_email: Recipient address
        subject: Subject line
        template_name: Django template to render (optional)
        context: Template context
        html_message: Pre-rendered HTML body (optional)

    Returns:
        bool: True if the email was sent
    """
    try:
        if html_message:
            text_message = strip_tags(html_message)
        elif template_name:
            html_message = render_to_string(template_name, context)
            text_message = strip_tags(html_message)
        else:
            text_message = context.get("message", "")
            html_message = None

        send_mail(
            subject=subject,
            message=text_message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )

        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


def _session_context(booking: "Booking") -> dict:
    session = booking.session
    return {
        "member_name": booking.member.display_name,
        "booking_code": booking.booking_code,
        "class_title": session.title,
        "class_date": session.date.strftime("%A %d %B %Y"),
        "class_time": session.start_time.strftime("%H:%M"),
        "duration": session.duration_minutes,
    }


def _payment_line(booking: "Booking") -> str:
    if booking.is_free_session:
        return "This is your free first class, there is nothing to pay."
    if booking.payment_method == booking.PaymentMethod.CASH:
        return f"Please bring {booking.price} {settings.BOOKING_CURRENCY} in cash to the class."
    return f"We have charged {booking.price} {settings.BOOKING_CURRENCY} to your card."


def send_booking_confirmation_email(booking: "Booking") -> bool:
    """Booking confirmation sent when a seat is taken."""
    context = _session_context(booking)
    subject = f"You're booked: {context['class_title']} on {context['class_date']}"

    html_message = f"""
    <html>
    <body>
        <h2>Hi {context['member_name']},</h2>
        <p>Your place is reserved.</p>

        <h3>Class details:</h3>
        <ul>
            <li><strong>Booking code:</strong> {context['booking_code']}</li>
            <li><strong>Class:</strong> {context['class_title']}</li>
            <li><strong>Date:</strong> {context['class_date']}</li>
            <li><strong>Time:</strong> {context['class_time']} ({context['duration']} min)</li>
        </ul>

        <p>{_payment_line(booking)}</p>

        <p>If you can't make it, please cancel so someone else can have your place.</p>
    </body>
    </html>
    """

    return send_email_notification(
        recipient_email=booking.member.email,
        subject=subject,
        template_name=None,
        context=context,
        html_message=html_message,
    )


def send_cash_payment_received_email(booking: "Booking") -> bool:
    context = _session_context(booking)
    subject = f"Payment received for {context['class_title']}"

    html_message = f"""
    <html>
    <body>
        <h2>Hi {context['member_name']},</h2>
        <p>Thanks, we have received your cash payment of {booking.price} {settings.BOOKING_CURRENCY}
        for {context['class_title']} on {context['class_date']} at {context['class_time']}.</p>
    </body>
    </html>
    """

    return send_email_notification(
        recipient_email=booking.member.email,
        subject=subject,
        template_name=None,
        context=context,
        html_message=html_message,
    )


def send_booking_cancelled_email(
    booking: "Booking",
    *,
    free_session_restored: bool = False,
    free_session_forfeited: bool = False,
) -> bool:
    """Cancellation notice. Mentions whether the free session came back."""
    context = _session_context(booking)
    subject = f"Booking cancelled: {context['class_title']} on {context['class_date']}"

    if booking.cancellation_source == booking.CancellationSource.SYSTEM:
        intro = "We did not receive payment within 24 hours, so your place has been released."
    else:
        intro = "Your booking has been cancelled."

    if free_session_restored:
        free_line = "<p>Your free class is available again for your next booking.</p>"
    elif free_session_forfeited:
        free_line = (
            "<p>Because the booking was cancelled shortly before the class started, "
            "your free class has been used.</p>"
        )
    else:
        free_line = ""

    html_message = f"""
    <html>
    <body>
        <h2>Hi {context['member_name']},</h2>
        <p>{intro}</p>
        <ul>
            <li><strong>Booking code:</strong> {context['booking_code']}</li>
            <li><strong>Class:</strong> {context['class_title']}</li>
            <li><strong>Date:</strong> {context['class_date']} at {context['class_time']}</li>
        </ul>
        {free_line}
    </body>
    </html>
    """

    return send_email_notification(
        recipient_email=booking.member.email,
        subject=subject,
        template_name=None,
        context=context,
        html_message=html_message,
    )
