from datetime import timedelta
from unittest import mock

import pytest

from apps.bookings import services as booking_services
from apps.bookings.domain.events import BookingCancelled, BookingConfirmed, BookingPlaced
from apps.bookings.exceptions import SessionFull
from apps.bookings.tasks import reclaim_stale_bookings
from apps.notifications import handlers, services, tasks
from shared.application.message_bus import message_bus


class ApprovingGateway:
    def charge(self, amount, payment_token, *, reference):
        return "pay_ok"


def _book(member, session, now, method="cash"):
    return booking_services.create_booking(
        member.pk, session.pk, method, payment_token="cnon:ok", now=now, gateway=ApprovingGateway()
    )


def test_handlers_registered_on_startup():
    registered = message_bus._event_handlers
    assert handlers.on_booking_placed in registered[BookingPlaced]
    assert handlers.on_booking_confirmed in registered[BookingConfirmed]
    assert handlers.on_booking_cancelled in registered[BookingCancelled]


@pytest.mark.django_db
def test_free_booking_sends_confirmation(member, session, now, mailoutbox, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        booking = _book(member, session, now)

    assert len(mailoutbox) == 1
    email = mailoutbox[0]
    assert email.to == ["member@example.com"]
    assert "You're booked: Evening Flow" in email.subject
    assert booking.booking_code in email.body
    assert "free first class" in email.body


@pytest.mark.django_db
def test_cash_booking_and_staff_confirmation(
    paying_member, session, now, mailoutbox, django_capture_on_commit_callbacks
):
    with django_capture_on_commit_callbacks(execute=True):
        booking = _book(paying_member, session, now)
    with django_capture_on_commit_callbacks(execute=True):
        booking_services.confirm_cash_booking(booking.pk, now=now)

    assert [m.subject.split(":")[0] for m in mailoutbox] == ["You're booked", "Payment received for Evening Flow"]
    assert "in cash" in mailoutbox[0].body


@pytest.mark.django_db
def test_late_cancel_email_mentions_forfeit(member, session, now, mailoutbox, django_capture_on_commit_callbacks):
    booking = _book(member, session, now)

    with django_capture_on_commit_callbacks(execute=True):
        booking_services.cancel_booking(booking.pk, member.pk, now=session.starts_at - timedelta(minutes=10))

    assert len(mailoutbox) == 1
    assert mailoutbox[0].subject.startswith("Booking cancelled")
    assert "your free class has been used" in mailoutbox[0].body


@pytest.mark.django_db
def test_swept_booking_email_explains_release(
    paying_member, session, now, mailoutbox, django_capture_on_commit_callbacks
):
    _book(paying_member, session, now)

    with django_capture_on_commit_callbacks(execute=True):
        reclaim_stale_bookings(now=now + timedelta(hours=26))

    assert len(mailoutbox) == 1
    assert "within 24 hours" in mailoutbox[0].body


@pytest.mark.django_db
def test_rolled_back_booking_sends_nothing(
    member, paying_member, make_session, now, mailoutbox, django_capture_on_commit_callbacks
):
    session = make_session(capacity=1)
    _book(paying_member, session, now)

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        with pytest.raises(SessionFull):
            _book(member, session, now)

    assert callbacks == []
    assert mailoutbox == []


@pytest.mark.django_db
def test_send_failure_is_logged_not_raised(monkeypatch):
    def broken_send_mail(**kwargs):
        raise ConnectionRefusedError("smtp down")

    monkeypatch.setattr(services, "send_mail", broken_send_mail)

    with mock.patch.object(services.logger, "error") as log_error:
        sent = services.send_email_notification("x@example.com", "Hello", None, {"message": "hi"})

    assert sent is False
    log_error.assert_called_once()


@pytest.mark.django_db
def test_task_for_missing_booking_returns_false():
    assert tasks.notify_booking_placed(123456) is False
    assert tasks.notify_booking_cancelled(123456, free_session_forfeited=True) is False
