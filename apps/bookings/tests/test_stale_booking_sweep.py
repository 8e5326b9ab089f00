from datetime import timedelta

import pytest
from django.core.management import call_command

from apps.bookings import services, tasks
from apps.bookings.models import Booking, BookingAttempt
from apps.classes import ledger
from apps.members.models import Member


class ApprovingGateway:
    def charge(self, amount, payment_token, *, reference):
        return "pay_ok"


def _cash_booking(member, session, now):
    return services.create_booking(member.pk, session.pk, "cash", now=now, gateway=ApprovingGateway())


def _booked(session):
    session.refresh_from_db()
    return session.booked_count


@pytest.mark.django_db
def test_unpaid_cash_booking_reclaimed_after_a_day(paying_member, session, now):
    booking = _cash_booking(paying_member, session, now)

    reclaimed = tasks.reclaim_stale_bookings(now=now + timedelta(hours=25))

    assert reclaimed == 1
    booking.refresh_from_db()
    assert booking.status == Booking.Status.CANCELLED
    assert booking.cancellation_source == Booking.CancellationSource.SYSTEM
    assert _booked(session) == 0


@pytest.mark.django_db
def test_recent_pending_booking_is_kept(paying_member, session, now):
    booking = _cash_booking(paying_member, session, now)

    assert tasks.reclaim_stale_bookings(now=now + timedelta(hours=23)) == 0

    booking.refresh_from_db()
    assert booking.status == Booking.Status.PENDING
    assert _booked(session) == 1


@pytest.mark.django_db
def test_booking_confirmed_before_sweep_is_untouched(paying_member, session, now):
    booking = _cash_booking(paying_member, session, now)
    services.confirm_cash_booking(booking.pk, now=now + timedelta(hours=1))

    assert tasks.reclaim_stale_bookings(now=now + timedelta(hours=25)) == 0

    booking.refresh_from_db()
    assert booking.status == Booking.Status.CONFIRMED
    assert _booked(session) == 1


@pytest.mark.django_db
def test_sweep_is_safe_to_rerun(paying_member, session, now):
    _cash_booking(paying_member, session, now)
    later = now + timedelta(hours=30)

    assert tasks.reclaim_stale_bookings(now=later) == 1
    assert tasks.reclaim_stale_bookings(now=later) == 0
    assert services.reclaim_stale_booking(Booking.objects.get().pk, now=later) is False
    assert _booked(session) == 0


@pytest.mark.django_db
def test_one_failure_does_not_stop_the_sweep(paying_member, make_session, now, monkeypatch):
    other = Member.objects.create_user(email="late@example.com", has_used_free_session=True)
    session = make_session(capacity=5)
    first = _cash_booking(paying_member, session, now)
    second = _cash_booking(other, session, now + timedelta(minutes=5))
    original = tasks.reclaim_stale_booking

    def flaky(booking_id, now=None):
        if booking_id == first.pk:
            raise RuntimeError("database hiccup")
        return original(booking_id, now=now)

    monkeypatch.setattr(tasks, "reclaim_stale_booking", flaky)

    assert tasks.reclaim_stale_bookings(now=now + timedelta(hours=25)) == 1

    first.refresh_from_db()
    second.refresh_from_db()
    assert first.status == Booking.Status.PENDING
    assert second.status == Booking.Status.CANCELLED
    assert _booked(session) == 1


@pytest.mark.django_db
def test_periodic_task_and_command(paying_member, session):
    BookingAttempt.objects.create(origin="203.0.113.9", member=paying_member)
    old = BookingAttempt.objects.create(origin="203.0.113.9", member=paying_member)
    BookingAttempt.objects.filter(pk=old.pk).update(created_at=old.created_at - timedelta(days=2))
    ledger.try_reserve(session.pk)
    stale = Booking.objects.create(
        member=paying_member,
        session=session,
        status=Booking.Status.PENDING,
        payment_method=Booking.PaymentMethod.CASH,
    )
    Booking.objects.filter(pk=stale.pk).update(created_at=stale.created_at - timedelta(days=2))

    assert tasks.sweep_stale_bookings() == {"reclaimed": 1, "pruned": 1}
    assert BookingAttempt.objects.count() == 1

    call_command("sweep_stale_bookings")
    stale.refresh_from_db()
    assert stale.status == Booking.Status.CANCELLED
    assert _booked(session) == 0
