"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import timedelta
from unittest import mock

from django.test import override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.bookings.payments import PaymentError
from apps.classes.models import Session
from apps.members.models import Member


class FakeGateway:
    def __init__(self, decline: bool = False):
        self.decline = decline

    def charge(self, amount, payment_token, *, reference):
        if self.decline:
            raise PaymentError("Card declined")
        return "pay_test_1"


class BookingAPITests(APITestCase):
    """Covers booking, cancelling, cash confirmation and the admin dashboard."""

    def setUp(self) -> None:
        self.member = Member.objects.create_user(email="member@example.com", password="MemberPass123")
        self.regular = Member.objects.create_user(
            email="regular@example.com", password="RegularPass123", has_used_free_session=True
        )
        self.admin = Member.objects.create_superuser(email="admin@example.com", password="AdminPass123")
        in_two_days = timezone.localdate() + timedelta(days=2)
        self.session = Session.objects.create(
            title="Evening Flow", class_type="yoga", date=in_two_days, start_time="18:00", capacity=12
        )
        self.other_session = Session.objects.create(
            title="Morning Flow", class_type="yoga", date=in_two_days, start_time="07:00", capacity=12
        )
        self.list_url = reverse("booking-list")
        patcher = mock.patch("apps.bookings.services.get_payment_gateway", return_value=FakeGateway())
        self.gateway = patcher.start()
        self.addCleanup(patcher.stop)

    def _book(self, session: Session, method: str = "cash", headers: dict | None = None, **fields):
        payload = {"session_id": session.pk, "payment_method": method, **fields}
        return self.client.post(self.list_url, payload, format="json", **(headers or {}))

    def test_anonymous_cannot_book(self) -> None:
        response = self._book(self.session)

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_first_booking_is_free(self) -> None:
        self.client.force_authenticate(self.member)

        response = self._book(self.session, "card")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertTrue(response.data["is_free_session"])
        self.assertEqual(response.data["status"], Booking.Status.CONFIRMED)
        self.assertEqual(response.data["session"]["available_seats"], 11)

    def test_card_booking_confirmed(self) -> None:
        self.client.force_authenticate(self.regular)

        response = self._book(self.session, "card", payment_token="cnon:ok")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertEqual(response.data["status"], Booking.Status.CONFIRMED)
        self.assertEqual(response.data["price"], "5.00")
        self.assertEqual(Booking.objects.get().payment_reference, "pay_test_1")

    def test_declined_card_returns_payment_failed(self) -> None:
        self.gateway.return_value = FakeGateway(decline=True)
        self.client.force_authenticate(self.regular)

        response = self._book(self.session, "card", payment_token="cnon:bad")

        self.assertEqual(response.status_code, status.HTTP_402_PAYMENT_REQUIRED, response.data)
        self.assertEqual(response.data["code"], "payment_failed")
        self.assertFalse(Booking.objects.exists())
        self.session.refresh_from_db()
        self.assertEqual(self.session.booked_count, 0)

    def test_full_session_returns_conflict(self) -> None:
        Session.objects.filter(pk=self.session.pk).update(capacity=1, booked_count=1)
        self.client.force_authenticate(self.regular)

        response = self._book(self.session)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertEqual(response.data["code"], "session_full")

    def test_unknown_session_returns_not_found(self) -> None:
        self.client.force_authenticate(self.regular)

        response = self.client.post(self.list_url, {"session_id": 99999, "payment_method": "cash"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND, response.data)

    @override_settings(BOOKING_MAX_PER_ORIGIN_PER_DAY=1)
    def test_forwarded_origin_is_rate_limited(self) -> None:
        self.client.force_authenticate(self.regular)

        first = self._book(self.session, headers={"HTTP_X_FORWARDED_FOR": "198.51.100.4, 10.0.0.1"})
        self.assertEqual(first.status_code, status.HTTP_201_CREATED, first.data)
        self.assertEqual(Booking.objects.get().origin, "198.51.100.4")

        second = self.client.post(
            self.list_url,
            {"session_id": self.other_session.pk, "payment_method": "cash"},
            format="json",
            HTTP_X_FORWARDED_FOR="198.51.100.4",
        )
        self.assertEqual(second.status_code, status.HTTP_429_TOO_MANY_REQUESTS, second.data)
        self.assertEqual(second.data["code"], "rate_limited")

    def test_member_sees_only_own_bookings(self) -> None:
        self.client.force_authenticate(self.member)
        self._book(self.session)
        self.client.force_authenticate(self.regular)
        self._book(self.other_session)

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["member_id"], self.regular.pk)

        self.client.force_authenticate(self.admin)
        everything = self.client.get(self.list_url)
        pending = self.client.get(self.list_url, {"status": "pending"})
        self.assertEqual(len(everything.data), 2)
        self.assertEqual(len(pending.data), 1)

    def test_cancel_restores_free_session(self) -> None:
        self.client.force_authenticate(self.member)
        booking_id = self._book(self.session).data["id"]

        response = self.client.post(reverse("booking-cancel", args=[booking_id]), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(response.data["free_session_restored"])
        self.assertFalse(response.data["free_session_forfeited"])
        self.assertEqual(response.data["booking"]["status"], Booking.Status.CANCELLED)

        again = self.client.post(reverse("booking-cancel", args=[booking_id]), {}, format="json")
        self.assertEqual(again.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(again.data["code"], "already_cancelled")

    def test_cannot_cancel_someone_elses_booking(self) -> None:
        self.client.force_authenticate(self.member)
        booking_id = self._book(self.session).data["id"]
        self.client.force_authenticate(self.regular)

        response = self.client.post(reverse("booking-cancel", args=[booking_id]), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN, response.data)
        self.assertEqual(Booking.objects.get(pk=booking_id).status, Booking.Status.CONFIRMED)

    def test_cannot_cancel_class_that_already_started(self) -> None:
        yesterday = Session.objects.create(
            title="Evening Flow",
            class_type="yoga",
            date=timezone.localdate() - timedelta(days=1),
            start_time="18:00",
            capacity=12,
            booked_count=1,
        )
        booking = Booking.objects.create(
            member=self.regular, session=yesterday, status=Booking.Status.CONFIRMED, payment_method="cash"
        )
        self.client.force_authenticate(self.regular)

        response = self.client.post(reverse("booking-cancel", args=[booking.pk]), {}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, response.data)
        self.assertEqual(response.data["code"], "session_unavailable")

    def test_admin_confirms_cash(self) -> None:
        self.client.force_authenticate(self.regular)
        booking_id = self._book(self.session).data["id"]
        url = reverse("booking-confirm-cash", args=[booking_id])

        forbidden = self.client.post(url, {}, format="json")
        self.assertEqual(forbidden.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.post(url, {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["status"], Booking.Status.CONFIRMED)

    def test_admin_stats(self) -> None:
        self.client.force_authenticate(self.member)
        self._book(self.session)
        self.client.force_authenticate(self.regular)
        self._book(self.other_session)
        self.client.force_authenticate(self.admin)

        response = self.client.get(reverse("booking-stats"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            response.data,
            {
                "upcoming_sessions": 2,
                "sessions_next_7_days": 2,
                "confirmed_bookings": 1,
                "pending_bookings": 1,
                "members": 2,
            },
        )
