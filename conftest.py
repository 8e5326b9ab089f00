"""Shared pytest fixtures: members, sessions and a fixed clock."""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal

import pytest


@pytest.fixture
def now() -> datetime:
    """Monday 7 January 2030, 09:00 local time."""
    from django.utils import timezone

    return timezone.make_aware(datetime(2030, 1, 7, 9, 0), timezone.get_default_timezone())


@pytest.fixture
def member(db):
    from apps.members.models import Member

    return Member.objects.create_user(email="member@example.com", password="MemberPass123")


@pytest.fixture
def other_member(db):
    from apps.members.models import Member

    return Member.objects.create_user(email="other@example.com", password="OtherPass123")


@pytest.fixture
def paying_member(db):
    from apps.members.models import Member

    return Member.objects.create_user(
        email="regular@example.com",
        password="RegularPass123",
        has_used_free_session=True,
    )


@pytest.fixture
def admin_member(db):
    from apps.members.models import Member

    return Member.objects.create_superuser(email="admin@example.com", password="AdminPass123")


@pytest.fixture
def make_session(db):
    from apps.classes.models import Session

    def factory(
        *,
        on: date = date(2030, 1, 8),
        at: time = time(18, 0),
        capacity: int = 12,
        price: Decimal = Decimal("5.00"),
        is_active: bool = True,
        title: str = "Evening Flow",
    ):
        return Session.objects.create(
            title=title,
            class_type="yoga",
            date=on,
            start_time=at,
            duration_minutes=60,
            capacity=capacity,
            price=price,
            is_active=is_active,
        )

    return factory


@pytest.fixture
def session(make_session):
    return make_session()
