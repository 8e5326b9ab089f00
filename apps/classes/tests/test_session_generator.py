from datetime import date, time
from decimal import Decimal

import pytest
from django.core.management import call_command

from apps.classes import ledger, services
from apps.classes.exceptions import InvalidTemplate, SessionNotFound
from apps.classes.models import Session
from apps.classes.tasks import ensure_session_horizon

MONDAY = date(2030, 1, 7)


@pytest.fixture
def monday_template(db):
    return services.create_template(
        title="Evening Flow",
        class_type="yoga",
        day_of_week=0,
        start_time=time(18, 0),
    )


@pytest.mark.django_db
def test_horizon_creates_sessions_with_defaults(monday_template):
    result = services.ensure_horizon(today=MONDAY, horizon_days=14)

    assert result.created == 3
    sessions = list(Session.objects.filter(template=monday_template))
    assert [s.date for s in sessions] == [date(2030, 1, 7), date(2030, 1, 14), date(2030, 1, 21)]
    assert all(s.capacity == 12 and s.price == Decimal("5.00") for s in sessions)
    assert all(s.booked_count == 0 for s in sessions)


@pytest.mark.django_db
def test_horizon_is_idempotent(monday_template):
    services.ensure_horizon(today=MONDAY, horizon_days=14)
    first = Session.objects.filter(template=monday_template).order_by("date").first()
    assert ledger.try_reserve(first.pk)

    second = services.ensure_horizon(today=MONDAY, horizon_days=14)

    assert second.created == 0
    assert Session.objects.count() == 3
    first.refresh_from_db()
    assert first.booked_count == 1


@pytest.mark.django_db
def test_inactive_template_generates_nothing(monday_template):
    services.toggle_template(monday_template.pk)

    result = services.ensure_horizon(today=MONDAY, horizon_days=14)

    assert result.created == 0
    assert not Session.objects.exists()


@pytest.mark.django_db
def test_deactivating_template_keeps_existing_sessions(monday_template):
    services.ensure_horizon(today=MONDAY, horizon_days=14)

    services.toggle_template(monday_template.pk, is_active=False)

    assert Session.objects.filter(template=monday_template, is_active=True).count() == 3


@pytest.mark.django_db
def test_template_edit_does_not_rewrite_sessions(monday_template):
    services.ensure_horizon(today=MONDAY, horizon_days=7)

    services.update_template(monday_template.pk, title="Morning Flow", capacity=20)
    services.ensure_horizon(today=MONDAY, horizon_days=14)

    old = Session.objects.get(template=monday_template, date=date(2030, 1, 7))
    new = Session.objects.get(template=monday_template, date=date(2030, 1, 21))
    assert (old.title, old.capacity) == ("Evening Flow", 12)
    assert (new.title, new.capacity) == ("Morning Flow", 20)


@pytest.mark.django_db
def test_failing_template_does_not_stop_others(monday_template, monkeypatch):
    other = services.create_template(
        title="Pilates", class_type="pilates", day_of_week=2, start_time=time(7, 0)
    )
    original = services._apply_template_plan

    def flaky(planned):
        if planned[0].template_id == monday_template.pk:
            raise RuntimeError("storage unavailable")
        return original(planned)

    monkeypatch.setattr(services, "_apply_template_plan", flaky)

    result = services.ensure_horizon(today=MONDAY, horizon_days=14)

    assert result.failed_templates == [monday_template.pk]
    assert Session.objects.filter(template=other).count() == 2
    assert not Session.objects.filter(template=monday_template).exists()


@pytest.mark.django_db
def test_create_template_rejects_bad_duration():
    with pytest.raises(InvalidTemplate):
        services.create_template(
            title="Marathon", class_type="yoga", day_of_week=0, start_time=time(6, 0), duration_minutes=600
        )


@pytest.mark.django_db
def test_ad_hoc_session_and_capacity_resize():
    session = services.create_session(
        title="Workshop", class_type="workshop", date=date(2030, 2, 1), start_time=time(10, 0), capacity=3
    )
    assert session.template is None
    ledger.try_reserve(session.pk)
    ledger.try_reserve(session.pk)

    with pytest.raises(InvalidTemplate):
        services.update_session(session.pk, capacity=1)

    updated = services.update_session(session.pk, capacity=2, title="Weekend Workshop")
    assert (updated.capacity, updated.booked_count, updated.title) == (2, 2, "Weekend Workshop")


@pytest.mark.django_db
def test_update_unknown_session():
    with pytest.raises(SessionNotFound):
        services.update_session(12345, title="Nope")


@pytest.mark.django_db
def test_upcoming_sessions_hide_past_and_inactive(make_session, now):
    make_session(on=date(2030, 1, 7), at=time(8, 0), title="Earlier today")
    later = make_session(on=date(2030, 1, 7), at=time(18, 0), title="Later today")
    make_session(on=date(2030, 1, 9), is_active=False, title="Cancelled class")
    tomorrow = make_session(on=date(2030, 1, 8), title="Tomorrow")

    upcoming = list(services.list_upcoming_sessions(now))

    assert upcoming == [later, tomorrow]


@pytest.mark.django_db
def test_periodic_task_and_command(monday_template):
    result = ensure_session_horizon()
    assert result["failed"] == 0
    assert result["created"] >= 2

    call_command("ensure_horizon", "--days", "14")
    assert Session.objects.filter(template=monday_template).count() == result["created"]
