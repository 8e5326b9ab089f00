from dataclasses import dataclass
from datetime import date
from decimal import Decimal

import pytest

from apps.classes.models import Session
from shared.application.message_bus import MessageBus, message_bus
from shared.application.uow import DjangoUnitOfWork
from shared.domain.base import DomainEvent
from shared.domain.value_objects import DateRange, Money


@dataclass
class SomethingHappened(DomainEvent):
    name: str


def test_message_bus_isolates_failing_handlers():
    bus = MessageBus()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    def record(event):
        seen.append(event.name)

    bus.register_event_handler(SomethingHappened, broken)
    bus.register_event_handler(SomethingHappened, record)
    bus.register_event_handler(SomethingHappened, record)

    bus.publish_events([SomethingHappened(name="first"), SomethingHappened(name="second")])

    assert seen == ["first", "second"]


def test_events_get_identity_and_timestamp():
    first, second = SomethingHappened(name="a"), SomethingHappened(name="a")
    assert first.event_id != second.event_id
    assert first.occurred_at.tzinfo is not None


@pytest.mark.django_db
def test_events_published_after_commit(django_capture_on_commit_callbacks):
    seen = []

    def record(event):
        seen.append(event.name)

    message_bus.register_event_handler(SomethingHappened, record)
    try:
        with django_capture_on_commit_callbacks(execute=True):
            with DjangoUnitOfWork() as uow:
                uow.add_event(SomethingHappened(name="committed"))
                assert seen == []
    finally:
        message_bus.unregister_event_handler(SomethingHappened, record)

    assert seen == ["committed"]


@pytest.mark.django_db
def test_rollback_discards_writes_and_events(django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks() as callbacks:
        with pytest.raises(ValueError):
            with DjangoUnitOfWork() as uow:
                Session.objects.create(title="Doomed", class_type="yoga", date=date(2030, 1, 8), start_time="18:00")
                uow.add_event(SomethingHappened(name="never"))
                raise ValueError("abort")

    assert callbacks == []
    assert not Session.objects.exists()


def test_money():
    total = Money(Decimal("5.00")) + Money(Decimal("2.50"))
    assert total == Money(Decimal("7.50"), "GBP")
    assert total.minor_units == 750
    assert Money(Decimal("0")).is_zero
    with pytest.raises(ValueError):
        Money(Decimal("-1"))
    with pytest.raises(ValueError):
        Money(Decimal("1"), "GBP") + Money(Decimal("1"), "EUR")


def test_date_range_is_inclusive():
    window = DateRange.starting(date(2030, 1, 7), 14)
    assert len(window) == 15
    assert window.contains(date(2030, 1, 21))
    assert not window.contains(date(2030, 1, 22))
    assert list(window.days_matching_weekday(4)) == [date(2030, 1, 11), date(2030, 1, 18)]
    with pytest.raises(ValueError):
        DateRange(date(2030, 1, 2), date(2030, 1, 1))
