from concurrent.futures import ThreadPoolExecutor

import pytest
from django.db import connection

from apps.classes import ledger
from apps.classes.exceptions import SessionNotFound
from apps.classes.models import Session


def _booked(session: Session) -> int:
    session.refresh_from_db()
    return session.booked_count


@pytest.mark.django_db
def test_reserve_until_full(make_session):
    session = make_session(capacity=2)

    assert ledger.try_reserve(session.pk) is True
    assert ledger.try_reserve(session.pk) is True
    assert ledger.try_reserve(session.pk) is False
    assert _booked(session) == 2


@pytest.mark.django_db
def test_release_gives_seat_back(make_session):
    session = make_session(capacity=1)
    ledger.try_reserve(session.pk)

    assert ledger.release(session.pk) is True
    assert _booked(session) == 0
    assert ledger.try_reserve(session.pk) is True


@pytest.mark.django_db
def test_release_never_goes_below_zero(session):
    assert ledger.release(session.pk) is False
    assert _booked(session) == 0


@pytest.mark.django_db
def test_reserve_unknown_session():
    with pytest.raises(SessionNotFound):
        ledger.try_reserve(424242)


@pytest.mark.django_db
def test_resize_respects_booked_seats(make_session):
    session = make_session(capacity=5)
    for _ in range(3):
        ledger.try_reserve(session.pk)

    assert ledger.resize(session.pk, 2) is False
    assert ledger.resize(session.pk, 3) is True
    assert ledger.try_reserve(session.pk) is False


@pytest.mark.django_db(transaction=True)
def test_concurrent_reservations_never_oversell(make_session):
    session = make_session(capacity=5)

    def reserve(_):
        try:
            return ledger.try_reserve(session.pk)
        finally:
            connection.close()

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(reserve, range(20)))

    assert results.count(True) == 5
    assert _booked(session) == 5
