"""
Capacity Ledger

The only writer of ``Session.booked_count``. Both operations are a single
conditional UPDATE, so the database serializes them per session row: the
check and the increment can never be split by another writer.

Callers that must undo a reservation together with other writes (the free
session claim, a status transition) wrap the ledger call and those writes in
one ``transaction.atomic()`` block.
"""

from __future__ import annotations

import logging

from django.db.models import F  # type: ignore

from .exceptions import SessionNotFound
from .models import Session

logger = logging.getLogger(__name__)


def try_reserve(session_id: int) -> bool:
    """
    Take one seat. Returns False, without writing, when the session is full.

    Raises SessionNotFound for an unknown session id.
    """
    updated = (
        Session.objects.filter(pk=session_id, booked_count__lt=F("capacity"))
        .update(booked_count=F("booked_count") + 1)
    )
    if updated:
        logger.debug(f"Reserved seat in session {session_id}")
        return True

    if not Session.objects.filter(pk=session_id).exists():
        raise SessionNotFound()

    logger.info(f"Session {session_id} is full")
    return False


def release(session_id: int) -> bool:
    """
    Give one seat back, never below zero.

    A release against an empty counter means a seat was released twice; it
    is logged and ignored rather than raised.
    """
    updated = (
        Session.objects.filter(pk=session_id, booked_count__gt=0)
        .update(booked_count=F("booked_count") - 1)
    )
    if updated:
        logger.debug(f"Released seat in session {session_id}")
        return True

    logger.error(f"Release on session {session_id} with no booked seats ignored")
    return False


def resize(session_id: int, capacity: int) -> bool:
    """Change capacity unless it would drop below the seats already taken."""
    updated = (
        Session.objects.filter(pk=session_id, booked_count__lte=capacity)
        .update(capacity=capacity)
    )
    return bool(updated)
