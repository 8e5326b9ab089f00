"""Schedule services: session generation and administrator operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from itertools import groupby
from typing import Any, List

from django.conf import settings  # type: ignore
from django.db import IntegrityError, transaction  # type: ignore
from django.db.models import Q, QuerySet  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.value_objects import DateRange

from . import ledger
from .domain.horizon import PlannedSession, plan_sessions, validate_class_fields
from .exceptions import InvalidTemplate, SessionNotFound, TemplateNotFound
from .models import ClassTemplate, Session

logger = logging.getLogger(__name__)

TEMPLATE_FIELDS = (
    "title",
    "description",
    "class_type",
    "day_of_week",
    "start_time",
    "duration_minutes",
    "capacity",
    "price",
    "is_active",
)
SESSION_FIELDS = (
    "title",
    "description",
    "class_type",
    "date",
    "start_time",
    "duration_minutes",
    "capacity",
    "price",
    "is_active",
)


# ============================================================================
# SESSION GENERATOR
# ============================================================================

@dataclass
class HorizonResult:
    window: DateRange
    created: int = 0
    failed_templates: List[int] = field(default_factory=list)


def ensure_horizon(today: date | None = None, horizon_days: int | None = None) -> HorizonResult:
    """
    Materialize sessions for every active template over [today, today + horizon].

    Idempotent: existing (template, date) sessions are never modified, so the
    call is safe on every start and on a timer. A template whose sessions
    fail to save is logged and skipped; the others still run.
    """
    today = today or timezone.localdate()
    if horizon_days is None:
        horizon_days = settings.SESSION_HORIZON_DAYS
    window = DateRange.starting(today, horizon_days)
    result = HorizonResult(window=window)

    templates = list(ClassTemplate.objects.filter(is_active=True))
    if not templates:
        return result

    existing = set(
        Session.objects.filter(
            template__in=templates,
            date__gte=window.start_date,
            date__lte=window.end_date,
        ).values_list("template_id", "date")
    )
    plan = plan_sessions((t.as_slot() for t in templates), window, existing)

    plan.sort(key=lambda p: p.template_id)
    for template_id, planned in groupby(plan, key=lambda p: p.template_id):
        try:
            result.created += _apply_template_plan(list(planned))
        except Exception as e:
            result.failed_templates.append(template_id)
            logger.error(f"Session generation failed for template {template_id}: {e}", exc_info=True)

    if result.created:
        logger.info(f"Generated {result.created} sessions for {window}")
    return result


def _apply_template_plan(planned: List[PlannedSession]) -> int:
    created = 0
    for item in planned:
        try:
            with transaction.atomic():
                Session.objects.create(
                    template_id=item.template_id,
                    title=item.title,
                    description=item.description,
                    class_type=item.class_type,
                    date=item.date,
                    start_time=item.start_time,
                    duration_minutes=item.duration_minutes,
                    capacity=item.capacity,
                    price=item.price,
                    is_active=True,
                )
            created += 1
        except IntegrityError:
            # Another generator run created it first
            logger.debug(f"Session for template {item.template_id} on {item.date} already exists")
    return created


def list_upcoming_sessions(now: datetime | None = None) -> QuerySet:
    """Active sessions that have not started yet, soonest first."""
    local_now = timezone.localtime(now or timezone.now())
    today = local_now.date()
    return (
        Session.objects.filter(is_active=True)
        .filter(Q(date__gt=today) | Q(date=today, start_time__gt=local_now.time()))
        .order_by("date", "start_time")
    )


# ============================================================================
# TEMPLATE ADMINISTRATION
# ============================================================================

def _clean_fields(data: dict[str, Any], allowed: tuple[str, ...]) -> dict[str, Any]:
    unknown = set(data) - set(allowed)
    if unknown:
        raise InvalidTemplate(f"Unknown fields: {', '.join(sorted(unknown))}")
    return dict(data)


def _validate(data: dict[str, Any]) -> None:
    validate_class_fields(
        title=data.get("title"),
        class_type=data.get("class_type"),
        day_of_week=data.get("day_of_week"),
        duration_minutes=data.get("duration_minutes"),
        capacity=data.get("capacity"),
        price=data.get("price"),
    )


def get_template(template_id: int) -> ClassTemplate:
    try:
        return ClassTemplate.objects.get(pk=template_id)
    except ClassTemplate.DoesNotExist as exc:
        raise TemplateNotFound() from exc


def create_template(
    *,
    title: str,
    class_type: str,
    day_of_week: int,
    start_time: time,
    duration_minutes: int = 60,
    capacity: int | None = None,
    price: Decimal | None = None,
    description: str = "",
    is_active: bool = True,
) -> ClassTemplate:
    data = {
        "title": title,
        "class_type": class_type,
        "day_of_week": day_of_week,
        "start_time": start_time,
        "duration_minutes": duration_minutes,
        "capacity": capacity if capacity is not None else settings.SESSION_DEFAULT_CAPACITY,
        "price": price if price is not None else settings.SESSION_DEFAULT_PRICE,
        "description": description,
        "is_active": is_active,
    }
    _validate(data)
    template = ClassTemplate.objects.create(**data)
    logger.info(f"Created class template {template.pk}: {template}")
    return template


def update_template(template_id: int, **changes: Any) -> ClassTemplate:
    """Edit a template. Already generated sessions keep their values."""
    changes = _clean_fields(changes, TEMPLATE_FIELDS)
    _validate(changes)
    template = get_template(template_id)
    for name, value in changes.items():
        setattr(template, name, value)
    template.save()
    return template


def toggle_template(template_id: int, is_active: bool | None = None) -> ClassTemplate:
    """
    Flip (or set) a template's active flag.

    Only future generation is affected; sessions already materialized from
    the template stay exactly as they are.
    """
    template = get_template(template_id)
    template.is_active = (not template.is_active) if is_active is None else is_active
    template.save(update_fields=["is_active", "updated_at"])
    logger.info(f"Class template {template_id} is_active -> {template.is_active}")
    return template


def delete_template(template_id: int) -> None:
    """Delete a template; its generated sessions become ad-hoc sessions."""
    template = get_template(template_id)
    template.delete()
    logger.info(f"Deleted class template {template_id}")


# ============================================================================
# AD-HOC SESSIONS
# ============================================================================

def get_session(session_id: int) -> Session:
    try:
        return Session.objects.get(pk=session_id)
    except Session.DoesNotExist as exc:
        raise SessionNotFound() from exc


def create_session(
    *,
    title: str,
    class_type: str,
    date: date,
    start_time: time,
    duration_minutes: int = 60,
    capacity: int | None = None,
    price: Decimal | None = None,
    description: str = "",
    is_active: bool = True,
) -> Session:
    """Create a session that is not tied to any template."""
    data = {
        "title": title,
        "class_type": class_type,
        "date": date,
        "start_time": start_time,
        "duration_minutes": duration_minutes,
        "capacity": capacity if capacity is not None else settings.SESSION_DEFAULT_CAPACITY,
        "price": price if price is not None else settings.SESSION_DEFAULT_PRICE,
        "description": description,
        "is_active": is_active,
    }
    _validate(data)
    session = Session.objects.create(template=None, **data)
    logger.info(f"Created ad-hoc session {session.pk}: {session}")
    return session


@transaction.atomic
def update_session(session_id: int, **changes: Any) -> Session:
    """
    Edit a session's details. ``booked_count`` is never touched here, and
    capacity cannot drop below the seats already reserved.
    """
    changes = _clean_fields(changes, SESSION_FIELDS)
    _validate(changes)
    session = get_session(session_id)

    capacity = changes.pop("capacity", None)
    if capacity is not None and capacity != session.capacity:
        if not ledger.resize(session_id, capacity):
            raise InvalidTemplate("Capacity cannot be lower than the number of booked seats.")

    if changes:
        Session.objects.filter(pk=session_id).update(updated_at=timezone.now(), **changes)
    return get_session(session_id)
