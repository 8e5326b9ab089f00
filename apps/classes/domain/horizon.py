"""
Session Horizon Planning

Pure functions that expand recurring weekly templates into the dated
sessions missing from a window. Nothing here touches the database: the
generator feeds in the active templates and the (template, date) keys that
already exist, and applies the returned plan.
"""

from dataclasses import dataclass
from datetime import date, time
from decimal import Decimal
from typing import Iterable, List, Set, Tuple

from shared.domain.value_objects import DateRange

from apps.classes.exceptions import InvalidTemplate

MIN_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 240
MAX_CAPACITY = 100


@dataclass(frozen=True)
class TemplateSlot:
    """A recurring weekly class as the planner sees it"""
    template_id: int
    day_of_week: int  # 0=Monday .. 6=Sunday
    start_time: time
    duration_minutes: int
    class_type: str
    title: str
    description: str
    capacity: int
    price: Decimal


@dataclass(frozen=True)
class PlannedSession:
    """A session that should exist but does not yet"""
    template_id: int
    date: date
    start_time: time
    duration_minutes: int
    class_type: str
    title: str
    description: str
    capacity: int
    price: Decimal

    @property
    def key(self) -> Tuple[int, date]:
        return (self.template_id, self.date)


def plan_sessions(
    templates: Iterable[TemplateSlot],
    window: DateRange,
    existing: Set[Tuple[int, date]],
) -> List[PlannedSession]:
    """
    Return the sessions to create for `window`.

    One session per (template, matching weekday) pair, skipping every pair
    already present in `existing`. Output is ordered by date, then start time.
    """
    planned: List[PlannedSession] = []
    for slot in templates:
        for day in window.days_matching_weekday(slot.day_of_week):
            if (slot.template_id, day) in existing:
                continue
            planned.append(PlannedSession(
                template_id=slot.template_id,
                date=day,
                start_time=slot.start_time,
                duration_minutes=slot.duration_minutes,
                class_type=slot.class_type,
                title=slot.title,
                description=slot.description,
                capacity=slot.capacity,
                price=slot.price,
            ))
    planned.sort(key=lambda p: (p.date, p.start_time, p.template_id))
    return planned


def validate_class_fields(
    *,
    title: str | None = None,
    class_type: str | None = None,
    day_of_week: int | None = None,
    duration_minutes: int | None = None,
    capacity: int | None = None,
    price: Decimal | None = None,
) -> None:
    """Validate administrator input; only the fields passed are checked."""
    if title is not None and not title.strip():
        raise InvalidTemplate("Title is required.")
    if class_type is not None and not class_type.strip():
        raise InvalidTemplate("Class type is required.")
    if day_of_week is not None and not 0 <= day_of_week <= 6:
        raise InvalidTemplate("Day of week must be between 0 (Monday) and 6 (Sunday).")
    if duration_minutes is not None and not MIN_DURATION_MINUTES <= duration_minutes <= MAX_DURATION_MINUTES:
        raise InvalidTemplate(
            f"Duration must be between {MIN_DURATION_MINUTES} and {MAX_DURATION_MINUTES} minutes."
        )
    if capacity is not None and not 1 <= capacity <= MAX_CAPACITY:
        raise InvalidTemplate(f"Capacity must be between 1 and {MAX_CAPACITY}.")
    if price is not None and price < 0:
        raise InvalidTemplate("Price cannot be negative.")
