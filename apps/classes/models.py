"""Schedule models: recurring class templates and dated sessions."""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.classes.domain.horizon import TemplateSlot


def default_capacity() -> int:
    return settings.SESSION_DEFAULT_CAPACITY


def default_price() -> Decimal:
    return settings.SESSION_DEFAULT_PRICE


class ClassTemplate(models.Model):
    """A recurring weekly class. Sessions are generated from active templates."""

    class Weekday(models.IntegerChoices):
        MONDAY = 0, _("Monday")
        TUESDAY = 1, _("Tuesday")
        WEDNESDAY = 2, _("Wednesday")
        THURSDAY = 3, _("Thursday")
        FRIDAY = 4, _("Friday")
        SATURDAY = 5, _("Saturday")
        SUNDAY = 6, _("Sunday")

    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    class_type = models.CharField(max_length=50)
    day_of_week = models.PositiveSmallIntegerField(
        choices=Weekday.choices,
        validators=[MaxValueValidator(6)],
    )
    start_time = models.TimeField(help_text=_("Local start time"))
    duration_minutes = models.PositiveSmallIntegerField(default=60)
    capacity = models.PositiveIntegerField(default=default_capacity, validators=[MinValueValidator(1)])
    price = models.DecimalField(max_digits=8, decimal_places=2, default=default_price)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["day_of_week", "start_time"]
        verbose_name = _("Class template")
        verbose_name_plural = _("Class templates")

    def __str__(self) -> str:
        return f"{self.get_day_of_week_display()} {self.start_time.strftime('%H:%M')} - {self.title}"

    def as_slot(self) -> TemplateSlot:
        return TemplateSlot(
            template_id=self.pk,
            day_of_week=self.day_of_week,
            start_time=self.start_time,
            duration_minutes=self.duration_minutes,
            class_type=self.class_type,
            title=self.title,
            description=self.description,
            capacity=self.capacity,
            price=self.price,
        )


class Session(models.Model):
    """
    A dated, capacity-limited class instance that members book.

    ``booked_count`` is written only by ``apps.classes.ledger``.
    """

    template = models.ForeignKey(
        ClassTemplate,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sessions",
        help_text=_("Empty for ad-hoc sessions"),
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    class_type = models.CharField(max_length=50)
    date = models.DateField()
    start_time = models.TimeField()
    duration_minutes = models.PositiveSmallIntegerField(default=60)
    capacity = models.PositiveIntegerField(default=default_capacity, validators=[MinValueValidator(1)])
    booked_count = models.PositiveIntegerField(default=0, editable=False)
    price = models.DecimalField(max_digits=8, decimal_places=2, default=default_price)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["date", "start_time"]
        verbose_name = _("Session")
        verbose_name_plural = _("Sessions")
        constraints = [
            models.CheckConstraint(
                condition=models.Q(booked_count__lte=models.F("capacity")),
                name="session_booked_within_capacity",
            ),
            models.UniqueConstraint(
                fields=["template", "date"],
                name="session_unique_template_date",
            ),
        ]
        indexes = [
            models.Index(fields=["date", "start_time"], name="session_date_time_idx"),
            models.Index(fields=["is_active", "date"], name="session_active_date_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.title} on {self.date.isoformat()} at {self.start_time.strftime('%H:%M')}"

    @property
    def starts_at(self) -> datetime:
        """Start as an aware datetime in the local calendar."""
        naive = datetime.combine(self.date, self.start_time)
        return timezone.make_aware(naive, timezone.get_default_timezone())

    @property
    def ends_at(self) -> datetime:
        return self.starts_at + timedelta(minutes=self.duration_minutes)

    @property
    def available_seats(self) -> int:
        return max(self.capacity - self.booked_count, 0)

    @property
    def is_full(self) -> bool:
        return self.booked_count >= self.capacity

    def has_started(self, now: datetime | None = None) -> bool:
        return (now or timezone.now()) >= self.starts_at
