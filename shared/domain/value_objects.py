"""
Common Value Objects

Value objects used across multiple domains:
- Money: A monetary amount with currency (session prices, card charges)
- DateRange: An inclusive range of calendar days (the generation horizon)
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterator

from shared.domain.base import ValueObject


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Represents a monetary amount with currency.
    Immutable and supports the arithmetic the booking engine needs.
    """
    amount: Decimal
    currency: str = 'GBP'

    def __post_init__(self):
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency:
            raise ValueError("Currency is required")
        if self.currency not in ['GBP', 'EUR', 'USD']:
            raise ValueError(f"Unsupported currency: {self.currency}")

    def __add__(self, other: 'Money') -> 'Money':
        """Add two money objects"""
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    @property
    def minor_units(self) -> int:
        """Amount in the smallest currency unit (pence, cents)"""
        return int((self.amount * 100).quantize(Decimal('1')))

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents the days from start_date to end_date, both inclusive.
    Used for the rolling session generation window.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date > self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must not be after end date ({self.end_date})")

    @classmethod
    def starting(cls, start: date, days: int) -> 'DateRange':
        """Range covering `start` and the following `days` days"""
        if days < 0:
            raise ValueError("Horizon must not be negative")
        return cls(start, start + timedelta(days=days))

    def contains(self, check_date: date) -> bool:
        return self.start_date <= check_date <= self.end_date

    def days(self) -> Iterator[date]:
        """Iterate over every day in the range"""
        current = self.start_date
        while current <= self.end_date:
            yield current
            current += timedelta(days=1)

    def days_matching_weekday(self, weekday: int) -> Iterator[date]:
        """Iterate over the days whose weekday() equals `weekday` (0=Monday)"""
        offset = (weekday - self.start_date.weekday()) % 7
        current = self.start_date + timedelta(days=offset)
        while current <= self.end_date:
            yield current
            current += timedelta(days=7)

    def __len__(self) -> int:
        """Number of days in the range"""
        return (self.end_date - self.start_date).days + 1

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"
