"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
They are published after successful transaction commits; the
notifications app turns them into emails.
"""

from dataclasses import dataclass
from decimal import Decimal

from shared.domain.base import DomainEvent


@dataclass
class BookingPlaced(DomainEvent):
    """
    Event: A new booking holds a seat

    Status is CONFIRMED for free and settled card bookings, PENDING for
    cash bookings awaiting staff confirmation.

    Triggers:
    - Send booking confirmation email to the member
    """
    booking_id: int
    member_id: int
    session_id: int
    status: str
    payment_method: str
    is_free_session: bool
    price: Decimal


@dataclass
class BookingConfirmed(DomainEvent):
    """
    Event: Staff confirmed a cash booking (PENDING -> CONFIRMED)

    Triggers:
    - Send payment received email to the member
    """
    booking_id: int
    member_id: int
    session_id: int


@dataclass
class BookingCancelled(DomainEvent):
    """
    Event: Booking was cancelled and its seat released

    `source` is "member", "admin" or "system" (stale pending sweep).

    Triggers:
    - Send cancellation email, stating whether a free session was
      restored or forfeited
    """
    booking_id: int
    member_id: int | None
    session_id: int
    source: str
    reason: str = ""
    free_session_restored: bool = False
    free_session_forfeited: bool = False
