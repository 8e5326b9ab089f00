"""
Booking Lifecycle

State transitions:
- PENDING -> CONFIRMED (card charge settled, or staff confirmed cash)
- PENDING -> CANCELLED (member/admin cancelled, payment never arrived)
- CONFIRMED -> CANCELLED (member or admin cancelled)

CANCELLED is terminal, and nothing re-enters PENDING. Every transition is
applied as a conditional UPDATE filtered on ``sources_for(target)``; the
worker whose UPDATE matched the row owns the side effects (seat release,
free session restoration).
"""

from datetime import datetime, timedelta
from typing import Dict, FrozenSet, Tuple

PENDING = "pending"
CONFIRMED = "confirmed"
CANCELLED = "cancelled"

TRANSITIONS: Dict[str, FrozenSet[str]] = {
    PENDING: frozenset({CONFIRMED, CANCELLED}),
    CONFIRMED: frozenset({CANCELLED}),
    CANCELLED: frozenset(),
}

# Statuses that hold a seat
ACTIVE_STATUSES: Tuple[str, ...] = (PENDING, CONFIRMED)

# Pending bookings older than this are reclaimed by the sweeper
STALE_PENDING_AFTER = timedelta(hours=24)


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def sources_for(target: str) -> Tuple[str, ...]:
    """Statuses from which `target` may be reached."""
    return tuple(sorted(s for s, targets in TRANSITIONS.items() if target in targets))


def restores_free_session(session_start: datetime, now: datetime, grace: timedelta) -> bool:
    """
    A cancelled free booking gives the free session back only when the
    cancellation lands more than `grace` before the session starts.
    """
    return now < session_start - grace
