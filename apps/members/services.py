"""Member store used by the booking engine.

The booking engine reads members and flips exactly one field,
``has_used_free_session``. Every write goes through a conditional UPDATE so
two concurrent free bookings cannot both claim the same flag.
"""

from __future__ import annotations

import logging

from .models import Member

logger = logging.getLogger(__name__)


class MemberNotFound(Exception):
    """Raised when a member id does not resolve."""


def get_member(member_id: int) -> Member:
    try:
        return Member.objects.get(pk=member_id)
    except Member.DoesNotExist as exc:
        raise MemberNotFound(f"Member {member_id} not found") from exc


def set_free_session_used(member_id: int, used: bool) -> bool:
    """Set the flag; returns True when the stored value changed."""
    changed = (
        Member.objects.filter(pk=member_id)
        .exclude(has_used_free_session=used)
        .update(has_used_free_session=used)
    )
    if changed:
        logger.info(f"Member {member_id} has_used_free_session -> {used}")
    return bool(changed)


def claim_free_session(member_id: int) -> bool:
    """
    Atomically flip has_used_free_session False -> True.

    Returns True only for the caller that won the flip. Must run inside the
    same transaction as the seat reservation so a failed reservation undoes
    the claim.
    """
    return set_free_session_used(member_id, True)
