"""Celery tasks for the schedule."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .services import ensure_horizon

logger = logging.getLogger(__name__)


@shared_task(name="classes.ensure_session_horizon")
def ensure_session_horizon() -> dict[str, int]:
    """
    Keep the rolling horizon of sessions populated.

    Runs every hour through Celery Beat and once when a worker starts.

    Returns:
        dict: {"created": sessions created, "failed": templates that failed}
    """
    result = ensure_horizon()
    return {"created": result.created, "failed": len(result.failed_templates)}
