import logging
import os

from celery import Celery
from celery.schedules import crontab  # type: ignore
from celery.signals import worker_ready  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

logger = logging.getLogger(__name__)

app = Celery("classbook")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Reclaim pending bookings older than 24h - every hour
    "sweep-stale-bookings": {
        "task": "bookings.sweep_stale_bookings",
        "schedule": crontab(minute=0),
        "options": {"expires": 50 * 60},
    },
    # Keep two weeks of sessions materialized - every hour
    "ensure-session-horizon": {
        "task": "classes.ensure_session_horizon",
        "schedule": crontab(minute=5),
        "options": {"expires": 50 * 60},
    },
}


@worker_ready.connect
def run_startup_jobs(sender=None, **kwargs):  # type: ignore
    """Generate sessions and sweep stale bookings once when a worker boots."""
    logger.info("Worker ready, queueing startup horizon and sweep jobs")
    app.send_task("classes.ensure_session_horizon")
    app.send_task("bookings.sweep_stale_bookings")
