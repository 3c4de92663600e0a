# app/scheduler.py
"""
In-process driver for the event lifecycle sweep.

Uses APScheduler to call ``LifecycleScheduler.run_transitions`` on a fixed
interval. Overlapping or doubled runs are harmless (see app.services.lifecycle),
but ``max_instances=1`` keeps a slow sweep from stacking up in this process.
"""
from __future__ import annotations

import logging
from typing import Optional

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MISSED
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.core.config import settings
from app.services.lifecycle import LifecycleScheduler

logger = logging.getLogger(__name__)

JOB_ID = "process_event_transitions"

# Global scheduler instance
scheduler: Optional[BackgroundScheduler] = None


def _on_job_error(event):
    logger.error(
        "Scheduled job FAILED: job_id=%s error=%s",
        event.job_id, event.exception,
        exc_info=(type(event.exception), event.exception, event.exception.__traceback__) if event.exception else None,
    )


def _on_job_missed(event):
    logger.warning(
        "Scheduled job MISSED: job_id=%s scheduled_run_time=%s",
        event.job_id,
        event.scheduled_run_time,
    )


def process_event_transitions(lifecycle: LifecycleScheduler) -> None:
    summary = lifecycle.run_transitions()
    logger.info("Scheduled state transitions completed: %s", summary.model_dump())


def init_scheduler(lifecycle: LifecycleScheduler, interval_seconds: Optional[int] = None) -> BackgroundScheduler:
    """Creates and starts the background scheduler (once per process)."""
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already initialized")
        return scheduler

    interval = interval_seconds or settings.TRANSITION_INTERVAL_SECONDS
    scheduler = BackgroundScheduler(
        timezone="UTC",
        job_defaults={
            "coalesce": True,
            "max_instances": 1,
            "misfire_grace_time": 60,
        },
    )
    scheduler.add_listener(_on_job_error, EVENT_JOB_ERROR)
    scheduler.add_listener(_on_job_missed, EVENT_JOB_MISSED)

    scheduler.add_job(
        func=process_event_transitions,
        args=[lifecycle],
        trigger=IntervalTrigger(seconds=interval),
        id=JOB_ID,
        name="Process Event State Transitions",
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Scheduled job: %s (every %s seconds)", JOB_ID, interval)
    return scheduler


def shutdown_scheduler() -> None:
    global scheduler

    if scheduler is None:
        return
    scheduler.shutdown(wait=False)
    scheduler = None
    logger.info("Scheduler stopped")
