"""
Scheduler module using APScheduler.
Rotates the served target at a configurable interval.
Embedded in the FastAPI app's lifespan.
"""

from __future__ import annotations

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from weather_target.config import get_settings
from weather_target.tracker import TargetTracker

logger = logging.getLogger(__name__)

_scheduler: Optional[AsyncIOScheduler] = None


async def rotate_target(tracker: TargetTracker) -> None:
    """Wrapper that catches exceptions so the scheduler doesn't die on failure."""
    try:
        logger.info("Scheduled target rotation starting...")
        target = await tracker.refresh()
        if target is not None:
            logger.info("Scheduled target rotation picked %s", target.name)
    except Exception as e:
        logger.error("Scheduled target rotation failed: %s", e, exc_info=True)


def create_scheduler(tracker: TargetTracker) -> AsyncIOScheduler:
    """Create and configure the APScheduler instance."""
    global _scheduler
    settings = get_settings().scheduler

    _scheduler = AsyncIOScheduler()
    _scheduler.add_job(
        rotate_target,
        trigger=IntervalTrigger(minutes=settings.rotate_minutes),
        args=[tracker],
        id="weather_target_rotation",
        name="Weather Target Rotation",
        replace_existing=True,
        max_instances=1,  # prevent overlapping runs
    )

    logger.info("Scheduler configured: target rotates every %d minutes",
                settings.rotate_minutes)
    return _scheduler


def start_scheduler(tracker: TargetTracker) -> None:
    """Start the scheduler (non-blocking). Must be called from a running event loop."""
    settings = get_settings().scheduler
    if not settings.enabled:
        logger.info("Scheduler disabled via config")
        return

    scheduler = create_scheduler(tracker)
    scheduler.start()
    logger.info("Scheduler started")


def stop_scheduler() -> None:
    """Stop the scheduler gracefully."""
    global _scheduler
    if _scheduler is not None:
        _scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
        _scheduler = None
