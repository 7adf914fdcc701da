"""
PERIODIC JOB SCHEDULER
======================

Runs the accountability engine on fixed intervals.

CONFIGURED JOBS:
- pond_detection: new assignments in the holding pond (default every 30s)
- source_detection: new assignments in monitored sources (default every 60s)
- expiry_resolution: expired timers (default every 60s)

Each job also runs once right at startup. Jobs are independent of each other.

TECHNOLOGY: APScheduler (AsyncIOScheduler)
"""

import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from leadwatch.config import Settings, get_settings
from leadwatch.infrastructure.jobs import AccountabilityEngine

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler: Optional[AsyncIOScheduler] = None

# job id -> coroutine function, kept for manual runs
_job_functions: Dict[str, Callable[[], Awaitable[dict]]] = {}

JOB_NAMES = {
    "pond_detection": "Pond assignment detection",
    "source_detection": "Source assignment detection",
    "expiry_resolution": "Timer expiry resolution",
}


def create_scheduler(engine: AccountabilityEngine, settings: Optional[Settings] = None) -> AsyncIOScheduler:
    """
    Creates the scheduler and registers the three engine jobs.

    CALLED BY: api/main.py on startup
    """
    global scheduler

    if scheduler is not None:
        logger.warning("⚠️ Scheduler already exists, returning existing instance")
        return scheduler

    settings = settings or get_settings()
    logger.info("🔧 Creating scheduler...")

    scheduler = AsyncIOScheduler(
        timezone=settings.scheduler_timezone,
        job_defaults={
            "coalesce": True,  # Collapse missed runs
            "max_instances": 1,  # One run per job at a time
            "misfire_grace_time": 60 * 5,
        },
    )

    # =========================================================================
    # REGISTER JOBS
    # =========================================================================

    _register_job(scheduler, "pond_detection", engine.detect_pond_assignments, settings.pond_poll_seconds)
    _register_job(scheduler, "source_detection", engine.detect_source_assignments, settings.source_poll_seconds)
    _register_job(scheduler, "expiry_resolution", engine.resolve_expired, settings.resolution_poll_seconds)

    logger.info("✅ Scheduler created")

    return scheduler


def _register_job(
    sched: AsyncIOScheduler,
    job_id: str,
    func: Callable[[], Awaitable[dict]],
    interval_seconds: int,
):
    _job_functions[job_id] = func

    sched.add_job(
        func,
        trigger=IntervalTrigger(seconds=interval_seconds),
        id=job_id,
        name=JOB_NAMES[job_id],
        next_run_time=datetime.now(timezone.utc),  # Immediate first run
        replace_existing=True,
    )

    logger.info(f"📅 Job registered: {JOB_NAMES[job_id]} (every {interval_seconds}s)")


def start_scheduler():
    """
    Starts the scheduler.

    CALLED BY: api/main.py on startup (after create_scheduler)
    """
    if scheduler is None:
        logger.error("❌ Scheduler was not created. Call create_scheduler() first.")
        return

    if scheduler.running:
        logger.warning("⚠️ Scheduler already running")
        return

    scheduler.start()
    logger.info("🚀 Scheduler started!")

    jobs = scheduler.get_jobs()
    logger.info(f"📋 Active jobs: {len(jobs)}")
    for job in jobs:
        logger.info(f"   - {job.name} (next run: {job.next_run_time})")


def stop_scheduler():
    """
    Stops the scheduler and forgets its jobs.

    CALLED BY: api/main.py on shutdown
    """
    global scheduler

    if scheduler is None:
        return

    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("🛑 Scheduler stopped")

    scheduler = None
    _job_functions.clear()


def get_scheduler_status() -> dict:
    """
    Scheduler status, used by /health and /jobs.
    """
    if scheduler is None:
        return {
            "running": False,
            "jobs": [],
            "error": "Scheduler not initialized",
        }

    jobs_info = []
    for job in scheduler.get_jobs():
        jobs_info.append({
            "id": job.id,
            "name": job.name,
            "next_run": str(job.next_run_time) if job.next_run_time else None,
        })

    return {
        "running": scheduler.running,
        "jobs": jobs_info,
    }


async def run_job_now(job_id: str) -> dict:
    """
    Runs a job immediately, outside the schedule.

    Can overlap a scheduled run of the same job; the store's conditional
    updates keep resolution exactly-once regardless.
    """
    if scheduler is None:
        return {"success": False, "error": "Scheduler not initialized"}

    func = _job_functions.get(job_id)
    if func is None:
        return {"success": False, "error": f"Job '{job_id}' not found"}

    try:
        result = await func()
        return {"success": True, "result": result}
    except Exception as e:
        logger.error(f"❌ Error running job {job_id}: {e}", exc_info=True)
        return {"success": False, "error": str(e)}
