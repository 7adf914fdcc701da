"""
Periodic job scheduler (APScheduler)
"""

from .scheduler import (
    get_scheduler_status,
    create_scheduler,
    start_scheduler,
    stop_scheduler,
    run_job_now,
)

__all__ = [
    "create_scheduler",
    "start_scheduler",
    "stop_scheduler",
    "get_scheduler_status",
    "run_job_now",
]
