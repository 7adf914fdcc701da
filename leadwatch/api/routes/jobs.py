"""
ROUTES: JOBS
============

Scheduler status and manual runs of the accountability jobs.
"""

from fastapi import APIRouter, Depends, HTTPException

from leadwatch.api.dependencies import AdminUser, get_current_admin
from leadwatch.infrastructure.scheduler import get_scheduler_status, run_job_now
from leadwatch.infrastructure.scheduler.scheduler import JOB_NAMES

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.get("")
async def list_jobs(admin: AdminUser = Depends(get_current_admin)):
    return get_scheduler_status()


@router.post("/{job_id}/run")
async def run_job(job_id: str, admin: AdminUser = Depends(get_current_admin)):
    """Runs a job right now (e.g. to resolve expired timers after an outage)."""
    if job_id not in JOB_NAMES:
        raise HTTPException(status_code=404, detail=f"Job '{job_id}' not found")

    result = await run_job_now(job_id)
    if not result["success"]:
        raise HTTPException(status_code=409, detail=result["error"])

    return result
