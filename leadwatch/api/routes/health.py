"""
HEALTH CHECK
============

Used by the hosting platform and uptime monitors.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from leadwatch.infrastructure.database import get_db
from leadwatch.infrastructure.scheduler import get_scheduler_status

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    200 if the database answers, 503 otherwise.
    Scheduler state is reported but does not fail the check.
    """
    status = "healthy"
    checks = {}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        logger.error(f"❌ Health check database error: {e}")
        checks["database"] = f"error: {e}"
        status = "unhealthy"

    scheduler_status = get_scheduler_status()
    checks["scheduler"] = "running" if scheduler_status["running"] else "stopped"
    checks["timestamp"] = datetime.now(timezone.utc).isoformat()

    return JSONResponse(
        status_code=200 if status == "healthy" else 503,
        content={"status": status, "checks": checks},
    )
