"""
ROUTES: ASSIGNMENTS
===================

Read-only accountability history for the dashboard.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from leadwatch.api.dependencies import AdminUser, get_current_admin
from leadwatch.infrastructure.database import get_db
from leadwatch.infrastructure.stores import AssignmentStore

router = APIRouter(prefix="/assignments", tags=["Assignments"])


class AssignmentResponse(BaseModel):
    id: int
    external_lead_id: int
    agent_id: int
    agent_name: str
    agent_email: str
    lead_name: str
    watch_target: Optional[str]
    assigned_at: datetime
    timer_expires_at: datetime
    status: str
    call_detected_at: Optional[datetime]
    notified_at: Optional[datetime]
    escalated_at: Optional[datetime]

    class Config:
        from_attributes = True


class AssignmentStats(BaseModel):
    total: int
    pending: int
    called: int
    reassigned: int


@router.get("", response_model=List[AssignmentResponse])
async def list_assignments(
    limit: int = Query(100, ge=1, le=500),
    status: Optional[str] = Query(None, pattern="^(pending|called|reassigned)$"),
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    """Latest assignments, newest first."""
    return await AssignmentStore(db).list_recent(limit=limit, status=status)


@router.get("/stats", response_model=AssignmentStats)
async def assignment_stats(
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await AssignmentStore(db).count_by_status()
