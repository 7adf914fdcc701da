"""
ROUTES: MONITORED SOURCES
=========================

CRUD for the CRM sources that go through the accountability timer,
plus the list of sources the CRM knows about (for the picker).
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from leadwatch.api.dependencies import AdminUser, get_current_admin, get_directory_client
from leadwatch.domain.entities.monitored_source import (
    DEFAULT_TIMER_MINUTES,
    MAX_TIMER_MINUTES,
    MIN_TIMER_MINUTES,
)
from leadwatch.infrastructure.crm import CRMError, LeadDirectoryClient
from leadwatch.infrastructure.database import get_db
from leadwatch.infrastructure.stores import DuplicateSourceError, SourceRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sources", tags=["Sources"])


# ==========================================
# SCHEMAS (Pydantic)
# ==========================================

class MonitoredSourceCreate(BaseModel):
    source_name: str = Field(..., min_length=1, max_length=255)
    timer_minutes: int = Field(default=DEFAULT_TIMER_MINUTES, ge=MIN_TIMER_MINUTES, le=MAX_TIMER_MINUTES)
    enabled: bool = True


class MonitoredSourceUpdate(BaseModel):
    enabled: Optional[bool] = None
    timer_minutes: Optional[int] = Field(None, ge=MIN_TIMER_MINUTES, le=MAX_TIMER_MINUTES)


class MonitoredSourceResponse(BaseModel):
    id: int
    source_name: str
    timer_minutes: int
    enabled: bool
    created_at: Optional[datetime]
    created_by: Optional[str]

    class Config:
        from_attributes = True


class AvailableSource(BaseModel):
    id: Optional[int]
    name: str


# ==========================================
# ENDPOINTS: CRM SOURCES
# ==========================================

@router.get("/available")
async def list_available_sources(
    admin: AdminUser = Depends(get_current_admin),
    client: LeadDirectoryClient = Depends(get_directory_client),
):
    """Sources known to the CRM."""
    try:
        sources = await client.list_sources()
    except CRMError as e:
        logger.error(f"❌ Error fetching CRM sources: {e}")
        raise HTTPException(status_code=502, detail="Failed to fetch sources")

    return {"sources": [AvailableSource(id=s.id, name=s.name) for s in sources]}


# ==========================================
# ENDPOINTS: CRUD
# ==========================================

@router.get("/monitored")
async def list_monitored_sources(
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    sources = await SourceRegistry(db).list_all()
    return {"sources": [MonitoredSourceResponse.model_validate(s) for s in sources]}


@router.post("/monitored", status_code=201)
async def add_monitored_source(
    data: MonitoredSourceCreate,
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    source_name = data.source_name.strip()
    if not source_name:
        raise HTTPException(status_code=400, detail="source_name is required")

    try:
        source = await SourceRegistry(db).create(
            source_name=source_name,
            timer_minutes=data.timer_minutes,
            enabled=data.enabled,
            created_by=admin.email,
        )
    except DuplicateSourceError:
        raise HTTPException(status_code=400, detail="Source already being monitored")

    logger.info(f"➕ Source {source_name!r} monitored ({data.timer_minutes} min) by {admin.email}")
    return {"source": MonitoredSourceResponse.model_validate(source)}


@router.patch("/monitored/{source_id}")
async def update_monitored_source(
    source_id: int,
    data: MonitoredSourceUpdate,
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    source = await SourceRegistry(db).update(
        source_id,
        enabled=data.enabled,
        timer_minutes=data.timer_minutes,
    )
    if source is None:
        raise HTTPException(status_code=404, detail="Source not found")

    return {"source": MonitoredSourceResponse.model_validate(source)}


@router.delete("/monitored/{source_id}")
async def delete_monitored_source(
    source_id: int,
    admin: AdminUser = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    deleted = await SourceRegistry(db).delete(source_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Source not found")

    logger.info(f"➖ Source {source_id} removed by {admin.email}")
    return {"success": True}
