"""
SOURCE REGISTRY
===============

Operator-managed list of monitored CRM sources.
Detection reads list_enabled(); everything else backs the admin API.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from leadwatch.domain.entities import MonitoredSource
from leadwatch.domain.entities.monitored_source import DEFAULT_TIMER_MINUTES


class DuplicateSourceError(Exception):
    """Raised when the source name is already monitored."""


class SourceRegistry:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_enabled(self) -> List[MonitoredSource]:
        result = await self.session.execute(
            select(MonitoredSource)
            .where(MonitoredSource.enabled == True)  # noqa: E712
            .order_by(MonitoredSource.source_name)
        )
        return list(result.scalars().all())

    async def list_all(self) -> List[MonitoredSource]:
        result = await self.session.execute(
            select(MonitoredSource).order_by(MonitoredSource.created_at.desc(), MonitoredSource.id.desc())
        )
        return list(result.scalars().all())

    async def get(self, source_id: int) -> Optional[MonitoredSource]:
        return await self.session.get(MonitoredSource, source_id)

    async def create(
        self,
        source_name: str,
        timer_minutes: int = DEFAULT_TIMER_MINUTES,
        created_by: Optional[str] = None,
        enabled: bool = True,
    ) -> MonitoredSource:
        existing = await self.session.execute(
            select(MonitoredSource.id).where(MonitoredSource.source_name == source_name)
        )
        if existing.scalar_one_or_none() is not None:
            raise DuplicateSourceError(source_name)

        source = MonitoredSource(
            source_name=source_name,
            timer_minutes=timer_minutes,
            enabled=enabled,
            created_by=created_by,
        )
        self.session.add(source)

        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateSourceError(source_name) from e

        await self.session.refresh(source)
        return source

    async def update(
        self,
        source_id: int,
        enabled: Optional[bool] = None,
        timer_minutes: Optional[int] = None,
    ) -> Optional[MonitoredSource]:
        source = await self.get(source_id)
        if source is None:
            return None

        if enabled is not None:
            source.enabled = enabled
        if timer_minutes is not None:
            source.timer_minutes = timer_minutes

        await self.session.flush()
        return source

    async def delete(self, source_id: int) -> bool:
        source = await self.get(source_id)
        if source is None:
            return False

        await self.session.delete(source)
        await self.session.flush()
        return True
