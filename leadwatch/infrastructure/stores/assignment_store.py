"""
ASSIGNMENT STORE
================

Queries and state transitions for the lead_assignments table.

Works on a caller-owned AsyncSession; the caller commits.

Terminal transitions are compare-and-swap updates:
    UPDATE lead_assignments SET status = ... WHERE id = :id AND status = 'pending'
Only the caller that gets rowcount == 1 owns the transition, so two
overlapping resolution passes can never both resolve the same row.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from leadwatch.domain.entities import LeadAssignment, AssignmentStatus

logger = logging.getLogger(__name__)

PENDING = AssignmentStatus.PENDING.value


class AssignmentStore:
    """Data access for LeadAssignment rows."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # =========================================================================
    # DETECTION SIDE
    # =========================================================================

    async def find_pending(self, external_lead_id: int) -> Optional[LeadAssignment]:
        result = await self.session.execute(
            select(LeadAssignment)
            .where(LeadAssignment.external_lead_id == external_lead_id)
            .where(LeadAssignment.status == PENDING)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def open_timer(
        self,
        external_lead_id: int,
        agent_id: int,
        agent_name: str,
        agent_email: str,
        lead_name: str,
        assigned_at: datetime,
        timer_minutes: int,
        watch_target: Optional[str] = None,
    ) -> Optional[LeadAssignment]:
        """
        Inserts a pending row unless the lead already has one.

        Returns the new row, or None when a pending row already exists.
        A concurrent insert that loses the partial unique index race also
        returns None; in that case the session is rolled back.
        """
        if await self.find_pending(external_lead_id) is not None:
            return None

        assignment = LeadAssignment(
            external_lead_id=external_lead_id,
            agent_id=agent_id,
            agent_name=agent_name,
            agent_email=agent_email or "",
            lead_name=lead_name,
            watch_target=watch_target,
            assigned_at=assigned_at,
            timer_expires_at=assigned_at + timedelta(minutes=timer_minutes),
            status=PENDING,
        )
        self.session.add(assignment)

        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            logger.info(f"⏭️ Lead {external_lead_id} got a pending timer concurrently, skipping")
            return None

        return assignment

    # =========================================================================
    # RESOLUTION SIDE
    # =========================================================================

    async def list_expired(self, now: datetime) -> List[LeadAssignment]:
        """Pending rows whose timer ended strictly before now."""
        result = await self.session.execute(
            select(LeadAssignment)
            .where(LeadAssignment.status == PENDING)
            .where(LeadAssignment.timer_expires_at < now)
        )
        return list(result.scalars().all())

    async def mark_called(self, assignment_id: int, call_detected_at: datetime) -> bool:
        """pending -> called. Returns False if the row already left pending."""
        return await self._transition(
            assignment_id,
            status=AssignmentStatus.CALLED.value,
            call_detected_at=call_detected_at,
        )

    async def mark_reassigned(self, assignment_id: int, escalated_at: datetime) -> bool:
        """pending -> reassigned. Returns False if the row already left pending."""
        return await self._transition(
            assignment_id,
            status=AssignmentStatus.REASSIGNED.value,
            notified_at=escalated_at,
            escalated_at=escalated_at,
        )

    async def _transition(self, assignment_id: int, **values) -> bool:
        result = await self.session.execute(
            update(LeadAssignment)
            .where(LeadAssignment.id == assignment_id)
            .where(LeadAssignment.status == PENDING)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # =========================================================================
    # ADMIN READS
    # =========================================================================

    async def get(self, assignment_id: int) -> Optional[LeadAssignment]:
        return await self.session.get(LeadAssignment, assignment_id)

    async def list_recent(self, limit: int = 100, status: Optional[str] = None) -> List[LeadAssignment]:
        query = select(LeadAssignment)
        if status:
            query = query.where(LeadAssignment.status == status)
        query = query.order_by(LeadAssignment.assigned_at.desc(), LeadAssignment.id.desc()).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_by_status(self) -> Dict[str, int]:
        result = await self.session.execute(
            select(LeadAssignment.status, func.count(LeadAssignment.id))
            .group_by(LeadAssignment.status)
        )
        counts = {status.value: 0 for status in AssignmentStatus}
        for status, count in result.all():
            counts[status] = count

        return {"total": sum(counts.values()), **counts}
