"""
MODEL: LEAD ASSIGNMENT
======================

One row per observed assignment of a CRM lead to an agent.
Used for:
- Accountability (did the agent call within the timer?)
- Audit (rows are never deleted)
- Dashboard counts by status

Agent and lead names are snapshots taken when the assignment was observed;
they are never re-fetched, the agent may change in the CRM later.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import String, Integer, DateTime, Index, text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base
from .enums import AssignmentStatus


class LeadAssignment(Base):
    """
    Accountability record for a lead assignment.

    Created only by assignment detection, mutated only by expiry resolution.
    """

    __tablename__ = "lead_assignments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # ==========================================
    # CRM REFERENCES
    # ==========================================
    # Not unique: a lead re-enters monitoring every time it is reassigned
    external_lead_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    agent_id: Mapped[int] = mapped_column(Integer, nullable=False)

    # ==========================================
    # SNAPSHOTS
    # ==========================================
    agent_name: Mapped[str] = mapped_column(String(255), nullable=False)
    agent_email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    lead_name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Pond or source name the assignment was observed in
    watch_target: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # ==========================================
    # TIMER
    # ==========================================
    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    timer_expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    # ==========================================
    # STATUS
    # ==========================================
    # pending, called, reassigned
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, default=AssignmentStatus.PENDING.value
    )

    # Only set on pending -> called
    call_detected_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Only set on pending -> reassigned
    notified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    escalated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        # At most one pending row per CRM lead
        Index(
            "uq_lead_assignments_one_pending",
            "external_lead_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
        Index("ix_lead_assignments_status_expires", "status", "timer_expires_at"),
    )
