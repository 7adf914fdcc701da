"""
MODEL: MONITORED SOURCE
=======================

CRM lead sources whose assigned leads go through the accountability timer.
Managed by operators through the admin API; the engine only reads it.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import String, Integer, Boolean, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

MIN_TIMER_MINUTES = 1
MAX_TIMER_MINUTES = 120
DEFAULT_TIMER_MINUTES = 30


class MonitoredSource(Base):
    """A CRM source (exact taxonomy string) plus its timer duration."""

    __tablename__ = "monitored_sources"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Must match the CRM source string exactly
    source_name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    timer_minutes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=DEFAULT_TIMER_MINUTES
    )

    # Paused sources stay registered but are skipped by detection
    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # ==========================================
    # AUDIT
    # ==========================================
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    created_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
