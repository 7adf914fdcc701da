"""Periodic jobs: lead accountability."""

from .accountability_engine import AccountabilityEngine
from .last_seen import LastSeenAssignees

__all__ = [
    "AccountabilityEngine",
    "LastSeenAssignees",
]
