"""Domain entities."""
from .base import Base
from .enums import AssignmentStatus, EscalationMode
from .lead_assignment import LeadAssignment
from .monitored_source import MonitoredSource

__all__ = [
    "Base",
    "AssignmentStatus",
    "EscalationMode",
    "LeadAssignment",
    "MonitoredSource",
]
