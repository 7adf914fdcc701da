"""Enums - fixed values reused across the service."""

from enum import Enum


class AssignmentStatus(str, Enum):
    """Lifecycle of a monitored lead assignment."""
    PENDING = "pending"          # Timer running
    CALLED = "called"            # Agent called before expiry (terminal)
    REASSIGNED = "reassigned"    # Timer expired without a call, escalated (terminal)


class EscalationMode(str, Enum):
    """How an uncalled lead is escalated in the CRM."""
    TAG = "tag"                          # Current path: add the escalation tag
    RETURN_TO_POOL = "return_to_pool"    # Legacy path: unassign and move back to the pond
