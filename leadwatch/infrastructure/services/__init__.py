"""Infrastructure services."""

from .notification_service import NotificationDispatcher, EscalationNotice

__all__ = [
    "NotificationDispatcher",
    "EscalationNotice",
]
