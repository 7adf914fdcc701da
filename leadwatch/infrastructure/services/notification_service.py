"""
NOTIFICATION DISPATCHER (Resend)
================================

Sends the "no call made" escalation email to the configured managers.

Best-effort by contract:
- No Resend key (or a placeholder key) -> skipped, returns False
- No recipients configured -> skipped, returns False
- Any provider error -> logged, returns False, never raised
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from html import escape
from typing import List, Optional

import resend

from leadwatch.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class EscalationNotice:
    lead_name: str
    agent_name: str
    agent_email: str
    assigned_at: datetime
    timer_minutes: Optional[int] = None


def render_escalation_email(notice: EscalationNotice, escalation_note: str) -> tuple[str, str]:
    """Returns (subject, html) for an escalation notice."""
    subject = f"⚠️ Lead Accountability Alert: No call made for {notice.lead_name}"

    window = f"{notice.timer_minutes} minutes" if notice.timer_minutes else "the timer window"
    agent = escape(notice.agent_name)
    if notice.agent_email:
        agent = f"{agent} ({escape(notice.agent_email)})"

    html = f"""
    <h2>Lead Accountability Alert</h2>
    <p><strong>Agent:</strong> {agent}</p>
    <p><strong>Lead:</strong> {escape(notice.lead_name)}</p>
    <p><strong>Assigned at:</strong> {notice.assigned_at.strftime("%Y-%m-%d %H:%M %Z").strip()}</p>
    <p><strong>Status:</strong> No call detected within {window}</p>
    <p>{escape(escalation_note)}</p>
    """
    return subject, html


class NotificationDispatcher:
    """Email dispatcher for escalations."""

    def __init__(
        self,
        api_key: Optional[str],
        sender: str,
        recipients: List[str],
        escalation_note: str = "The lead has been flagged for reassignment.",
    ):
        self.sender = sender
        self.recipients = recipients
        self.escalation_note = escalation_note
        self.enabled = bool(api_key and api_key.startswith("re_"))

        if self.enabled:
            resend.api_key = api_key

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "NotificationDispatcher":
        settings = settings or get_settings()

        if settings.escalation_mode == "return_to_pool":
            note = f"The lead has been automatically returned to the {settings.pond_name}."
        else:
            note = f"The lead has been tagged \"{settings.escalation_tag}\" for reassignment."

        return cls(
            api_key=settings.resend_api_key,
            sender=f"Lead Accountability <{settings.email_from}>",
            recipients=settings.notification_email_list,
            escalation_note=note,
        )

    async def send_escalation(self, notice: EscalationNotice) -> bool:
        if not self.enabled:
            logger.info("📭 Resend not configured (missing or invalid key), skipping email")
            return False

        if not self.recipients:
            logger.info("📭 No notification emails configured, skipping email")
            return False

        subject, html = render_escalation_email(notice, self.escalation_note)
        params = {
            "from": self.sender,
            "to": self.recipients,
            "subject": subject,
            "html": html,
        }

        try:
            # resend is synchronous; keep it off the event loop
            response = await asyncio.to_thread(resend.Emails.send, params)
            logger.info(
                f"📧 Escalation email sent to {', '.join(self.recipients)}. "
                f"ID: {response.get('id') if isinstance(response, dict) else response}"
            )
            return True
        except Exception as e:
            logger.error(f"❌ Failed to send escalation email for {notice.lead_name}: {e}")
            return False
