"""
ACCOUNTABILITY ENGINE
=====================

Makes sure every lead assigned to an agent gets a call before its timer
runs out, and escalates the lead in the CRM when it does not.

TWO ROUTINES (run by the scheduler, independently):

1. Assignment detection (detect_pond_assignments / detect_source_assignments)
   - Lists the leads currently assigned in each watch target
   - Compares each lead's assignee with the last one seen
   - Opens a pending timer for every new assignment
     (never a second one while the lead still has a pending row)

2. Expiry resolution (resolve_expired)
   - Picks pending rows whose timer expired
   - Call found since assigned_at -> called
   - No call -> reassigned, then tag (or return to pond) + email

Every terminal transition is a conditional update in the store, so each
row is resolved at most once even if two resolution passes overlap.
Nothing here ever raises into the scheduler.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from leadwatch.config import Settings, get_settings
from leadwatch.domain.entities import LeadAssignment, EscalationMode
from leadwatch.domain.entities.monitored_source import DEFAULT_TIMER_MINUTES
from leadwatch.infrastructure.crm import CRMLead, LeadDirectoryClient, WatchTarget
from leadwatch.infrastructure.jobs.last_seen import LastSeenAssignees
from leadwatch.infrastructure.services.notification_service import (
    EscalationNotice,
    NotificationDispatcher,
)
from leadwatch.infrastructure.stores import AssignmentStore, SourceRegistry

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Some drivers (SQLite) hand back naive datetimes; they are stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class AccountabilityEngine:
    """
    Owns all the accountability rules.

    Collaborators are injected so the scheduler, the admin API and the tests
    can share one engine (and one last-seen map).
    """

    def __init__(
        self,
        client: LeadDirectoryClient,
        dispatcher: NotificationDispatcher,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Optional[Settings] = None,
        last_seen: Optional[LastSeenAssignees] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        settings = settings or get_settings()

        self.client = client
        self.dispatcher = dispatcher
        self.session_factory = session_factory
        self.last_seen = last_seen or LastSeenAssignees()
        self.clock = clock

        self.pond_id = settings.pond_id
        self.pond_name = settings.pond_name
        self.default_timer_minutes = settings.default_timer_minutes or DEFAULT_TIMER_MINUTES
        self.escalation_mode = EscalationMode(settings.escalation_mode)
        self.escalation_tag = settings.escalation_tag

    # =========================================================================
    # WATCH TARGETS
    # =========================================================================

    def pond_target(self) -> WatchTarget:
        return WatchTarget.for_pond(self.pond_id, self.pond_name, self.default_timer_minutes)

    async def source_targets(self) -> List[WatchTarget]:
        async with self.session_factory() as session:
            sources = await SourceRegistry(session).list_enabled()

        return [
            WatchTarget.for_source(source.source_name, source.timer_minutes or self.default_timer_minutes)
            for source in sources
        ]

    # =========================================================================
    # 1. ASSIGNMENT DETECTION
    # =========================================================================

    async def detect_pond_assignments(self, now: Optional[datetime] = None) -> Dict:
        """Detection cycle for the static holding pond."""
        logger.info(f"🔍 Checking pond {self.pond_id} ({self.pond_name}) for new assignments...")
        return await self.detect_assignments([self.pond_target()], now=now)

    async def detect_source_assignments(self, now: Optional[datetime] = None) -> Dict:
        """Detection cycle for every enabled monitored source."""
        try:
            targets = await self.source_targets()
        except Exception as e:
            logger.error(f"❌ Could not load monitored sources: {e}", exc_info=True)
            return self._detection_summary(error=str(e))

        if not targets:
            logger.debug("⏭️ No monitored sources enabled")
            return self._detection_summary()

        logger.info(f"🔍 Checking {len(targets)} monitored sources for new assignments...")
        return await self.detect_assignments(targets, now=now)

    async def detect_assignments(
        self,
        targets: List[WatchTarget],
        now: Optional[datetime] = None,
    ) -> Dict:
        """
        One detection cycle over the given targets.

        Any error ends the cycle early; the next poll retries. A lead whose
        processing failed is not recorded as seen, so it is retried too.
        """
        now = now or self.clock()
        summary = self._detection_summary(targets=len(targets))

        try:
            for target in targets:
                leads = await self.client.list_assigned_leads(target)

                for lead in leads:
                    if lead.assignee is None:
                        continue

                    summary["leads_seen"] += 1

                    if await self.last_seen.is_new_assignment(lead.external_id, lead.assignee.id):
                        summary["events"] += 1
                        started = await self._open_timer(lead, target, now)
                        if started:
                            summary["timers_started"] += 1
                        else:
                            summary["already_pending"] += 1

                    await self.last_seen.record(lead.external_id, lead.assignee.id)

        except Exception as e:
            logger.error(f"❌ Error checking for new assignments: {e}", exc_info=True)
            summary["error"] = str(e)

        return summary

    async def _open_timer(self, lead: CRMLead, target: WatchTarget, now: datetime) -> bool:
        agent = lead.assignee
        logger.info(f"👤 New assignment: {lead.display_name} -> {agent.name} ({target.name})")

        async with self.session_factory() as session:
            assignment = await AssignmentStore(session).open_timer(
                external_lead_id=lead.external_id,
                agent_id=agent.id,
                agent_name=agent.name,
                agent_email=agent.email,
                lead_name=lead.display_name,
                assigned_at=now,
                timer_minutes=target.timer_minutes,
                watch_target=target.name,
            )
            if assignment is None:
                logger.info(f"⏭️ {lead.display_name} already has a pending timer")
                return False

            await session.commit()

        logger.info(
            f"⏱️ Timer started for {lead.display_name}, "
            f"expires at {assignment.timer_expires_at.isoformat()}"
        )
        return True

    @staticmethod
    def _detection_summary(targets: int = 0, error: Optional[str] = None) -> Dict:
        return {
            "targets": targets,
            "leads_seen": 0,
            "events": 0,
            "timers_started": 0,
            "already_pending": 0,
            "error": error,
        }

    # =========================================================================
    # 2. EXPIRY RESOLUTION
    # =========================================================================

    async def resolve_expired(self, now: Optional[datetime] = None) -> Dict:
        """
        One resolution cycle.

        Rows are independent: a failing row is logged and left pending for
        the next cycle, the loop goes on with the others.
        """
        now = now or self.clock()
        summary = {"expired": 0, "called": 0, "reassigned": 0, "skipped": 0, "errors": 0, "error": None}

        logger.info("⏰ Checking for expired timers...")

        try:
            async with self.session_factory() as session:
                expired = await AssignmentStore(session).list_expired(now)
        except Exception as e:
            logger.error(f"❌ Error loading expired timers: {e}", exc_info=True)
            summary["error"] = str(e)
            return summary

        summary["expired"] = len(expired)

        for assignment in expired:
            try:
                outcome = await self._resolve_one(assignment, now)
                summary[outcome] += 1
            except Exception as e:
                logger.error(
                    f"❌ Error resolving assignment {assignment.id} ({assignment.lead_name}): {e}",
                    exc_info=True,
                )
                summary["errors"] += 1

        if expired:
            logger.info(
                f"✅ Resolution cycle done: {summary['called']} called, "
                f"{summary['reassigned']} reassigned, {summary['skipped']} skipped, "
                f"{summary['errors']} errors"
            )

        return summary

    async def _resolve_one(self, assignment: LeadAssignment, now: datetime) -> str:
        """Returns 'called', 'reassigned' or 'skipped' (lost the update race)."""
        logger.info(f"⌛ Timer expired for lead {assignment.lead_name}")

        assigned_at = as_utc(assignment.assigned_at)
        calls = await self.client.list_calls_since(assignment.external_lead_id, assigned_at)
        call_times = [as_utc(call.created) for call in calls if as_utc(call.created) >= assigned_at]

        if call_times:
            async with self.session_factory() as session:
                won = await AssignmentStore(session).mark_called(assignment.id, min(call_times))
                await session.commit()

            if not won:
                logger.info(f"⏭️ Assignment {assignment.id} already resolved by another pass")
                return "skipped"

            logger.info(f"📞 Call detected for {assignment.lead_name}, marked as called")
            return "called"

        async with self.session_factory() as session:
            won = await AssignmentStore(session).mark_reassigned(assignment.id, now)
            await session.commit()

        if not won:
            logger.info(f"⏭️ Assignment {assignment.id} already resolved by another pass")
            return "skipped"

        logger.warning(f"🚨 No call for {assignment.lead_name} by {assignment.agent_name}, escalating")

        # Two best-effort effects; neither gates the other nor the transition
        await self._escalate_in_crm(assignment)
        await self._notify(assignment)

        return "reassigned"

    async def _escalate_in_crm(self, assignment: LeadAssignment) -> bool:
        try:
            if self.escalation_mode == EscalationMode.RETURN_TO_POOL:
                await self.client.clear_assignment_and_return_to_pool(
                    assignment.external_lead_id, self.pond_id
                )
                logger.info(f"↩️ Lead {assignment.lead_name} returned to {self.pond_name}")
            else:
                await self.client.add_tag(assignment.external_lead_id, self.escalation_tag)
                logger.info(f"🏷️ Lead {assignment.lead_name} tagged {self.escalation_tag!r}")
            return True
        except Exception as e:
            logger.error(f"❌ Failed to escalate lead {assignment.external_lead_id} in CRM: {e}")
            return False

    async def _notify(self, assignment: LeadAssignment) -> bool:
        timer_minutes = int(
            (as_utc(assignment.timer_expires_at) - as_utc(assignment.assigned_at)).total_seconds() // 60
        )
        notice = EscalationNotice(
            lead_name=assignment.lead_name,
            agent_name=assignment.agent_name,
            agent_email=assignment.agent_email,
            assigned_at=as_utc(assignment.assigned_at),
            timer_minutes=timer_minutes,
        )

        try:
            return await self.dispatcher.send_escalation(notice)
        except Exception as e:
            logger.error(f"❌ Escalation notification failed for {assignment.lead_name}: {e}")
            return False
