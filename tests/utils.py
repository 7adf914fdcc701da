from datetime import datetime, timezone
from typing import Dict, List, Optional

from leadwatch.infrastructure.crm import (
    CRMAgent,
    CRMCall,
    CRMError,
    CRMLead,
    CRMSource,
    LeadDirectoryClient,
    WatchTarget,
)
from leadwatch.infrastructure.services.notification_service import EscalationNotice

T0 = datetime(2026, 3, 2, 15, 0, tzinfo=timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite returns naive datetimes; everything is stored in UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def make_lead(external_id: int, agent_id: Optional[int] = None, name: str = None) -> CRMLead:
    assignee = None
    if agent_id is not None:
        assignee = CRMAgent(id=agent_id, name=f"Agent {agent_id}", email=f"agent{agent_id}@example.com")
    return CRMLead(external_id=external_id, display_name=name or f"Lead {external_id}", assignee=assignee)


class FakeDirectoryClient(LeadDirectoryClient):
    """In-memory CRM that records every mutation attempt."""

    def __init__(self):
        self.leads_by_target: Dict[str, List[CRMLead]] = {}
        self.calls_by_lead: Dict[int, List[CRMCall]] = {}
        self.sources: List[CRMSource] = []

        self.tag_attempts: List[tuple] = []
        self.pool_returns: List[tuple] = []
        self.call_queries: List[tuple] = []

        self.fail_listing: Optional[CRMError] = None
        self.fail_calls_for: Dict[int, CRMError] = {}
        self.fail_tagging: Optional[CRMError] = None

    def assign(self, target_name: str, *leads: CRMLead):
        self.leads_by_target[target_name] = list(leads)

    def add_call(self, external_id: int, created: datetime, direction: str = "Outgoing"):
        self.calls_by_lead.setdefault(external_id, []).append(CRMCall(created=created, direction=direction))

    async def list_assigned_leads(self, target: WatchTarget) -> List[CRMLead]:
        if self.fail_listing:
            raise self.fail_listing
        return list(self.leads_by_target.get(target.name, []))

    async def list_calls_since(self, external_id: int, since: datetime) -> List[CRMCall]:
        self.call_queries.append((external_id, since))
        if external_id in self.fail_calls_for:
            raise self.fail_calls_for[external_id]
        return list(self.calls_by_lead.get(external_id, []))

    async def clear_assignment_and_return_to_pool(self, external_id: int, pool_id: int) -> None:
        self.pool_returns.append((external_id, pool_id))

    async def add_tag(self, external_id: int, tag: str) -> None:
        self.tag_attempts.append((external_id, tag))
        if self.fail_tagging:
            raise self.fail_tagging

    async def list_sources(self) -> List[CRMSource]:
        if self.fail_listing:
            raise self.fail_listing
        return list(self.sources)


class FakeDispatcher:
    def __init__(self, fail: bool = False):
        self.sent: List[EscalationNotice] = []
        self.fail = fail

    async def send_escalation(self, notice: EscalationNotice) -> bool:
        self.sent.append(notice)
        if self.fail:
            raise RuntimeError("smtp down")
        return True
