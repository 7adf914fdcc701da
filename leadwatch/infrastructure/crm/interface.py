"""
LEAD DIRECTORY CLIENT INTERFACE
===============================

Abstract interface for the external CRM the engine watches.
Concrete clients (Follow Up Boss today) implement these methods.
Pure I/O: no state is kept between calls.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional


class CRMError(Exception):
    """
    Any failed CRM call.

    kind:
    - transport: network failure / timeout
    - auth: 401 / 403
    - rate_limit: 429
    - http: any other non-2xx response
    """

    def __init__(self, message: str, kind: str = "http", status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


@dataclass
class WatchTarget:
    """A pond or a named source whose assigned leads are monitored."""

    name: str
    timer_minutes: int
    pond_id: Optional[int] = None
    source: Optional[str] = None

    @classmethod
    def for_pond(cls, pond_id: int, name: str, timer_minutes: int) -> "WatchTarget":
        return cls(name=name, timer_minutes=timer_minutes, pond_id=pond_id)

    @classmethod
    def for_source(cls, source: str, timer_minutes: int) -> "WatchTarget":
        return cls(name=source, timer_minutes=timer_minutes, source=source)


@dataclass
class CRMAgent:
    id: int
    name: str
    email: str = ""


@dataclass
class CRMLead:
    """Standardized lead record returned by any client."""

    external_id: int
    display_name: str
    assignee: Optional[CRMAgent] = None


@dataclass
class CRMCall:
    created: datetime
    direction: Optional[str] = None


@dataclass
class CRMSource:
    id: Optional[int]
    name: str


class LeadDirectoryClient(ABC):
    """
    Base class for CRM clients.

    Every method raises CRMError on failure; callers decide whether the
    failure is fatal (it never is for the engine).
    """

    @abstractmethod
    async def list_assigned_leads(self, target: WatchTarget) -> List[CRMLead]:
        """Leads currently in the target (first page only)."""

    @abstractmethod
    async def list_calls_since(self, external_id: int, since: datetime) -> List[CRMCall]:
        """Calls logged on the lead since the given instant."""

    @abstractmethod
    async def clear_assignment_and_return_to_pool(self, external_id: int, pool_id: int) -> None:
        """Unassigns the lead and moves it back to the pond (legacy escalation)."""

    @abstractmethod
    async def add_tag(self, external_id: int, tag: str) -> None:
        """Adds the tag to the lead. No-op when already present."""

    @abstractmethod
    async def list_sources(self) -> List[CRMSource]:
        """Lead sources known to the CRM, for the admin source picker."""

    async def aclose(self) -> None:
        """Releases network resources, if any."""
        return None
