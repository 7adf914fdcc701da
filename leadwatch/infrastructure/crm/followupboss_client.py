"""
FOLLOW UP BOSS CLIENT
=====================

httpx client for the Follow Up Boss REST API (v1).

Auth: HTTP Basic with the API key as username and an empty password.
Every request carries the configured timeout, so a slow CRM can stall a
poll cycle for at most that long per call.

Used by:
- AccountabilityEngine (detection / resolution)
- Admin API (/sources/available)
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from .interface import (
    CRMAgent,
    CRMCall,
    CRMError,
    CRMLead,
    CRMSource,
    LeadDirectoryClient,
    WatchTarget,
)

logger = logging.getLogger(__name__)


def parse_crm_datetime(value: str) -> datetime:
    """FUB returns ISO-8601 timestamps, usually with a trailing Z."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class FollowUpBossClient(LeadDirectoryClient):
    """Follow Up Boss implementation of the lead directory."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.followupboss.com/v1",
        timeout: float = 30.0,
        page_limit: int = 100,
        system_name: Optional[str] = None,
        system_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise ValueError("Follow Up Boss api_key is required")

        self.page_limit = page_limit

        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if system_name and system_key:
            headers["X-System"] = system_name
            headers["X-System-Key"] = system_key

        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            auth=httpx.BasicAuth(api_key, ""),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    # ==========================
    # HTTP HELPERS
    # ==========================
    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        try:
            response = await self._client.request(method, endpoint, params=params, json=json)
        except httpx.TransportError as e:
            raise CRMError(f"FUB transport error on {method} {endpoint}: {e}", kind="transport") from e

        if response.is_success:
            if not response.content:
                return {}
            return response.json()

        status_code = response.status_code
        if status_code in (401, 403):
            kind = "auth"
        elif status_code == 429:
            kind = "rate_limit"
        else:
            kind = "http"

        raise CRMError(
            f"FUB API error: {status_code} {response.text}",
            kind=kind,
            status_code=status_code,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # ==========================
    # PARSERS
    # ==========================
    @staticmethod
    def _parse_person(person: Dict[str, Any]) -> CRMLead:
        name = person.get("name") or " ".join(
            part for part in (person.get("firstName"), person.get("lastName")) if part
        )

        assignee = None
        assigned = person.get("assignedTo")
        if isinstance(assigned, dict) and assigned.get("id") is not None:
            assignee = CRMAgent(
                id=int(assigned["id"]),
                name=assigned.get("name") or assigned.get("email") or "",
                email=assigned.get("email") or "",
            )
        elif person.get("assignedUserId"):
            # Flat form: assignedUserId + assignedTo holding the agent name
            assignee = CRMAgent(
                id=int(person["assignedUserId"]),
                name=assigned if isinstance(assigned, str) else "",
                email="",
            )

        return CRMLead(
            external_id=int(person["id"]),
            display_name=name or f"Lead {person['id']}",
            assignee=assignee,
        )

    # ==========================
    # READS
    # ==========================
    async def list_assigned_leads(self, target: WatchTarget) -> List[CRMLead]:
        params: Dict[str, Any] = {"limit": self.page_limit}
        if target.pond_id is not None:
            params["pondId"] = target.pond_id
        elif target.source:
            params["source"] = target.source
            params["sort"] = "-created"
        else:
            raise ValueError(f"Watch target {target.name!r} has neither pond nor source")

        data = await self._request("GET", "/people", params=params)
        return [self._parse_person(person) for person in data.get("people") or []]

    async def list_calls_since(self, external_id: int, since: datetime) -> List[CRMCall]:
        if since.tzinfo is None:
            since = since.replace(tzinfo=timezone.utc)

        data = await self._request(
            "GET",
            "/calls",
            params={"personId": external_id, "created": since.isoformat()},
        )

        calls = []
        for call in data.get("calls") or []:
            created = call.get("created")
            if not created:
                continue
            calls.append(CRMCall(created=parse_crm_datetime(created), direction=call.get("direction")))
        return calls

    async def list_sources(self) -> List[CRMSource]:
        data = await self._request("GET", "/leadsources")
        raw = data.get("leadsources") or data.get("leadSources") or []

        sources = [
            CRMSource(id=item.get("id"), name=item.get("name") or item.get("source") or "Unknown")
            for item in raw
        ]
        return sorted(sources, key=lambda s: s.name.lower())

    # ==========================
    # MUTATIONS
    # ==========================
    async def clear_assignment_and_return_to_pool(self, external_id: int, pool_id: int) -> None:
        await self._request(
            "PUT",
            f"/people/{external_id}",
            json={"assignedTo": None, "pondId": pool_id},
        )
        logger.info(f"[FUB] Person {external_id} returned to pond {pool_id}")

    async def add_tag(self, external_id: int, tag: str) -> None:
        person = await self._request("GET", f"/people/{external_id}")
        current_tags = person.get("tags") or []

        if tag in current_tags:
            logger.debug(f"[FUB] Person {external_id} already tagged {tag!r}")
            return

        await self._request(
            "PUT",
            f"/people/{external_id}",
            json={"tags": [*current_tags, tag]},
        )
        logger.info(f"[FUB] Added tag {tag!r} to person {external_id}")
