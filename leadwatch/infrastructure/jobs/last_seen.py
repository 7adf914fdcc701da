"""
LAST-SEEN ASSIGNEES
===================

Process-local map: CRM lead id -> assignee id seen on the previous poll.

Shared by the pond and the source detection jobs (a lead can show up in
both), so every read/write goes through one asyncio.Lock.

Not persisted: after a restart every assigned lead looks new again, and the
pending-row check in the store keeps that from opening duplicate timers.
"""

import asyncio
from typing import Dict, Optional


class LastSeenAssignees:
    def __init__(self):
        self._seen: Dict[int, int] = {}
        self._lock = asyncio.Lock()

    async def is_new_assignment(self, external_lead_id: int, assignee_id: int) -> bool:
        """True when the assignee differs from the last sighting (or there was none)."""
        async with self._lock:
            return self._seen.get(external_lead_id) != assignee_id

    async def record(self, external_lead_id: int, assignee_id: int) -> None:
        async with self._lock:
            self._seen[external_lead_id] = assignee_id

    async def get(self, external_lead_id: int) -> Optional[int]:
        async with self._lock:
            return self._seen.get(external_lead_id)

    def __len__(self) -> int:
        return len(self._seen)
