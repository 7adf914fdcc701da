"""
CRM clients

Usage:
    from leadwatch.infrastructure.crm import build_directory_client

    client = build_directory_client()
    leads = await client.list_assigned_leads(target)
"""

from typing import Optional

from leadwatch.config import Settings, get_settings

from .interface import (
    LeadDirectoryClient,
    WatchTarget,
    CRMAgent,
    CRMLead,
    CRMCall,
    CRMSource,
    CRMError,
)
from .followupboss_client import FollowUpBossClient


def build_directory_client(settings: Optional[Settings] = None) -> LeadDirectoryClient:
    """Builds the CRM client from settings."""
    settings = settings or get_settings()
    return FollowUpBossClient(
        api_key=settings.fub_api_key,
        base_url=settings.fub_base_url,
        timeout=settings.crm_timeout_seconds,
        page_limit=settings.crm_page_limit,
        system_name=settings.fub_system_name,
        system_key=settings.fub_system_key,
    )


__all__ = [
    "LeadDirectoryClient",
    "WatchTarget",
    "CRMAgent",
    "CRMLead",
    "CRMCall",
    "CRMSource",
    "CRMError",
    "FollowUpBossClient",
    "build_directory_client",
]
