"""
DEPENDENCIES
============

Functions injected into the routes.
"""

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from leadwatch.infrastructure.crm import LeadDirectoryClient
from leadwatch.infrastructure.services.auth_service import decode_access_token, is_admin_email

# Bearer authentication scheme
security = HTTPBearer()


@dataclass
class AdminUser:
    email: str
    name: str = ""


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> AdminUser:
    """
    Validates the token and returns the authenticated admin.

    Usage:
        @router.get("/protected")
        async def route(admin: AdminUser = Depends(get_current_admin)):
            ...
    """
    payload = decode_access_token(credentials.credentials)

    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    email = payload.get("sub")
    if not is_admin_email(email):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized",
        )

    return AdminUser(email=email.lower(), name=payload.get("name") or "")


def get_directory_client(request: Request) -> LeadDirectoryClient:
    """CRM client created in the app lifespan."""
    client = getattr(request.app.state, "directory_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="CRM client not configured",
        )
    return client
