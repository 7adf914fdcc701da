"""API routes."""

from .assignments import router as assignments_router
from .sources import router as sources_router
from .jobs import router as jobs_router
from .auth import router as auth_router
from .health import router as health_router

__all__ = [
    "assignments_router",
    "sources_router",
    "jobs_router",
    "auth_router",
    "health_router",
]
