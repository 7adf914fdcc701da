"""
LEADWATCH API - Entry point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from leadwatch.config import get_settings
from leadwatch.infrastructure.crm import build_directory_client
from leadwatch.infrastructure.database import async_session, init_db
from leadwatch.infrastructure.jobs import AccountabilityEngine
from leadwatch.infrastructure.logging_config import setup_logging
from leadwatch.infrastructure.scheduler import create_scheduler, start_scheduler, stop_scheduler
from leadwatch.infrastructure.services import NotificationDispatcher

from leadwatch.api.routes import (
    assignments_router,
    sources_router,
    jobs_router,
    auth_router,
    health_router,
)

settings = get_settings()
logger = logging.getLogger(__name__)


# ============================================================
# 🔁 LIFESPAN
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(json_output=settings.log_json, level=logging.DEBUG if settings.debug else logging.INFO)
    logger.info("🚀 Starting Leadwatch API...")

    await init_db()
    logger.info("✅ Tables ready")

    client = None
    if settings.fub_api_key:
        client = build_directory_client(settings)
    else:
        logger.warning("⚠️ FUB_API_KEY not set, CRM client and monitoring disabled")

    app.state.directory_client = client

    if client is not None and settings.scheduler_enabled:
        engine = AccountabilityEngine(
            client=client,
            dispatcher=NotificationDispatcher.from_settings(settings),
            session_factory=async_session,
            settings=settings,
        )
        app.state.engine = engine

        logger.info(f"👀 Monitoring pond {settings.pond_id} ({settings.pond_name})")
        create_scheduler(engine, settings)
        start_scheduler()

    yield

    logger.info("👋 Shutting down Leadwatch API...")
    stop_scheduler()
    if client is not None:
        await client.aclose()


# ============================================================
# FASTAPI APP
# ============================================================
app = FastAPI(
    title="Leadwatch API",
    description="Lead accountability: call-or-escalate timers for CRM assignments",
    version="0.1.0",
    lifespan=lifespan,
)

# ============================================================
# ⭐ CORS
# ============================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================
# ROUTES
# ============================================================
app.include_router(auth_router, prefix="/api/v1")
app.include_router(assignments_router, prefix="/api/v1")
app.include_router(sources_router, prefix="/api/v1")
app.include_router(jobs_router, prefix="/api/v1")
app.include_router(health_router)


@app.get("/")
async def root():
    return {"name": "Leadwatch API", "status": "running"}
