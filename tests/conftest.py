import os

# Must be set before leadwatch.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./leadwatch_test.db")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("ADMIN_EMAILS", "admin@example.com,ops@example.com")
os.environ.setdefault("LOG_JSON", "false")

from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from leadwatch.config import Settings
from leadwatch.domain.entities import Base
from tests.utils import FakeDirectoryClient, FakeDispatcher


@pytest.fixture
async def db_engine(tmp_path):
    """
    Fresh SQLite database per test, tables created up front.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'leadwatch.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def settings() -> Settings:
    return Settings(
        pond_id=18,
        pond_name="Money Time Pond",
        default_timer_minutes=30,
        escalation_mode="tag",
        escalation_tag="No Call - Timer Expired",
    )


@pytest.fixture
def fake_client() -> FakeDirectoryClient:
    return FakeDirectoryClient()


@pytest.fixture
def fake_dispatcher() -> FakeDispatcher:
    return FakeDispatcher()
