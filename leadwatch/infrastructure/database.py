"""Manages the database connection (PostgreSQL in production)."""
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from leadwatch.config import get_settings

settings = get_settings()


def normalize_database_url(url: str) -> str:
    """
    Render/Railway hand out postgres:// URLs, asyncpg needs postgresql+asyncpg://.
    The sslmode query param is not understood by asyncpg either.
    """
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)

    if url.startswith("postgresql+asyncpg://") and "sslmode=" in url:
        base, _, query = url.partition("?")
        params = [p for p in query.split("&") if p and not p.startswith("sslmode=")]
        url = f"{base}?{'&'.join(params)}" if params else base

    return url


database_url = normalize_database_url(settings.database_url)

engine_kwargs = {"echo": settings.debug, "pool_pre_ping": True}
if database_url.startswith("postgresql+asyncpg://"):
    engine_kwargs.update(pool_size=10, max_overflow=20)

engine = create_async_engine(database_url, **engine_kwargs)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that injects a database session."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """Creates the tables (schema is small enough to not need migrations yet)."""
    from leadwatch.domain.entities import Base
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
