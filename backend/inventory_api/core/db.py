"""Async database session management helpers."""

from typing import Any, AsyncIterator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from inventory_api.core.config import settings


def build_engine(url: str) -> AsyncEngine:
    """Create the async engine, applying pool settings only where the dialect uses them."""

    kwargs: dict[str, Any] = {"pool_pre_ping": True, "echo": settings.DEBUG}
    if make_url(url).get_backend_name() == "sqlite":
        # SQLite serialises writers itself; wait on its lock rather than failing fast.
        kwargs["connect_args"] = {"timeout": 30}
    else:
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )
        if settings.DB_ISOLATION_LEVEL:
            kwargs["isolation_level"] = settings.DB_ISOLATION_LEVEL
    return create_async_engine(url, **kwargs)


engine = build_engine(settings.DATABASE_URL)

SessionLocal = async_sessionmaker(bind=engine, expire_on_commit=False)


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields an async database session."""

    async with SessionLocal() as session:
        yield session
