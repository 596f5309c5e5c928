"""
Async database session management.
Design: one session per request, committed on success and rolled back on error.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from marketplace.config import Settings, get_settings


def build_engine(settings: Settings) -> AsyncEngine:
    """Pooled engine for server databases; SQLite keeps its default pool."""
    options = {"echo": settings.debug}
    if make_url(settings.database_url).get_backend_name() != "sqlite":
        options.update(
            pool_pre_ping=True,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
        )
    return create_async_engine(settings.database_url, **options)


engine = build_engine(get_settings())

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request: commit when the handler returns, roll back if it raises."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


DbSession = Annotated[AsyncSession, Depends(get_db)]
