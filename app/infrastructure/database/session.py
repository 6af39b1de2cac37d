"""Async engine and per-request sessions for the document store.

All record requests share one pooled engine. Each request borrows its own
``AsyncSession``, which commits once the handler returns and rolls back when
it raises, so a rejected create or update leaves no partial write behind.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config import get_settings

logger = logging.getLogger(__name__)

_ASYNC_DRIVERS = {
    "sqlite:///": "sqlite+aiosqlite:///",
    "postgresql://": "postgresql+asyncpg://",
    "postgres://": "postgresql+asyncpg://",
}


def async_database_url(url: str) -> str:
    """Point a plain ``sqlite``/``postgresql`` URL at its asyncio driver."""
    for prefix, replacement in _ASYNC_DRIVERS.items():
        if url.startswith(prefix):
            return replacement + url[len(prefix):]
    return url


def build_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create the document store engine.

    SQLite files get the driver's default pool; server databases also check
    connections before use so a restarted PostgreSQL does not fail requests.
    """
    url = async_database_url(database_url)
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=echo)
    return create_async_engine(url, echo=echo, pool_pre_ping=True, pool_recycle=3600)


settings = get_settings()
engine = build_engine(settings.database_url, echo=(settings.app_env == "development"))

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield the request's session; commit on success, roll back on any error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            logger.debug("Rolling back document store session")
            await session.rollback()
            raise
