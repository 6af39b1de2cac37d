"""Integration fixtures — a fresh SQLite database per test via aiosqlite."""

from collections.abc import AsyncIterator, Callable

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import Settings
from app.infrastructure.database import Base, get_db_session
from app.main import create_app


@pytest_asyncio.fixture
async def session_factory(tmp_path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'records.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def client_for(session_factory) -> AsyncIterator[Callable[[str], AsyncClient]]:
    """Build an API client for a deployment variant, sharing one database."""
    clients: list[AsyncClient] = []

    async def _session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    def _build(variant: str) -> AsyncClient:
        app = create_app(Settings(variant=variant))
        app.dependency_overrides[get_db_session] = _session
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        return client

    yield _build

    for client in clients:
        await client.aclose()
