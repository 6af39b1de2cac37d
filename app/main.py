"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from app.application.profiles import get_profile
from app.config import Settings, get_settings
from app.infrastructure.database import Base, engine
from app.infrastructure.logging.log_config import setup_logging
from app.presentation.api.error_handlers import register_error_handlers
from app.presentation.api.router import build_api_router

logger = logging.getLogger(__name__)


async def _prepare_database() -> None:
    """Create tables and check connectivity.

    A failure here is fatal: the process must not serve requests that can
    only fail against a missing database.
    """
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            await conn.execute(text("SELECT 1"))
    except Exception:
        logger.critical("Database is unreachable — refusing to start", exc_info=True)
        raise


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — configure logging, prepare the database."""
    setup_logging()
    await _prepare_database()
    logger.info(
        "Serving '%s' records from collection '%s'",
        app.state.record_profile.name,
        app.state.record_profile.collection,
    )

    yield

    # Shutdown
    await engine.dispose()
    logger.info("Database connections closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = settings or get_settings()
    profile = get_profile(settings.variant)

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.record_profile = profile

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Mount API routes
    app.include_router(build_api_router(profile))

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.app_env == "development",
    )
