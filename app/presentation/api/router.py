"""Top-level API router — includes versioned sub-routers."""

from fastapi import APIRouter

from app.application.profiles import RecordProfile
from app.presentation.api.v1.router import build_v1_router


def build_api_router(profile: RecordProfile) -> APIRouter:
    router = APIRouter(prefix="/api")
    router.include_router(build_v1_router(profile))
    return router
