"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from app.application.profiles import RecordProfile
from app.presentation.api.v1.endpoints.health import router as health_router
from app.presentation.api.v1.endpoints.records import build_records_router


def build_v1_router(profile: RecordProfile) -> APIRouter:
    router = APIRouter(prefix="/v1")
    router.include_router(health_router)
    router.include_router(build_records_router(profile))
    return router
