"""Liveness endpoint; reports which deployment profile this process serves."""

from fastapi import APIRouter, Depends

from app.application.profiles import RecordProfile
from app.config import get_settings
from app.infrastructure.dependencies import get_record_profile

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(profile: RecordProfile = Depends(get_record_profile)) -> dict:
    settings = get_settings()
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "variant": profile.name,
        "collection": profile.collection,
    }
