"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.profiles import RecordProfile
from app.application.services import RecordService
from app.infrastructure.database.session import get_db_session
from app.infrastructure.database.repositories import SQLAlchemyDocumentCollection


def get_record_profile(request: Request) -> RecordProfile:
    """The deployment profile chosen when the app was built."""
    return request.app.state.record_profile


async def get_record_service(
    profile: RecordProfile = Depends(get_record_profile),
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[RecordService, None]:
    """Provides a RecordService bound to the profile's collection."""
    collection = SQLAlchemyDocumentCollection(session, profile.collection)
    yield RecordService(collection, profile)
