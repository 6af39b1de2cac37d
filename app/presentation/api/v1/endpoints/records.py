"""Owner-scoped record endpoints — create, update, list, remove."""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from app.application.profiles import RecordProfile
from app.application.schemas import ResultEnvelope
from app.application.services import RecordService
from app.application.services.record_service import parse_page_param
from app.infrastructure.dependencies import get_record_service
from app.presentation.api.identity import extract_identity


def _ok(data, total: int | None = None) -> JSONResponse:
    return JSONResponse(content=ResultEnvelope.success(data, total).to_content())


def build_records_router(profile: RecordProfile) -> APIRouter:
    """Build the record routes under the profile's prefix (e.g. ``/record``)."""
    router = APIRouter(prefix=profile.route_prefix, tags=[profile.name.title()])

    @router.post("/create")
    async def create_record(
        request: Request,
        uid: str = Depends(extract_identity),
        service: RecordService = Depends(get_record_service),
    ) -> JSONResponse:
        """Insert a record owned by the caller; responds with its id."""
        body = await request.body()
        return _ok(await service.create_record(uid, body))

    @router.api_route("/update", methods=["PUT", "PATCH"])
    async def update_record(
        request: Request,
        uid: str = Depends(extract_identity),
        service: RecordService = Depends(get_record_service),
    ) -> JSONResponse:
        """Merge the body's fields into the caller's record named by ``id``."""
        body = await request.body()
        return _ok(await service.update_record(uid, body))

    @router.get("/list")
    async def list_records(
        uid: str = Depends(extract_identity),
        limit: str | None = Query(None, description="Page size, 0 for no limit"),
        skip: str | None = Query(None, description="Number of records to skip"),
        service: RecordService = Depends(get_record_service),
    ) -> JSONResponse:
        """One page of the caller's records plus the caller's total count."""
        records, total = await service.list_records(
            uid,
            limit=parse_page_param(limit),
            skip=parse_page_param(skip),
        )
        return _ok(records, total)

    @router.delete("/{record_id}")
    async def remove_record(
        record_id: str,
        uid: str = Depends(extract_identity),
        service: RecordService = Depends(get_record_service),
    ) -> JSONResponse:
        """Delete one of the caller's records."""
        return _ok(await service.remove_record(uid, record_id))

    return router
