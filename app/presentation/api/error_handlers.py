"""Global exception handlers — every failure leaves as ``{"ok": false, "msg": ...}``.

RecordServiceError subclasses carry their own HTTP status. Request validation
errors map to 400, and anything unexpected maps to 500 without leaking
internal details.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.application.schemas import ResultEnvelope
from app.domain.exceptions import RecordServiceError, StoreError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_record_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _failure(status_code: int, msg: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ResultEnvelope.failure(msg).to_content(),
    )


def _register_record_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RecordServiceError)
    async def record_error_handler(request: Request, exc: RecordServiceError):
        log = logger.error if isinstance(exc, StoreError) else logger.warning
        log(
            "%s on %s %s: %s",
            type(exc).__name__, request.method, request.url.path, exc.message,
        )
        return _failure(exc.http_status, exc.message)


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
        first = exc.errors()[0] if exc.errors() else {}
        return _failure(
            status.HTTP_400_BAD_REQUEST, first.get("msg", "Invalid request data")
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception on %s: %s", request.url.path, exc, exc_info=True,
        )
        return _failure(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred"
        )
