"""Exception handlers that render failures in the service's JSON envelope."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models.vehicles import ErrorResponse
from core.exceptions import FleetError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def error_response(status_code: int, error: ErrorResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error.model_dump(exclude_none=True))


async def fleet_error_handler(request: Request, exc: FleetError) -> JSONResponse:
    if isinstance(exc, NotFoundError):
        status_code = 404
    elif isinstance(exc, ValidationError):
        status_code = 400
    else:
        status_code = 500
    return error_response(status_code, ErrorResponse(error=exc.label, message=exc.message))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        error = ErrorResponse(
            error="Route not found",
            message="The requested endpoint does not exist",
            documentation="/api/docs",
        )
    else:
        error = ErrorResponse(error=str(exc.detail), message=str(exc.detail))
    return error_response(exc.status_code, error)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error serving {request.method} {request.url.path}")
    return error_response(500, ErrorResponse(error="Internal server error", message=str(exc)))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FleetError, fleet_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
