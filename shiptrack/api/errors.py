"""Map service errors onto HTTP responses of the form ``{"error": message}``."""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shiptrack.common.errors import ShipTrackError
from shiptrack.common.logging_utils import get_logger

logger = get_logger(__name__)


def error_response(status_code: int, message: str, details: list | None = None) -> JSONResponse:
    content: dict = {"error": message}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


async def shiptrack_error_handler(request: Request, exc: ShipTrackError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            f"{type(exc).__name__}: {exc.message}",
            path=request.url.path,
            method=request.method,
        )
    else:
        logger.warning(
            f"{type(exc).__name__}: {exc.message}",
            path=request.url.path,
            method=request.method,
        )
    return error_response(exc.status_code, exc.message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and query parameters are client errors (400)."""
    details = [
        {
            "field": " -> ".join(str(part) for part in error["loc"]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    logger.warning("Request validation failed", path=request.url.path, error_count=len(details))
    return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request", details)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShipTrackError, shiptrack_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
