"""Exception handlers producing ``{"success": false, "error": ...}`` bodies."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortlink.errors import (
    InvalidURLError,
    NotFoundError,
    ShortCodeExhaustedError,
    ShortLinkError,
)

logger = logging.getLogger("shortlink.web")

INTERNAL_ERROR_MESSAGE = "Internal server error. Please try again."

LOCATION_PARTS = {"body", "query", "path", "header"}

STATUS_BY_ERROR = {
    InvalidURLError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ShortCodeExhaustedError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report the first invalid field as a 400."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in LOCATION_PARTS)
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return error_response(status.HTTP_400_BAD_REQUEST, message)


async def shortlink_error_handler(request: Request, exc: ShortLinkError):
    for error_type, status_code in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return error_response(status_code, str(exc))

    # StoreError and anything unexpected: details stay in the logs
    logger.error(f"{request.method} {request.url.path} failed: {exc!r}", exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}", exc_info=exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ShortLinkError, shortlink_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
