"""Error taxonomy and the single place errors are turned into JSON responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class CampusPulseError(Exception):
    """Base for errors that map directly onto an HTTP status."""

    status_code = 500
    default_message = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailedError(CampusPulseError):
    """A required field is missing or malformed."""

    status_code = 400
    default_message = "Invalid request"


class ConflictError(CampusPulseError):
    """The write would violate a uniqueness rule (e.g. a taken username)."""

    status_code = 400
    default_message = "Conflict"


class PermissionDeniedError(CampusPulseError):
    """Authenticated, but neither the owner of the row nor an admin."""

    status_code = 403
    default_message = "Unauthorized"


class NotFoundError(CampusPulseError):
    status_code = 404
    default_message = "Not found"


class UploadTooLargeError(CampusPulseError):
    status_code = 413
    default_message = "File upload error: File too large"


class ImageProcessingError(CampusPulseError):
    """The uploaded file could not be decoded or re-encoded as an image."""

    status_code = 400
    default_message = "Image processing error"


class RateLimitExceededError(CampusPulseError):
    status_code = 429
    default_message = "Too many requests, please try again later"

    def __init__(self, message: str | None = None, retry_after: int = 0) -> None:
        self.retry_after = retry_after
        super().__init__(message)


def _message_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message}, headers=headers)


async def campus_pulse_error_handler(request: Request, exc: CampusPulseError) -> JSONResponse:
    headers = None
    if isinstance(exc, RateLimitExceededError):
        headers = {"Retry-After": str(exc.retry_after)}
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _message_response(exc.status_code, exc.message, headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Starlette raises a bare 404 when no route matches the path.
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = "Route not found"
    else:
        message = str(exc.detail)
    return _message_response(exc.status_code, message, getattr(exc, "headers", None))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback server-side only; the caller always gets the generic message."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _message_response(500, "Internal Server Error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CampusPulseError, campus_pulse_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
