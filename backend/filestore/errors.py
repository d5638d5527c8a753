"""Error envelope and exception handlers.

Every failure the service reports reaches the client in one shape:

    {"error": "<human readable message>"}

with the HTTP status carrying the category. Handlers and the storage service
raise one of the ``FileStoreError`` subclasses; the exception handlers
registered by ``register_error_handlers`` turn them (and the framework's own
HTTP and validation errors) into that envelope.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class FileStoreError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MethodNotAllowed(FileStoreError):
    status_code = status.HTTP_405_METHOD_NOT_ALLOWED


class BadRequest(FileStoreError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(FileStoreError):
    status_code = status.HTTP_404_NOT_FOUND


class InternalError(FileStoreError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(message: str, status_code: int, headers=None) -> JSONResponse:
    """Build the ``{"error": message}`` response with the given status."""
    return JSONResponse(
        status_code=status_code,
        content={"error": message},
        headers=headers,
    )


async def handle_filestore_error(request: Request, exc: FileStoreError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning(
            "%s %s rejected (%d): %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.message,
        )
    return error_response(exc.message, exc.status_code)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Static-file misses and framework-level 404/405s land here.
    return error_response(str(exc.detail), exc.status_code, headers=getattr(exc, "headers", None))


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("%s %s invalid request: %s", request.method, request.url.path, exc.errors())
    return error_response("Invalid request", status.HTTP_400_BAD_REQUEST)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("%s %s raised an unhandled error", request.method, request.url.path, exc_info=exc)
    return error_response("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_error_handlers(app: FastAPI) -> None:
    """Install the envelope-producing exception handlers on ``app``."""
    app.add_exception_handler(FileStoreError, handle_filestore_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
