"""
Request logging middleware, error logging handlers and the central error responder.

Error flow: a handler raises -> the error is appended to the error log ->
the central responder renders ``{status, msg}`` (plus ``book`` for /book routes).
"""

from typing import Any, Dict

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from book_api.errors import BookAPIError, BookValidationError, RouteNotFoundError
from book_api.models import ErrorResponse, ResultEnvelope
from utilities.logger import iso_timestamp

logger = structlog.get_logger(__name__)


def envelope_response(status_code: int, msg: str, book: Any = None) -> JSONResponse:
    """Wrap a result as ``{status, msg, book}`` with a matching HTTP status."""
    envelope = ResultEnvelope(status=status_code, msg=msg, book=book)
    return JSONResponse(status_code=status_code, content=envelope.model_dump(mode="json"))


async def log_requests(request: Request, call_next):
    """Log timestamp, method and original path of every inbound request."""
    path = request.url.path
    if request.url.query:
        path = f"{path}?{request.url.query}"

    logger.info("Incoming request",
                timestamp=iso_timestamp(),
                method=request.method,
                path=path)
    return await call_next(request)


def log_error(request: Request, exc: BaseException) -> None:
    """Append the error to the error log before any response is produced."""
    logger.info("Error logger called", path=request.url.path, error=str(exc))
    error_log = getattr(request.app.state, "error_log", None)
    if error_log is not None:
        error_log.write(exc)


def error_response(request: Request, exc: BaseException) -> JSONResponse:
    """Central error responder: the only place an error turns into a response."""
    # Only domain errors choose what the client sees
    if isinstance(exc, BookAPIError):
        status_code, msg, envelope = exc.status, exc.msg, exc.envelope
    else:
        status_code, msg, envelope = status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", False

    content: Dict[str, Any] = ErrorResponse(status=status_code, msg=msg).model_dump()
    if envelope:
        content["book"] = None

    settings = getattr(request.app.state, "settings", None)
    if settings is not None and settings.debug and status_code >= 500:
        content["book"] = {"error": getattr(exc, "detail", None) or str(exc)}

    return JSONResponse(status_code=status_code, content=content)


async def api_error_handler(request: Request, exc: BookAPIError) -> JSONResponse:
    """Handle domain errors propagated by route handlers."""
    log_error(request, exc)
    return error_response(request, exc)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Turn unmatched routes into RouteNotFoundError."""
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        error = RouteNotFoundError()
    else:
        error = BookAPIError(str(exc.detail), status=exc.status_code, envelope=False)
    error.__cause__ = exc
    log_error(request, error)
    return error_response(request, error)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies get the same answer as missing fields."""
    logger.warning("Rejected malformed request body", path=request.url.path, errors=str(exc.errors()))
    return envelope_response(BookValidationError.status, BookValidationError.msg, None)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    log_error(request, exc)
    return error_response(request, exc)
