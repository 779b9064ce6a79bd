"""HTTP middleware and error responses."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from tableplane.core.errors import (
    ErrorCode,
    InternalError,
    NotFoundError,
    TablePlaneError,
    ValidationError,
)
from tableplane.core.logging import clear_request_id, set_request_id

REQUEST_ID_HEADER = "X-Request-ID"

# Type alias for the call_next function
CallNext = Callable[[Request], Awaitable[Response]]

logger = structlog.get_logger()


def status_for(error: TablePlaneError) -> int:
    """HTTP status for an error: bad input 400, missing 404, busy 409, else 500."""
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, NotFoundError):
        return 404
    if error.code is ErrorCode.STORE_LOCK_HELD:
        return 409
    return 500


def error_response(error: TablePlaneError) -> JSONResponse:
    return JSONResponse({"error": error.to_dict()}, status_code=status_for(error))


async def handle_tableplane_error(request: Request, exc: Exception) -> Response:
    """Exception handler registered for TablePlaneError."""
    assert isinstance(exc, TablePlaneError)
    log = logger.warning if status_for(exc) < 500 else logger.error
    log("request_failed", path=request.url.path, code=exc.code.name, error=exc.message)
    return error_response(exc)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind a request id to the log context and echo it in the response."""

    async def dispatch(self, request: Request, call_next: CallNext) -> Response:
        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        try:
            response = await call_next(request)
            logger.debug(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
            )
        except Exception as e:
            logger.exception("request_crashed", path=request.url.path)
            response = error_response(InternalError.unexpected(str(e), path=request.url.path))
        finally:
            clear_request_id()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
