"""
Feed Backend — Error Envelope
===============================

What:  Renders FeedError instances as JSON and catches everything else.
Why:   One place produces the error body:
           {"message": str, "data": any}     (data omitted when None)
           {"message": str, "errors": [...]} (ValidationError, 422)
How:   `error_response()` is shared by the exception handlers registered in
       main.py and by ErrorEnvelopeMiddleware, which wraps exceptions that
       escaped every handler in UnhandledError (500, message verbatim).

Why a middleware for the catch-all:
    Starlette routes `Exception` handlers to ServerErrorMiddleware, which sits
    outside user middleware, so those responses would miss the CORS and
    X-Request-ID headers. Catching here keeps them on every 500.
"""

import logging
from typing import Any, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from feed_backend.exceptions import FeedError, UnhandledError, ValidationError
from feed_backend.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


def error_response(exc: FeedError) -> JSONResponse:
    """Build the JSON envelope for `exc` and log it by severity."""
    rid = request_id_var.get("")
    if exc.status_code >= 500:
        logger.error(
            "[%s] %s (%d): %s | Context: %s",
            rid, type(exc).__name__, exc.status_code, exc.message, exc.context,
        )
    else:
        logger.warning("[%s] %s (%d): %s", rid, type(exc).__name__, exc.status_code, exc.message)

    content: Dict[str, Any] = {"message": exc.message}
    if isinstance(exc, ValidationError):
        content["errors"] = exc.errors
    elif exc.data is not None:
        content["data"] = exc.data
    return JSONResponse(status_code=exc.status_code, content=content)


class ErrorEnvelopeMiddleware(BaseHTTPMiddleware):
    """Innermost middleware: turns any uncaught exception into a 500 envelope."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                "[%s] Unhandled error on %s %s",
                request_id_var.get(""),
                request.method,
                request.url.path,
                exc_info=True,
            )
            return error_response(UnhandledError(exc))
