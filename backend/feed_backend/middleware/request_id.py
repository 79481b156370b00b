"""
Feed Backend — Request ID Middleware
======================================

What:  Tags each request with an ID and echoes it in the X-Request-ID header.
Why:   Lets access logs, error logs, and client bug reports be correlated.
How:   Uses the client's X-Request-ID when it is a short token of safe
       characters, otherwise a short UUID; stores it in a ContextVar
       (per-coroutine) and on request.state.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Client IDs end up in log lines and response headers
_CLIENT_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,64}")


def resolve_request_id(client_value: Optional[str]) -> str:
    if client_value and _CLIENT_ID_PATTERN.fullmatch(client_value):
        return client_value
    # 8 chars is enough for correlation and readable in logs
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns a request ID before any other processing and returns it to the client."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get("X-Request-ID"))

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        return response
