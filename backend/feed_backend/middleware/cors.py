"""
Feed Backend — Permissive CORS Headers
========================================

What:  Adds Access-Control-Allow-* headers to every response and answers
       preflight OPTIONS requests directly.
Why:   The feed client is served from another origin during development.
       This is not an access-control boundary.
How:   Unlike Starlette's CORSMiddleware, headers are set whether or not the
       request carries an Origin header.

    Access-Control-Allow-Origin:  *
    Access-Control-Allow-Methods: GET, POST, PUT, PATCH, DELETE, OPTIONS
    Access-Control-Allow-Headers: Content-Type, Authorization
"""

from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from feed_backend.config import settings


class CORSHeadersMiddleware(BaseHTTPMiddleware):

    def __init__(
        self,
        app: ASGIApp,
        allow_origin: str = settings.cors_allow_origin,
        allow_methods: str = settings.cors_allow_methods,
        allow_headers: str = settings.cors_allow_headers,
    ):
        super().__init__(app)
        self.headers: Dict[str, str] = {
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Methods": allow_methods,
            "Access-Control-Allow-Headers": allow_headers,
        }

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS" and "access-control-request-method" in request.headers:
            return Response(status_code=200, headers=self.headers)

        response = await call_next(request)
        response.headers.update(self.headers)
        return response
