"""
Feed Backend — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, error
       translation, and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn imports `feed_backend.main:app`; tests call create_app().

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                     FastAPI App                      │
    │                                                      │
    │  Middleware Chain:                                   │
    │  ┌──────┐ ┌────────┐ ┌─────────┐ ┌────────────────┐  │
    │  │ CORS │→│ Req ID │→│ Logging │→│ Error envelope │  │
    │  └──────┘ └────────┘ └─────────┘ └────────────────┘  │
    │                                                      │
    │  Routes:                                             │
    │  ┌────────────┐ ┌──────────┐ ┌─────────┐ ┌────────┐  │
    │  │ /feed/...  │ │ /auth/...│ │ /images │ │/health │  │
    │  └────────────┘ └──────────┘ └─────────┘ └────────┘  │
    │                                                      │
    │  Exception Handlers:                                 │
    │  FeedError → its status │ HTTP errors │ 422 request  │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → images directory → optional create_all
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from feed_backend import __version__
from feed_backend.config import settings
from feed_backend.database import create_tables, dispose_engine
from feed_backend.exceptions import FeedError, ValidationError
from feed_backend.middleware.cors import CORSHeadersMiddleware
from feed_backend.middleware.errors import ErrorEnvelopeMiddleware, error_response
from feed_backend.middleware.logging import RequestLoggingMiddleware
from feed_backend.middleware.request_id import RequestIDMiddleware
from feed_backend.routes import auth, feed, health

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2026-10-18T09:15:02 [INFO] feed_backend.access: GET /feed/posts 200 ...
    Called once during startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access middleware replaces uvicorn's access log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("Feed backend %s starting up...", __version__)

    images = Path(settings.images_dir)
    images.mkdir(parents=True, exist_ok=True)
    logger.info("Images directory: %s", images.resolve())

    if settings.db_create_tables:
        await create_tables()
        logger.info("Database tables ensured")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("Feed backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map errors to the JSON envelope.

    Handler hierarchy:
        FeedError (and subclasses) → exc.status_code, {message, data} / {message, errors}
        RequestValidationError     → 422, {message, errors}
        HTTPException (404, 405)   → its status, {message}
        anything else              → ErrorEnvelopeMiddleware, 500
    """

    @app.exception_handler(FeedError)
    async def handle_feed_error(request: Request, exc: FeedError) -> JSONResponse:
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {
                "type": "field",
                "value": err.get("input"),
                "msg": err.get("msg", "Invalid value"),
                "path": ".".join(str(part) for part in err.get("loc", ())[1:]) or "body",
                "location": str(err.get("loc", ("body",))[0]),
            }
            for err in exc.errors()
        ]
        return error_response(ValidationError(errors))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns a fresh instance on every call, so tests can install their own
    dependency overrides without touching the module-level `app`.
    """
    app = FastAPI(
        title="Feed API",
        description="REST backend for a feed of posts: list, create, optional image upload.",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute: CORS → RequestID → Logging → ErrorEnvelope
    app.add_middleware(ErrorEnvelopeMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(CORSHeadersMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(feed.router)
    app.include_router(auth.router)
    app.include_router(health.router)

    # check_dir=False: the directory is created by ImageService / lifespan
    app.mount(
        "/images",
        StaticFiles(directory=str(Path(settings.images_dir).resolve()), check_dir=False),
        name="images",
    )

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
