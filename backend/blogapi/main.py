"""
Blog API Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes app configuration, middleware registration, route mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn blogapi.main:app),
       or by `blogapi` (the console script → run()).
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain (outermost first):                     │
    │  ┌─────────┐ ┌─────────┐ ┌─────────┐ ┌──────┐ ┌───────┐ │
    │  │ Context │→│ Logging │→│ Headers │→│ Auth │→│ GZip… │ │
    │  └─────────┘ └─────────┘ └─────────┘ └──────┘ └───────┘ │
    │                                                          │
    │  Routes:                                                 │
    │  /posts  /posts/{id}/comments  /users  /statistics       │
    │  /health  /static                                        │
    │                                                          │
    │  Exception Handlers (all render the envelope):           │
    │  Validation→400 │ NotFound→404 │ Conflict→409 │ *→500    │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Build LoggingConfig from settings and install the logging layers
    2. Log startup complete

    Shutdown:
    1. Dispose database engine (close all connections)
    2. Detach and close the logging handlers installed at startup
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from blogapi import __version__
from blogapi.config import settings
from blogapi.database import dispose_engine
from blogapi.exceptions import BlogAPIError
from blogapi.logging_config import LoggingConfig, setup_logging
from blogapi.middleware.chain import build_middleware_chain, register_middleware_chain
from blogapi.middleware.context import request_id_var
from blogapi.routes import comments, health, posts, statistics, users
from blogapi.routes.forms import describe_errors
from blogapi.schemas.envelope import Envelope
from blogapi.security import CredentialVerifier

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred. Please try again or contact support."


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manage application lifecycle: startup and shutdown procedures.

    What:    Installs logging on startup; releases the pool and the log
             handlers on shutdown.
    How:     AsyncContextManager — code before yield runs on startup,
             code after yield runs on shutdown.

    Why lifespan (not on_event):
        FastAPI's @app.on_event("startup") is deprecated in favor of lifespan.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    handle = setup_logging(LoggingConfig.from_settings(settings))
    logger.info("=" * 60)
    logger.info("Blog API %s starting up...", __version__)
    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("API docs: http://%s:%d/docs", settings.host, settings.port)
    logger.info("=" * 60)

    try:
        yield  # Application runs here
    finally:
        # ── Shutdown ──────────────────────────────────────────────────────
        logger.info("Blog API shutting down...")
        await dispose_engine()
        logger.info("Shutdown complete.")
        handle.shutdown()


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error envelopes.

    Handler hierarchy:
        ValidationError         → 400 Bad Request (client can fix the input)
        RequestValidationError  → 400 Bad Request (malformed params/body)
        NotFoundError           → 404 Not Found
        ConflictError           → 409 Conflict
        StorageError            → 500 (generic message, details logged)
        ConversionError         → 500
        HTTPException           → its own status (unknown route → 404, 405…)
        Exception (fallback)    → 500 Internal Server Error

    Every BlogAPIError subclass carries its own status_code, so one handler
    covers the whole taxonomy.

    Security: Exception handlers NEVER expose internal details (stack traces,
    SQL, exception context) in the API response. Details are logged server-side.
    """

    @app.exception_handler(BlogAPIError)
    async def handle_blog_api_error(request: Request, exc: BlogAPIError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s: %s | Context: %s",
                rid, type(exc).__name__, exc.message, exc.context,
            )
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return Envelope.error(exc.status_code, exc.message).to_response()

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Wrong parameter types, out-of-range page sizes and the like."""
        message = describe_errors(exc.errors())
        logger.info("[%s] Request validation failed: %s", request_id_var.get(""), message)
        return Envelope.error(400, message).to_response()

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Framework-raised errors (unknown route, method not allowed)."""
        return Envelope.error(exc.status_code, str(exc.detail)).to_response(
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for truly unexpected errors.

        Why:    Prevents raw stack traces from reaching the client.
        What:   Returns a generic 500 envelope; the request ID in the
                X-Request-ID header identifies the log entry.
        """
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,  # Log full stack trace for debugging
        )
        return Envelope.error(500, INTERNAL_ERROR_MESSAGE).to_response()


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(credential_verifier: Optional[CredentialVerifier] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        credential_verifier: Verifier for the authentication unit. None keeps
                             the database-backed HTTP Basic verifier; tests
                             inject their own.

    Why factory (not module-level app):
        1. Testability: Create fresh app instances for each test
        2. Configuration: Swap the credential verifier without globals
    """
    app = FastAPI(
        title="Blog API",
        description=(
            "CRUD REST API for users, posts and comments. Every response is "
            "wrapped in a {code, message, data} envelope."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    register_middleware_chain(app, build_middleware_chain(credential_verifier))

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(posts.router)
    app.include_router(comments.router)
    app.include_router(users.router)
    app.include_router(statistics.router)
    app.include_router(health.router)

    # check_dir=False: a missing STATIC_DIR yields 404s instead of a crash
    app.mount(
        "/static",
        StaticFiles(directory=settings.static_dir, html=True, check_dir=False),
        name="static",
    )

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `blogapi.main:app` to be importable
app = create_app()


def run() -> None:
    """Console-script entry point: serve `app` on HOST:PORT."""
    uvicorn.run(
        "blogapi.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
