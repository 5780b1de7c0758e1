"""
Firenotes — FastAPI Application Factory
========================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes service wiring, middleware registration, route mounting,
       error mapping and lifecycle management in one place.
Who:   Called by uvicorn (uvicorn firenotes.main:app) and by the tests, which
       pass their own settings, HTTP client and session factory.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware Chain:                                   │
    │  ┌──────────┐ ┌──────────┐ ┌──────────────────────┐  │
    │  │  Req ID  │→│ Logging  │→│ Rate Limit (/auth/*) │  │
    │  └──────────┘ └──────────┘ └──────────────────────┘  │
    │                                                      │
    │  Routes:                                             │
    │  ┌──────────┐ ┌──────────────────┐ ┌─────────────┐   │
    │  │ /auth/*  │ │ /home, /home/*   │ │ GET /health │   │
    │  └──────────┘ └──────────────────┘ └─────────────┘   │
    │                                                      │
    │  Exception Handlers:                                 │
    │  ┌────────────────────────────────────────────────┐  │
    │  │ Validation→400 │ Auth→400/401/409 │ NoAuth→401 │  │
    │  └────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate provider configuration (logged, not fatal)
    3. Create the documents table for the sql backend

    Shutdown:
    1. Close every client context (controllers stop publishing)
    2. Close the provider HTTP client
    3. Dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from firenotes import __version__
from firenotes.config import Settings, settings
from firenotes.database import async_session_factory, create_schema, dispose_engine, engine
from firenotes.exceptions import (
    AuthError,
    FirenotesError,
    NotAuthenticatedError,
    ValidationError,
)
from firenotes.middleware.logging import RequestLoggingMiddleware
from firenotes.middleware.rate_limit import RateLimitMiddleware
from firenotes.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from firenotes.routes import auth, health, home
from firenotes.services.container import AppServices

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = settings.log_level) -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Third-party loggers are held at WARNING: httpx logs every provider call
    at INFO, including the request URL with the API key in its query string.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    services: AppServices = app.state.services
    config = services.config

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("Firenotes starting up (store backend: %s)", config.store_backend)

    try:
        config.validate_required_for_production()
    except ValueError as e:
        # The server still answers health checks, which report the outage
        logger.error("Configuration error: %s", str(e))

    if app.state.owns_engine:
        await create_schema(engine)
        logger.info("Documents table ready at %s", engine.url.render_as_string(hide_password=True))

    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Firenotes shutting down (%d live clients)...", len(services.registry))
    await services.aclose()
    if app.state.owns_engine:
        await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "details": details,
            "request_id": request_id_var.get(""),
        },
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the ErrorResponse body.

    Handler hierarchy:
        ValidationError         → 400 (empty form fields)
        AuthError               → 400 / 401 / 409 by failure kind
        NotAuthenticatedError   → 401 (no live client session)
        FirenotesError (base)   → 500
        Exception (fallback)    → 500

    The auth rate limit never reaches these handlers: RateLimitMiddleware
    answers 429 itself, in the same body shape.

    The message of the first three is what the UI shows as the transient
    notification, so it is always user-facing text.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        logger.warning(
            "[%s] Auth rejected (%s): %s", request_id_var.get(""), exc.kind.value, exc.message
        )
        return _error_response(exc.status_code, exc.kind.value, exc.message, exc.context)

    @app.exception_handler(NotAuthenticatedError)
    async def handle_not_authenticated(request: Request, exc: NotAuthenticatedError):
        return _error_response(
            401,
            "not_authenticated",
            exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(FirenotesError)
    async def handle_firenotes_error(request: Request, exc: FirenotesError):
        logger.error(
            "[%s] Unhandled application error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True
        )
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    config: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> FastAPI:
    """
    Args:
        config: Settings to run with (default: the module-level settings).
        http_client: Client for every Firebase call; tests pass one with a
            mock transport.
        session_factory: Session factory for the sql backend. When omitted
            the module-level engine is used, and the app creates its schema
            at startup and disposes it at shutdown.

    Services are built here rather than in the lifespan so that test
    clients which do not run the lifespan still find them on app.state.
    """
    config = config or settings

    app = FastAPI(
        title="Firenotes API",
        description=(
            "Notes and products for signed-in users. Authentication by Firebase; "
            "records in Cloud Firestore or a SQL document table."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    owns_engine = config.store_backend == "sql" and session_factory is None
    app.state.owns_engine = owns_engine
    app.state.services = AppServices(
        config,
        http_client=http_client,
        session_factory=async_session_factory if owns_engine else session_factory,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition: RequestID → Logging → RateLimit
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=config.auth_rate_limit_requests,
        window_seconds=config.auth_rate_limit_window,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(home.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
