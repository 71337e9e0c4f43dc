"""
Userbase Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes composition, middleware registration, route mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app(settings) builds the object graph
       (engine → session factory → UserService), stores it on app.state,
       and returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn app.main:app`), the `userbase` console script, tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────┐ ┌──────┐ ┌──────┐         │
    │  │ Req ID   │→│ Logging │→│ GZip │→│ CORS │         │
    │  └──────────┘ └─────────┘ └──────┘ └──────┘         │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────────┐ ┌─────────────────┐   │
    │  │ GET/POST/PUT/DELETE      │ │ GET /health     │   │
    │  │   {API_PREFIX}/users     │ │                 │   │
    │  └──────────────────────────┘ └─────────────────┘   │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation→400 │ NotFound→404 │ Conflict→409       │
    │  BackendUnavailable→503 │ Database→500              │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → profile checks → schema mode
    Shutdown: drop schema (create-drop only) → dispose engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import Settings, settings as default_settings
from app.database import apply_schema_mode, build_engine, build_session_factory, drop_schema
from app.exceptions import (
    BackendUnavailableError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    UserbaseError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from app.routes import health, users
from app.services.user_service import UserService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure root logging for the whole process.

    When:    Called once during app startup, before anything else logs.
    Format:  %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # uvicorn's access log duplicates RequestLoggingMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    # DB_ECHO turns statement logging on; otherwise keep SQLAlchemy quiet
    if not settings.db_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Check profile-specific settings (logged, not fatal)
        3. Apply DB_SCHEMA_MODE

    Shutdown:
        1. Drop the schema if DB_SCHEMA_MODE=create-drop
        2. Dispose the engine (close all pooled connections)
    """
    settings: Settings = app.state.settings
    engine = app.state.engine

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings)
    logger.info("Userbase %s starting (profile=%s)", __version__, settings.app_profile)

    try:
        settings.validate_for_profile()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    await apply_schema_mode(engine, settings.db_schema_mode)

    logger.info(
        "Serving %s/users on http://%s:%d",
        settings.api_prefix,
        settings.server_host,
        settings.server_port,
    )

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Userbase shutting down...")
    if settings.db_schema_mode == "create-drop":
        await drop_schema(engine)
    await engine.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
) -> JSONResponse:
    content = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception hierarchy to HTTP responses.

    Handler hierarchy:
        ValidationError         → 400 Bad Request
        NotFoundError           → 404 Not Found
        ConflictError           → 409 Conflict
        BackendUnavailableError → 503 Service Unavailable
        DatabaseError           → 500 Internal Server Error
        UserbaseError (base)    → 500 Internal Server Error
        Exception (fallback)    → 500 Internal Server Error

    Security: database handlers never echo driver messages; the context is
    logged server-side only.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message, exc.context)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        logger.warning("[%s] Conflict: %s", request_id_var.get(""), exc.message)
        # resource ids are safe to return; IntegrityError context is not
        details = {k: v for k, v in exc.context.items() if k.startswith("resource")}
        return _error_response(409, "conflict", exc.message, details)

    @app.exception_handler(BackendUnavailableError)
    async def handle_backend_unavailable(request: Request, exc: BackendUnavailableError):
        logger.error(
            "[%s] Backend unavailable: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _error_response(503, "backend_unavailable", exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return _error_response(
            500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(UserbaseError)
    async def handle_userbase_error(request: Request, exc: UserbaseError):
        logger.error("[%s] %s: %s", request_id_var.get(""), type(exc).__name__, exc.message)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all; the stack trace is logged, never returned."""
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        response = _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )
        # ServerErrorMiddleware sits outside RequestIDMiddleware
        response.headers[REQUEST_ID_HEADER] = request_id_var.get("")
        return response


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Overrides the module-level settings (tests pass their own
                  database URL here).

    Returns:
        A FastAPI instance whose app.state holds settings, engine,
        session_factory and user_service.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Userbase API",
        description="Layered CRUD service for user records.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Composition ───────────────────────────────────────────────────────
    engine = build_engine(settings)
    session_factory = build_session_factory(engine)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.user_service = UserService(session_factory)

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in REVERSE order of addition: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        # Browsers reject credentialed responses for a wildcard origin
        allow_credentials=not settings.cors_allows_any_origin,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(users.router, prefix=settings.api_prefix)
    app.include_router(health.router)

    return app


def run() -> None:
    """Console entry point: serve the module-level app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=default_settings.server_host,
        port=default_settings.server_port,
        log_config=None,  # setup_logging() owns the handlers
    )


# uvicorn expects `app.main:app` to be importable
app = create_app()
