"""
PlaceShare Backend: FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   `create_app(settings)` builds the process-wide resources, registers
       middleware, exception handlers and routers, and returns the app.
Who:   uvicorn (`uvicorn placeshare.main:app`) and the test suite, which
       passes its own Settings.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  app.state:                                              │
    │    settings · database · file_service · cleaner          │
    │    geocoder · guard · writer                             │
    │                                                          │
    │  Middleware:  Request ID → Logging → GZip → CORS         │
    │                                                          │
    │  Routes:  /api/places · /api/users · /uploads · /health  │
    │                                                          │
    │  Exception Handlers:                                     │
    │    PlaceShareError → its status_code                     │
    │    RequestValidationError → 422                          │
    │    HTTP 404 → "Could not find this route."               │
    │    Exception → 500                                       │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:   logging, configuration check (logged, never fatal), storage dir
    Shutdown:  wait for pending image cleanups, dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from placeshare import __version__
from placeshare.config import Settings
from placeshare.config import settings as default_settings
from placeshare.database import Database
from placeshare.exceptions import InternalError, PlaceShareError
from placeshare.middleware.logging import RequestLoggingMiddleware
from placeshare.middleware.request_id import RequestIDMiddleware, request_id_var
from placeshare.routes import health, places, uploads, users
from placeshare.services.file_service import FileService
from placeshare.services.geocoding import build_geocoder
from placeshare.services.ownership import OwnershipGuard
from placeshare.services.place_writer import PlaceWriter
from placeshare.services.resource_cleaner import ResourceCleaner

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str) -> None:
    """
    Configure the root logger once at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every operation
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("PlaceShare Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Development defaults are allowed; the warning stays in the log
        logger.warning("%s", str(e))

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Storage directory: %s", storage.resolve())
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("PlaceShare Backend shutting down...")
    cleaner: ResourceCleaner = app.state.cleaner
    if cleaner.pending:
        logger.info("Waiting for %d pending image cleanups", cleaner.pending)
    await cleaner.drain()
    await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def _error_response(request: Request, status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, "request_id": _request_id(request)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Every error leaves the API as `{error, message, request_id}`.

        PlaceShareError subclasses  → exc.status_code, exc.message
        RequestValidationError      → 422
        HTTP 404 (unknown route)    → 404 "Could not find this route."
        Exception                   → 500, stack trace logged only
    """

    @app.exception_handler(PlaceShareError)
    async def handle_placeshare_error(request: Request, exc: PlaceShareError):
        rid = _request_id(request)
        if isinstance(exc, InternalError):
            # Context holds driver and filesystem detail; log it, never return it
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return _error_response(request, exc.status_code, exc.error_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        logger.warning("[%s] Request validation failed: %s", _request_id(request), exc.errors())
        return _error_response(
            request, 422, "validation_error", "Invalid inputs passed, please check your data."
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return _error_response(request, 404, "not_found", "Could not find this route.")
        return _error_response(request, exc.status_code, "http_error", str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", _request_id(request), str(exc), exc_info=True)
        return _error_response(
            request, 500, "internal_server_error", "An unknown error occurred!"
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Assemble the application.

    Args:
        settings: Explicit configuration; defaults to the environment-loaded
                  singleton.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="PlaceShare API",
        description=(
            "Share places with the world: create, browse, edit and delete "
            "geocoded places with a photo."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Process-wide resources ────────────────────────────────────────────
    database = Database(settings)
    file_service = FileService(settings.storage_root, settings.max_file_size)

    app.state.settings = settings
    app.state.database = database
    app.state.file_service = file_service
    app.state.cleaner = ResourceCleaner(file_service)
    app.state.geocoder = build_geocoder(settings)
    app.state.writer = PlaceWriter(database, OwnershipGuard(), settings.db_transaction_timeout)

    # ── Middleware ────────────────────────────────────────────────────────
    # Executes in reverse order of addition: Request ID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(places.router)
    app.include_router(users.router)
    app.include_router(uploads.router)
    app.include_router(health.router)

    return app


app = create_app()
