"""
SongCatalog Backend: FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
Why:   Keeps middleware registration, route mounting, error mapping and
       lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn songcatalog.main:app, or `songcatalog`).
When:  Once at server startup; the returned app handles all requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────┐ ┌──────┐ ┌────────┐      │
    │  │ Req ID   │→│ Logging │→│ GZip │→│  CORS  │      │
    │  └──────────┘ └─────────┘ └──────┘ └────────┘      │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────┐ ┌───────┐ ┌────────────┐ │
    │  │ /songs, /songs/{id}… │ │ /info │ │ GET /health│ │
    │  └──────────────────────┘ └───────┘ └────────────┘ │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐  │
    │  │ Validation→400 │ NotFound→404 │ Storage→500  │  │
    │  └──────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Apply pending schema migrations (when AUTO_MIGRATE is on)
    3. Log startup complete

    Shutdown:
    1. Dispose database engine (close all connections)
    2. Log shutdown complete
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from songcatalog import __version__
from songcatalog.config import settings
from songcatalog.database import dispose_engine
from songcatalog.exceptions import (
    NotFoundError,
    SongCatalogError,
    StorageError,
    ValidationError,
)
from songcatalog.middleware.logging import RequestLoggingMiddleware
from songcatalog.middleware.request_id import RequestIDMiddleware, request_id_var
from songcatalog.migrations import run_migrations
from songcatalog.routes import health, songs

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Loggers in use:
        - songcatalog.access:     one line per request (middleware)
        - songcatalog.repository: storage operations and failures
        - songcatalog.service:    verse paging details (DEBUG)
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("alembic").setLevel(logging.INFO)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Manage application lifecycle.

    Migrations run in a worker thread: alembic's env.py drives its own
    event loop through asyncio.run(), which cannot nest inside this one.
    A failed migration is logged and the server keeps starting, so /health
    can still report the database state.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("SongCatalog Backend %s starting up...", __version__)

    if settings.auto_migrate:
        try:
            applied = await asyncio.to_thread(run_migrations, str(settings.alembic_ini))
            if applied:
                logger.info("Database schema is up to date")
        except Exception as e:
            logger.error("Schema migration failed: %s", str(e), exc_info=True)
    else:
        logger.info("AUTO_MIGRATE disabled; skipping schema migrations")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("SongCatalog Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    """
    The id RequestIDMiddleware assigned to this request.

    Read from request.state first: the catch-all handler runs in Starlette's
    outermost middleware, after the ContextVar has been reset.
    """
    return getattr(request.state, "request_id", None) or request_id_var.get("")


def _error(request: Request, status_code: int, message: str) -> JSONResponse:
    rid = _request_id(request)
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "request_id": rid},
        headers={"X-Request-ID": rid} if rid else None,
    )


def format_validation_errors(exc: RequestValidationError) -> str:
    """Flatten FastAPI's error list into one readable line."""
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{location}: {err.get('msg', 'invalid value')}" if location else err.get("msg", ""))
    return "; ".join(parts) or "invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes.

    Handler hierarchy:
        ValidationError          → 400 Bad Request
        RequestValidationError   → 400 Bad Request (bad query/path/body)
        NotFoundError            → 404 Not Found
        StorageError             → 500 Internal Server Error
        SongCatalogError (base)  → 500 Internal Server Error
        HTTPException            → its own status (unknown route, bad method)
        Exception (fallback)     → 500 Internal Server Error

    Every error body is {"error": <message>, "request_id": <id>}. Storage
    failures return the operation and driver message with no retry; only
    truly unexpected exceptions get a generic message.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", _request_id(request), exc.message)
        return _error(request, 400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        message = format_validation_errors(exc)
        logger.warning("[%s] Invalid request: %s", _request_id(request), message)
        return _error(request, 400, message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error(request, 404, exc.message)

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error(
            "[%s] Storage error: %s | Context: %s", _request_id(request), exc.message, exc.context
        )
        return _error(request, 500, exc.message)

    @app.exception_handler(SongCatalogError)
    async def handle_catalog_error(request: Request, exc: SongCatalogError):
        logger.error("[%s] %s | Context: %s", _request_id(request), exc.message, exc.context)
        return _error(request, 500, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail), "request_id": _request_id(request)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", _request_id(request), str(exc), exc_info=True)
        return _error(request, 500, "an unexpected error occurred")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="SongCatalog API",
        description=(
            "Music library catalog: add songs, list them with filters and "
            "pagination, read lyrics verse by verse, update and delete entries."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(songs.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
