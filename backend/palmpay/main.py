"""
PalmPay Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn palmpay.main:app).
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Logging → GZip → CORS         │
    │                                                          │
    │  Routers:                                                │
    │    catalog · orders · devices       (/api/...)           │
    │    users · palm · audit             (/api/v1/...)        │
    │    health                           (/health)            │
    │                                                          │
    │  Exception Handlers:                                     │
    │    PalmPayError → its status_code/code                   │
    │    RequestValidationError → 400                          │
    │    Exception → 500                                       │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration
    3. Start the enrollment-token sweeper task

    Shutdown:
    1. Cancel the sweeper
    2. Dispose database engine (close all connections)
"""

import asyncio
import contextlib
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from palmpay import __version__
from palmpay.config import settings
from palmpay.database import dispose_engine
from palmpay.enrollment import enrollment_cache, run_sweeper
from palmpay.exceptions import PalmPayError
from palmpay.middleware.logging import RequestLoggingMiddleware
from palmpay.middleware.request_id import RequestIDMiddleware, request_id_var
from palmpay.routes import audit, catalog, devices, health, orders, palm, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output goes to stdout, which the container runtime captures.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request noise; our own access log replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("PalmPay Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving so /health can report the problem
        logger.error("Configuration error: %s", str(e))

    sweeper = asyncio.create_task(
        run_sweeper(enrollment_cache, settings.enrollment_sweep_interval),
        name="enrollment-sweeper",
    )

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("PalmPay Backend shutting down...")
    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper

    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(message: str, code: str, rid: str) -> dict:
    return {"error": message, "code": code, "request_id": rid}


def describe_validation_error(exc: RequestValidationError) -> str:
    """First pydantic error as '<field>: <msg>' (or just '<msg>' for a bad body)."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path", "header")]
    msg = first.get("msg", "Invalid value")
    return f"{loc[-1]}: {msg}" if loc else msg


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        PalmPayError subclasses → exc.status_code with exc.code
        RequestValidationError  → 400 validation_error
        Exception (fallback)    → 500 server_error

    Internal details (stack traces, SQL) are logged, never returned.
    """

    @app.exception_handler(PalmPayError)
    async def handle_palmpay_error(request: Request, exc: PalmPayError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s | Context: %s", rid, exc.message, exc.context)
        else:
            logger.info("[%s] %s: %s", rid, exc.code, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.code, rid),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        message = describe_validation_error(exc)
        logger.info("[%s] Request validation failed: %s", rid, message)
        return JSONResponse(
            status_code=400,
            content=error_body(message, "validation_error", rid),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body("Internal server error", "server_error", rid),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="PalmPay API",
        description=(
            "Backend for palm-vein payment kiosks: product catalog, orders routed "
            "to kiosks, device registration with bearer tokens, palm templates "
            "and enrollment QR tokens."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added executes first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
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
    app.include_router(catalog.router)
    app.include_router(orders.router)
    app.include_router(devices.router)
    app.include_router(users.router)
    app.include_router(palm.router)
    app.include_router(audit.router)
    app.include_router(health.router)

    return app


app = create_app()
