"""
MindPad Backend — FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn mindpad.main:app`) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────────┐
    │                        FastAPI App                           │
    │                                                              │
    │  Middleware Chain:                                           │
    │  ┌──────────┐ ┌───────────┐ ┌──────────────────────────┐     │
    │  │  Req ID  │→│  Logging  │→│  CORS (answers OPTIONS)  │     │
    │  └──────────┘ └───────────┘ └──────────────────────────┘     │
    │                                                              │
    │  Routes:                                                     │
    │  /api/notes…  /functions/ai-assistant  /realtime/notes       │
    │  /auth/user   /  /auth  /app           /health               │
    │                                                              │
    │  Exception Handlers:                                         │
    │  AssistantError → {"error"} │ Auth→401 │ NotFound→404 │ …    │
    └──────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, report missing secrets, log readiness.
    Shutdown: dispose the database engine.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from mindpad import __version__
from mindpad.config import settings
from mindpad.database import dispose_engine
from mindpad.exceptions import (
    AssistantError,
    AuthenticationError,
    DatabaseError,
    MindPadError,
    NotFoundError,
    ValidationError,
)
from mindpad.middleware.cors import PermissiveCORSMiddleware
from mindpad.middleware.logging import RequestLoggingMiddleware
from mindpad.middleware.request_id import RequestIDMiddleware, request_id_var
from mindpad.routes import assistant, auth, health, notes, pages, realtime

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once, before anything else logs.

    Format: 2024-01-15T12:00:00 [INFO] mindpad.services.note_service: ...
    Output goes to stdout so container runtimes capture it.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries log every connection and statement at INFO/DEBUG.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sse_starlette").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("MindPad Backend %s starting up...", __version__)

    # A missing secret is reported, not fatal: /health keeps answering and
    # the affected endpoints fail with their own errors.
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    logger.info("AI model: %s", settings.ai_model)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("MindPad Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_envelope(
    status_code: int,
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """The store API's error body: {error, message, [details], request_id}."""
    body: Dict[str, Any] = {"error": code, "message": message}
    if details:
        body["details"] = details
    body["request_id"] = request_id_var.get("")
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def unexpected_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Log an unhandled exception with its traceback and answer a generic 500."""
    logger.error("[%s] Unexpected %s: %s", request_id_var.get(""), type(exc).__name__, exc, exc_info=exc)
    return _error_envelope(500, "internal_server_error", "Something went wrong on our side.")


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP responses.

    Handler hierarchy:
        AssistantError       → its own status_code, body {"error": message}
        ValidationError      → 400
        AuthenticationError  → 401 + WWW-Authenticate: Bearer
        NotFoundError        → 404
        DatabaseError        → 500 (generic message; detail logged)
        MindPadError (base)  → 500
        Exception (fallback) → 500 (stack trace logged)

    Internal details never reach the response body.
    """

    @app.exception_handler(AssistantError)
    async def on_assistant_error(request: Request, exc: AssistantError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] AI proxy error: %s | Context: %s", rid, exc.message, exc.context)
        else:
            logger.warning("[%s] AI proxy refused: %s", rid, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(ValidationError)
    async def on_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Rejected input: %s", request_id_var.get(""), exc.message)
        return _error_envelope(400, "validation_error", exc.message, details=exc.context)

    @app.exception_handler(AuthenticationError)
    async def on_authentication_error(request: Request, exc: AuthenticationError):
        return _error_envelope(
            401, "unauthorized", exc.message, headers={"WWW-Authenticate": "Bearer"}
        )

    @app.exception_handler(NotFoundError)
    async def on_not_found(request: Request, exc: NotFoundError):
        return _error_envelope(404, "not_found", exc.message)

    @app.exception_handler(DatabaseError)
    async def on_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Store failure: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_envelope(500, "server_error", exc.message)

    @app.exception_handler(MindPadError)
    async def on_mindpad_error(request: Request, exc: MindPadError):
        logger.error("[%s] Unhandled MindPad error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_envelope(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def on_unexpected_error(request: Request, exc: Exception):
        return unexpected_error_response(request, exc)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Assemble middleware, exception handlers and routers into a new app."""
    app = FastAPI(
        title="MindPad API",
        description=(
            "Notes with an AI assistant: per-user note storage, a realtime change "
            "feed, and a proxy that summarizes, rewrites or brainstorms from a note "
            "through a hosted AI gateway."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Executed in reverse order of addition: RequestID → Logging → CORS.
    app.add_middleware(
        PermissiveCORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_headers=settings.cors_allow_headers,
        error_response=unexpected_error_response,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(notes.router)
    app.include_router(assistant.router)
    app.include_router(realtime.router)
    app.include_router(auth.router)
    app.include_router(pages.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
