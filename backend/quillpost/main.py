"""
Quillpost Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn quillpost.main:app).
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌────────┐ ┌──────────┐  │
    │  │  Req ID  │→│ Logging  │→│ Tenant │→│GZip/CORS │  │
    │  └──────────┘ └──────────┘ └────────┘ └──────────┘  │
    │                                                     │
    │  Guards (app-wide dependency, per-route policy):    │
    │  ┌───────────────┐ ┌───────────┐ ┌──────────────┐   │
    │  │Authentication │→│   Roles   │→│ Feature flag │   │
    │  └───────────────┘ └───────────┘ └──────────────┘   │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Rejection→400/401/403 │ NotFound→404 │ →500  │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, not fatal)
    Shutdown:
    1. Log shutdown complete
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from quillpost import __version__
from quillpost.config import Settings, settings
from quillpost.context import request_id_var
from quillpost.exceptions import (
    AuthenticationError,
    NotFoundError,
    PipelineRejection,
    ValidationError,
)
from quillpost.middleware.logging import RequestLoggingMiddleware
from quillpost.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware
from quillpost.middleware.tenant import TenantContextMiddleware
from quillpost.pipeline import enforce_endpoint_policy
from quillpost.routes import account, articles, health, insights
from quillpost.services.token_service import JWTCredentialValidator

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    When:    Called once during app startup (before ANY other initialization).
    Format:  %(asctime)s [%(levelname)s] %(name)s: %(message)s
             Access records also carry request_id/method/path/status/duration_ms
             as `extra` attributes for structured handlers.
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,  # Override any existing logging config
    )

    # Our own access log replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("Quillpost Backend starting up...")

    try:
        config.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")
        # Keep serving: health checks and public routes still work

    if config.default_tenant_id:
        logger.info("Default tenant: %s", config.default_tenant_id)

    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield  # Application runs here

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Quillpost Backend shutting down...")
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        PipelineRejection  → its own status (400 tenant, 401 auth, 403 roles/feature)
        ValidationError    → 400 Bad Request
        NotFoundError      → 404 Not Found
        Exception          → 500 Internal Server Error (catch-all)

    Security: Exception handlers NEVER expose internal details (stack traces,
    token contents) in the API response. Details are logged server-side.
    """

    @app.exception_handler(PipelineRejection)
    async def handle_rejection(request: Request, exc: PipelineRejection):
        """A guard refused the request; the body says which requirement failed."""
        logger.info("[%s] Request rejected: %s %s", exc.request_id, exc.code.value, exc.message)
        headers = {}
        if isinstance(exc, AuthenticationError):
            headers["WWW-Authenticate"] = "Bearer"
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_payload(),
            headers=headers,
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        """Client sent invalid input; tell them what's wrong and how to fix it."""
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        """Requested resource doesn't exist (or belongs to another tenant)."""
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Catch-all for truly unexpected errors.

        Security: Stack trace is logged server-side ONLY (never in response).
        """
        # Served by the outermost error middleware, so RequestIDMiddleware
        # never sees this response; copy its header here
        rid = getattr(request.state, "request_id", None) or request_id_var.get("")
        logger.error(
            "[%s] Unexpected error: %s",
            rid,
            str(exc),
            exc_info=True,  # Log full stack trace for debugging
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
            headers={REQUEST_ID_HEADER: rid} if rid else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(config: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Settings to build the app with. Defaults to the module-level
                `settings` singleton; tests pass their own (e.g. a default tenant).
    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    config = config or settings

    app = FastAPI(
        title="Quillpost API",
        description=(
            "Multi-tenant blog/CMS API. Every request is stamped with a correlation id, "
            "logged with sensitive fields redacted, resolved to a tenant, and checked "
            "against the route's authentication, role and feature-flag policy."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        # Guards run for every API route, before route-level dependencies
        dependencies=[Depends(enforce_endpoint_policy)],
    )

    app.state.settings = config
    app.state.credential_validator = JWTCredentialValidator(
        secret_key=config.jwt_secret_key,
        algorithm=config.jwt_algorithm,
        leeway=config.jwt_leeway_seconds,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Order matters! Middleware executes in REVERSE order of addition.
    # Added: CORS → GZip → Tenant → Logging → RequestID
    # Runs:  RequestID → Logging → Tenant → GZip → CORS

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[             # Headers the browser can read from response
            "X-Request-ID",
            "X-Tenant-ID",
        ],
    )

    # Why minimum_size=500: Don't compress small responses (overhead > savings)
    app.add_middleware(GZipMiddleware, minimum_size=500)

    # Tenant resolution: header > subdomain > default
    app.add_middleware(TenantContextMiddleware, default_tenant_id=config.default_tenant_id)

    # Request logging: start/body/completion records
    app.add_middleware(RequestLoggingMiddleware)

    # Request ID: opens the per-request context (first to execute = last added)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(articles.router)
    app.include_router(account.router)
    app.include_router(insights.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `quillpost.main:app` to be importable
app = create_app()
