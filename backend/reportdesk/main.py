"""
ReportDesk Backend — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires settings, middleware, exception handlers, routers
       and (optionally) the static frontend into one app.
Who:   uvicorn (`uvicorn reportdesk.main:app`) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware: RequestID → Logging → AuthRateLimit         │
    │              → SecurityHeaders → CORS → GZip             │
    │                                                          │
    │  Routers:  /api/auth  /api/reports  /api/admin           │
    │            /api/content  /health                         │
    │                                                          │
    │  Errors:   ReportDeskError → its status + JSON envelope  │
    │            body validation → 400, anything else → 500    │
    └──────────────────────────────────────────────────────────┘

Error envelope (every non-2xx response):
    {"error": "<message>", "code": "<machine code>", "request_id": "<id>"}
    plus "details" when ENVIRONMENT=development.
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from reportdesk import __version__
from reportdesk.config import settings
from reportdesk.database import dispose_engine
from reportdesk.exceptions import RateLimitExceededError, ReportDeskError, UnauthorizedError
from reportdesk.middleware.logging import RequestLoggingMiddleware
from reportdesk.middleware.rate_limit import AuthRateLimitMiddleware
from reportdesk.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from reportdesk.middleware.security_headers import SecurityHeadersMiddleware
from reportdesk.routes import admin, auth, content, health, reports

logger = logging.getLogger(__name__)

HTTP_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    413: "payload_too_large",
    429: "rate_limit_exceeded",
}


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] reportdesk.access: GET /api/reports 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our own access logger replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("ReportDesk Backend %s starting (%s)", __version__, settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving /health so the misconfiguration is visible, not a crash loop
        logger.error("Configuration error: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("ReportDesk Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    status_code: int,
    message: str,
    code: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Render the standard error envelope."""
    content: Dict[str, Any] = {
        "error": message,
        "code": code,
        "request_id": request_id_var.get("") or None,
    }
    if details and settings.is_development:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    # loc is ("body", "username") / ("query", "limit") / ("body",)
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    if first.get("type") == "missing" and field:
        return f"Field '{field}' is required"
    if field:
        return f"Invalid value for '{field}': {first.get('msg', 'invalid')}"
    return first.get("msg", "Invalid request body")


def register_exception_handlers(app: FastAPI) -> None:
    """
    Handler hierarchy:
        ReportDeskError           → exc.status_code (400/401/403/404/409/429/500)
        RequestValidationError    → 400 (missing/ill-typed body or query fields)
        StarletteHTTPException    → its status (unknown route 404, 405, ...)
        Exception (fallback)      → 500, stack trace logged, never returned
    """

    @app.exception_handler(ReportDeskError)
    async def handle_reportdesk_error(request: Request, exc: ReportDeskError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
            message = "An internal error occurred. Please try again later."
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
            message = exc.message

        headers = None
        if isinstance(exc, UnauthorizedError):
            headers = {"WWW-Authenticate": "Bearer"}
        elif isinstance(exc, RateLimitExceededError):
            headers = {"Retry-After": str(exc.retry_after)}

        details = dict(exc.context)
        if exc.status_code >= 500:
            details["message"] = exc.message
        return error_response(exc.status_code, message, exc.code, details=details, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = _describe_validation_error(exc)
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), message)
        fields = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return error_response(400, message, "validation_error", details={"fields": fields})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            message = "Route not found"
        else:
            message = str(exc.detail)
        code = HTTP_CODES.get(exc.status_code, "http_error")
        return error_response(exc.status_code, message, code, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return error_response(
            500,
            "An unexpected error occurred. Please try again or contact support.",
            "server_error",
            details={"exception": type(exc).__name__, "message": str(exc)},
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="ReportDesk API",
        description=(
            "Server issue reporting with role-based access, admin user management "
            "and a versioned page-content store."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in reverse order of addition (last added runs first)
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        # Credentialed CORS is invalid with a wildcard origin
        allow_credentials="*" not in settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, "Retry-After"],
    )
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.environment == "production")
    app.add_middleware(AuthRateLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(reports.router)
    app.include_router(admin.router)
    app.include_router(content.router)
    app.include_router(health.router)

    # The browser frontend is served from the same origin, after the API routes
    if settings.frontend_dir:
        frontend = Path(settings.frontend_dir)
        if frontend.is_dir():
            app.mount("/", StaticFiles(directory=frontend, html=True), name="frontend")
            logger.info("Serving frontend from %s", frontend.resolve())
        else:
            logger.warning("FRONTEND_DIR %s does not exist; frontend not mounted", frontend)

    return app


app = create_app()
