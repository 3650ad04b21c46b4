"""
Main FastAPI Application

Entry point for the multi-vertical SaaS suite (hotel, brewery, restaurant,
beauty salon, retail store).
Configures middleware, routes, error handlers, and startup/shutdown events.

Every error body has the same shape:
    {"detail": "...", "type": "...", "correlation_id": "req_..."}
"""
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager

from saas_suite import __version__
from saas_suite.config import get_settings
from saas_suite.database import dispose_engine, init_db
from saas_suite.middleware.request_context import RequestContextMiddleware
from saas_suite.utils.logging import setup_logging, get_logger
from saas_suite.core.exceptions import TenantIsolationError

# Import routers
from saas_suite.api.endpoints import admin, auth, beauty, brewery, hotel, restaurant, store

settings = get_settings()

# Setup logging
setup_logging(
    log_level=settings.LOG_LEVEL,
    json_format=(settings.ENVIRONMENT == "production")
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events.
    """
    logger.info(f"Starting application in {settings.ENVIRONMENT} mode")

    # Initialize database tables (dev only - migrations own the schema elsewhere)
    if settings.ENVIRONMENT == "development":
        logger.warning("Initializing database tables (dev mode)")
        init_db()

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application")
    dispose_engine()
    logger.info("Application shutdown complete")


def _error_body(request: Request, detail, error_type: str) -> dict:
    return {
        "detail": detail,
        "type": error_type,
        "correlation_id": getattr(request.state, "correlation_id", None),
    }


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid input"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = first.get("msg", "Invalid input")
    return f"{location}: {message}" if location else message


# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================

async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Render every HTTPException (ours and FastAPI's) in the common error shape.

    Tenant isolation violations are logged at error level; they mean a code
    path tried to move data across tenants.
    """
    if isinstance(exc, TenantIsolationError):
        logger.error(
            f"TENANT ISOLATION VIOLATION: {exc.detail}",
            extra={
                "path": request.url.path,
                "method": request.method,
                "tenant_id": getattr(request.state, "tenant_id", None),
                "correlation_id": getattr(request.state, "correlation_id", None),
            }
        )

    content = _error_body(request, exc.detail, getattr(exc, "error_type", "http_error"))
    code = getattr(exc, "code", None)
    if code:
        content["code"] = code

    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None) or {}
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and query parameters are a 400, not FastAPI's default 422."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(request, _validation_message(exc), "validation_error"),
    )


async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all exception handler.

    SECURITY: Don't expose internal errors in production.
    Log full details but return generic error to client.
    """
    logger.error(
        f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
        exc_info=True,
        extra={
            "path": request.url.path,
            "method": request.method,
            "tenant_id": getattr(request.state, "tenant_id", None),
            "correlation_id": getattr(request.state, "correlation_id", None),
        }
    )

    detail = str(exc) if get_settings().DEBUG else "Internal server error"
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(request, detail, "internal_error"),
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="SaaS Suite",
        description="Multi-tenant business suite with per-request tenant scoping and RBAC",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    # ========================================================================
    # MIDDLEWARE CONFIGURATION
    # ========================================================================

    # SECURITY: Origins come from CORS_ORIGINS; never "*" with credentials
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-ID", "X-Process-Time", "X-Tenant-ID"],
    )

    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    # ========================================================================
    # ROUTES
    # ========================================================================

    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint for load balancers. Does not touch the database."""
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "version": __version__
        }

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "message": "SaaS Suite API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health"
        }

    # All API routes live under /api
    for module in (auth, hotel, brewery, restaurant, beauty, store, admin):
        app.include_router(module.router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info("=" * 80)
    logger.info("SaaS Suite")
    logger.info("=" * 80)
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug: {settings.DEBUG}")
    logger.info(f"Database: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else 'configured'}")
    logger.info("=" * 80)

    uvicorn.run(
        "saas_suite.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
