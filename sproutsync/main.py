# 📄 File: sproutsync/main.py
#
# 🧭 Purpose (Layman Explanation):
# The front door of SproutSync. It starts the web server, connects to the database, and
# makes sure every request is logged and every error comes back in the same friendly shape.
#
# 🧪 Purpose (Technical Summary):
# FastAPI application factory: lifespan (logging, database engine, session factory),
# middleware (request logging, CORS, GZip), slowapi limiter registration, global exception
# handlers producing the {"success": false, "error": {...}} envelope, the /api router and
# the root endpoint.
#
# 🔗 Dependencies:
# - FastAPI, starlette, uvicorn, slowapi
# - sproutsync.shared (settings, exceptions, logging, database)
# - sproutsync.api (router, middleware)
#
# 🔄 Connected Modules / Calls From:
# - uvicorn server startup (sproutsync.main:app)
# - tests/conftest.py

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from sproutsync.api.middleware.logging import RequestLoggingMiddleware
from sproutsync.api.v1.router import api_v1_router
from sproutsync.shared.config.settings import get_settings
from sproutsync.shared.core.exceptions import SproutSyncException
from sproutsync.shared.core.rate_limiter import limiter
from sproutsync.shared.infrastructure.database.connection import close_database, init_database
from sproutsync.shared.infrastructure.database.session import initialize_sessions, session_manager
from sproutsync.shared.utils.logging import log_shutdown_event, log_startup_event, setup_logging

# Get application settings
settings = get_settings()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Starts logging and the database layer, and disposes of the engine on shutdown.
    """
    setup_logging()
    log_startup_event(settings.APP_NAME, settings.APP_VERSION, {"environment": settings.ENVIRONMENT})

    try:
        await init_database()
        logger.info("✅ Database connection initialized")

        await initialize_sessions()
        logger.info("✅ Session manager initialized")
    except Exception as e:
        logger.error(f"❌ Startup failed: {e}")
        raise

    try:
        yield
    finally:
        await close_database()
        session_manager.reset()
        logger.info("✅ Database connections closed")
        log_shutdown_event(settings.APP_NAME)


# =========================================================================
# ERROR ENVELOPE
# =========================================================================

def _error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: Any = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {
                "code": code,
                "message": message,
                "details": details if details is not None else {},
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "request_id": getattr(request.state, "request_id", None),
            },
        },
    )


def _validation_details(exc: RequestValidationError) -> List[Dict[str, str]]:
    """Flatten pydantic errors into ``{field, message, code}`` entries."""
    details = []
    for error in exc.errors():
        location = list(error.get("loc", ()))
        if location and location[0] in ("body", "query", "path", "header", "cookie"):
            location = location[1:]
        details.append({
            "field": ".".join(str(part) for part in location) or "body",
            "message": error.get("msg", "Invalid value"),
            "code": error.get("type", "value_error"),
        })
    return details


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the global exception handlers."""

    @app.exception_handler(SproutSyncException)
    async def sproutsync_exception_handler(request: Request, exc: SproutSyncException) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"❌ {exc.error_code}: {exc.message}")
        return _error_response(request, exc.status_code, exc.error_code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(request, 400, "VALIDATION_ERROR", "Validation error", _validation_details(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return _error_response(request, 404, "NOT_FOUND", "Route not found", {"path": request.url.path})
        return _error_response(request, exc.status_code, "HTTP_ERROR", str(exc.detail))

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        logger.warning(f"🚦 Rate limit exceeded for {request.url.path}: {exc.detail}")
        return _error_response(
            request,
            429,
            "RATE_LIMIT_EXCEEDED",
            "Too many requests, please try again later",
            {"limit": str(exc.detail)},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"💥 Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
        message: Optional[str] = str(exc) if settings.is_development else None
        return _error_response(
            request,
            500,
            "INTERNAL_SERVER_ERROR",
            message or "An internal server error occurred",
            {"error_type": type(exc).__name__} if settings.is_development else {},
        )


def create_application() -> FastAPI:
    """
    Application factory function.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # =========================================================================
    # MIDDLEWARE CONFIGURATION
    # =========================================================================

    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    # Outermost so every response carries a request id
    app.add_middleware(RequestLoggingMiddleware)

    # Rate limiting (slowapi reads the limiter from app.state)
    app.state.limiter = limiter

    register_exception_handlers(app)

    # =========================================================================
    # ROUTER REGISTRATION
    # =========================================================================

    app.include_router(api_v1_router, prefix="/api")

    # =========================================================================
    # ROOT ENDPOINTS
    # =========================================================================

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        """Root endpoint with API information."""
        return {
            "message": f"{settings.APP_NAME} is running",
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        return Response(status_code=204)

    return app


# Create the FastAPI application
app = create_application()


def main():
    """Run the development server (``python -m sproutsync.main``)."""
    uvicorn.run(
        "sproutsync.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD and settings.is_development,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
