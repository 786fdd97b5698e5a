"""FastAPI application factory and configuration.

This module provides the application factory function for creating
and configuring the FastAPI application with all middleware, routes,
and lifecycle handlers.
"""

import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from xbs.core.config import Settings, get_settings
from xbs.core.context import AppContext
from xbs.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
)
from xbs.domain.exceptions import (
    BookmarksNotFoundError,
    NewSyncsForbiddenError,
    StorageError,
    SyncDataLimitExceededError,
    SyncError,
    VersionConflictError,
)
from xbs.infrastructure.api.schemas import ErrorResponse

logger = get_logger(__name__)

# HTTP status for each sync error; looked up along the exception's MRO.
ERROR_STATUS_CODES: dict[type[SyncError], int] = {
    BookmarksNotFoundError: status.HTTP_404_NOT_FOUND,
    VersionConflictError: status.HTTP_409_CONFLICT,
    NewSyncsForbiddenError: status.HTTP_405_METHOD_NOT_ALLOWED,
    SyncDataLimitExceededError: status.HTTP_413_CONTENT_TOO_LARGE,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Builds the AppContext on startup and closes it on shutdown.

    Args:
        app: FastAPI application instance.

    Yields:
        None: Control is yielded to the application during its lifetime.
    """
    settings: Settings = app.state.settings
    configure_logging(settings)

    logger.info(
        "Starting xbs",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    context = AppContext.build(settings)
    try:
        await context.start()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        await context.aclose()
        raise

    app.state.context = context

    yield

    logger.info("Shutting down xbs")
    app.state.context = None
    await context.aclose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to run with. Loaded from the environment if omitted.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="xBrowserSync-compatible bookmarks sync service",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.context = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["*"],
    )

    register_health_check(app)
    register_routes(app)
    register_exception_handlers(app)
    register_middleware(app)

    return app


def register_health_check(app: FastAPI) -> None:
    """Register health check endpoints.

    Args:
        app: FastAPI application instance.
    """

    @app.get("/health", tags=["health"])
    async def health_check(request: Request):
        """Basic health check endpoint.

        Returns 200 if the service is running. Does not check
        database connectivity.
        """
        return {
            "status": "healthy",
            "service": "xbs",
            "version": request.app.state.settings.app_version,
        }

    @app.get("/ready", tags=["health"])
    async def readiness_check(request: Request):
        """Readiness check endpoint, including database connectivity."""
        context: AppContext | None = request.app.state.context
        db_healthy = context is not None and await context.db.check_connection()

        if db_healthy:
            return {
                "status": "ready",
                "service": "xbs",
                "version": request.app.state.settings.app_version,
                "database": "connected",
            }
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "service": "xbs",
                "database": "disconnected",
            },
        )

    @app.get("/live", tags=["health"])
    async def liveness_check(request: Request):
        """Liveness check endpoint."""
        return {
            "status": "alive",
            "service": "xbs",
            "version": request.app.state.settings.app_version,
        }


def register_routes(app: FastAPI) -> None:
    """Register API routes.

    Args:
        app: FastAPI application instance.
    """
    from xbs.infrastructure.api.routes import bookmarks_router, info_router

    app.include_router(bookmarks_router, tags=["bookmarks"])
    app.include_router(info_router, tags=["info"])


def sync_error_status(exc: SyncError) -> int:
    """Return the HTTP status code for a sync error."""
    for exc_type in type(exc).__mro__:
        if exc_type in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[exc_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    Args:
        app: FastAPI application instance.
    """

    @app.exception_handler(SyncError)
    async def sync_error_handler(request: Request, exc: SyncError):
        """Render sync errors in the xBrowserSync error format."""
        status_code = sync_error_status(exc)
        body = ErrorResponse(
            code=exc.code,
            message=exc.message,
            current_version=getattr(exc, "current_version", None),
        )
        return JSONResponse(
            status_code=status_code,
            content=body.model_dump(by_alias=True, exclude_none=True),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(
            "Unhandled exception",
            path=str(request.url),
            method=request.method,
            error=str(exc),
            exc_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "code": "InternalServerException",
                "message": str(exc)
                if request.app.state.settings.debug
                else "An unexpected error occurred",
            },
        )


def register_middleware(app: FastAPI) -> None:
    """Register custom middleware.

    Args:
        app: FastAPI application instance.
    """

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Middleware to log all requests and add correlation ID."""
        correlation_id = request.headers.get("X-Correlation-ID", f"cid_{uuid.uuid4().hex[:12]}")
        bind_correlation_id(correlation_id)

        logger.info(
            "Request started",
            method=request.method,
            path=str(request.url.path),
        )

        try:
            response = await call_next(request)
            logger.info(
                "Request completed",
                method=request.method,
                path=str(request.url.path),
                status_code=response.status_code,
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_context()
