"""FastAPI application factory and configuration.

This module provides the application factory function for creating
and configuring the FastAPI application with all middleware, routes,
and lifecycle handlers.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from authgate.core.config import Settings, get_settings
from authgate.core.errors import AuthError, ErrorKind, ExternalServiceError
from authgate.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
    new_correlation_id,
)
from authgate.infrastructure.auth.jwt_service import JWTService
from authgate.infrastructure.persistence.database import DatabaseManager
from authgate.infrastructure.services.otp_mailer import OTPMailer
from authgate.infrastructure.services.server_token_provider import ServerAdminTokenProvider

logger = get_logger(__name__)

ALLOWED_METHODS = frozenset({"GET", "POST", "DELETE", "PUT", "PATCH", "HEAD"})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events for the application.

    Args:
        app: FastAPI application instance.

    Yields:
        None: Control is yielded to the application during its lifetime.
    """
    settings: Settings = app.state.settings
    db: DatabaseManager = app.state.db

    logger.info(
        "Starting AuthGate",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    try:
        await db.init()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    yield

    logger.info("Shutting down AuthGate")
    await db.disconnect()
    logger.info("Database connection closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings for this application. Loaded from the environment
            when omitted. They are kept on ``app.state.settings`` and never
            modified afterwards.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="One-time-passcode authentication gateway",
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    jwt_service = JWTService(settings.jwt_access_key, settings.jwt_refresh_key)
    app.state.settings = settings
    app.state.db = DatabaseManager(settings)
    app.state.jwt_service = jwt_service
    app.state.server_token_provider = ServerAdminTokenProvider(
        jwt_service, settings.server_admin_key
    )
    app.state.otp_mailer = OTPMailer.from_settings(settings)

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
        """Basic liveness check; does not touch the database."""
        settings: Settings = request.app.state.settings
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
        }

    @app.get("/ready", tags=["health"])
    async def readiness_check(request: Request):
        """Readiness check including database connectivity."""
        settings: Settings = request.app.state.settings
        db: DatabaseManager = request.app.state.db

        if await db.check_connection():
            return {
                "status": "ready",
                "service": settings.app_name,
                "version": settings.app_version,
                "database": "connected",
            }
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "service": settings.app_name,
                "database": "disconnected",
            },
        )


def register_routes(app: FastAPI) -> None:
    """Register API routes.

    Args:
        app: FastAPI application instance.
    """
    from authgate.infrastructure.api.routes import auth_router

    app.include_router(auth_router, prefix="/auth", tags=["auth"])


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    Every error response has the body ``{"error": <message>}``.

    Args:
        app: FastAPI application instance.
    """

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        if isinstance(exc, ExternalServiceError):
            logger.error(
                "External service failure",
                path=request.url.path,
                service=exc.service,
                error=exc.detail,
            )
        else:
            logger.info(
                "Request rejected",
                path=request.url.path,
                kind=exc.kind.name,
                status_code=exc.status_code,
            )
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info("Request body rejected", path=request.url.path, error_count=len(exc.errors()))
        return _error_response(
            ErrorKind.BAD_REQUEST.status_code, ErrorKind.BAD_REQUEST.default_message
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return _error_response(404, "Not Found")
        if exc.status_code == 405:
            return _error_response(405, "Method Not Allowed")
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(
            "Unhandled exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
            exc_type=type(exc).__name__,
        )
        return _error_response(
            ErrorKind.SERVER_ERROR.status_code, ErrorKind.SERVER_ERROR.default_message
        )


def register_middleware(app: FastAPI) -> None:
    """Register custom middleware.

    Args:
        app: FastAPI application instance.
    """

    @app.middleware("http")
    async def method_gate_middleware(request: Request, call_next):
        """Reject HTTP methods the API never serves."""
        if request.method not in ALLOWED_METHODS:
            return _error_response(405, "Method Not Allowed")
        return await call_next(request)

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Middleware to log all requests and add correlation ID."""
        correlation_id = request.headers.get("X-Correlation-ID") or new_correlation_id()
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

    # Outermost, so browser preflight requests are answered before the method gate
    settings: Settings = app.state.settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.webpage_origin],
        allow_credentials=True,
        allow_methods=sorted(ALLOWED_METHODS),
        allow_headers=["Content-Type", "X-APPLICATION-KEY", "X-Correlation-ID"],
    )
