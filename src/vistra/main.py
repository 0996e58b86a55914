"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vistra import __version__
from vistra.api.router import api_router
from vistra.config import settings
from vistra.core.auth import RequestIdMiddleware, SessionContextMiddleware
from vistra.core.database import async_engine
from vistra.core.errors import register_exception_handlers
from vistra.core.logging import RequestLoggingMiddleware, configure_logging


logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Handles startup and shutdown events.
    """
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        environment=settings.environment,
    )

    yield

    logger.info("application_shutdown")
    await async_engine.dispose()
    logger.info("database_engine_disposed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.is_production,
    )

    app = FastAPI(
        title=settings.app_name,
        description="Admin console backend with role-based access control",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
        # Disable docs in production
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
    )

    cors_origins = settings.cors_origins
    if settings.is_development and not cors_origins:
        cors_origins = ["http://localhost:3000", "http://localhost:5173"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )

    # Middleware added last runs first: request ID, then session, then logging
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SessionContextMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # Register exception handlers for RFC 7807 error responses
    register_exception_handlers(app)

    app.include_router(api_router)

    return app


app = create_app()
