"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from idl_sentinel.config import Settings, get_settings
from idl_sentinel.container import Container
from idl_sentinel.infrastructure.database import (
    close_db,
    get_engine,
    get_session_factory,
    init_db,
)
from idl_sentinel.infrastructure.middleware import (
    RequestContextMiddleware,
    error_handler_middleware,
)
from idl_sentinel.infrastructure.telemetry import configure_logging, get_logger
from idl_sentinel.infrastructure.telemetry.metrics import set_service_info
from idl_sentinel.infrastructure.telemetry.tracing import (
    configure_tracing,
    instrument_fastapi,
    instrument_httpx,
    instrument_sqlalchemy,
    shutdown_tracing,
)
from idl_sentinel.presentation.http import api_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings: Settings = app.state.settings

    # Startup
    logger.info(
        "Starting IDL Sentinel",
        extra={
            "version": settings.version,
            "environment": settings.environment,
            "channels": settings.enabled_channels,
        },
    )

    await init_db(settings)
    if settings.otel_enabled:
        instrument_sqlalchemy(get_engine(settings).sync_engine)
    logger.info("Database connection initialized")

    container = Container.build(settings, get_session_factory(settings))
    app.state.container = container

    yield

    # Shutdown
    logger.info("Shutting down IDL Sentinel")
    await container.aclose()
    await close_db()
    shutdown_tracing()
    logger.info("Database connection closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override for testing

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()

    configure_logging(
        level=settings.log_level,
        format_type=settings.log_format,
        service_name=settings.otel_service_name,
    )

    if settings.otel_enabled:
        configure_tracing(
            service_name=settings.otel_service_name,
            service_version=settings.version,
            environment=settings.environment,
            otlp_endpoint=settings.otlp_endpoint if settings.otlp_endpoint else None,
        )
        instrument_httpx()

    set_service_info(
        version=settings.version,
        environment=settings.environment,
    )

    app = FastAPI(
        title="IDL Sentinel API",
        description="Anchor IDL change monitoring and notifications",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
    )
    app.state.settings = settings

    if settings.otel_enabled:
        instrument_fastapi(app)

    app.add_middleware(RequestContextMiddleware)

    error_handler_middleware(app)

    app.include_router(api_router)

    return app


# Default app instance for uvicorn
app = create_app()
