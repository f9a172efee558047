"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agentchat.application.pipelines.turn_pipeline import TurnPipeline, create_turn_pipeline
from agentchat.config import Settings, get_settings
from agentchat.infrastructure.middleware import (
    RequestContextMiddleware,
    error_handler_middleware,
)
from agentchat.infrastructure.telemetry import configure_logging, get_logger
from agentchat.infrastructure.telemetry.metrics import set_service_info
from agentchat.presentation.http import api_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    pipeline: TurnPipeline = app.state.pipeline
    settings = pipeline.context.settings

    logger.info(
        "Starting agent chat service",
        extra={
            "version": settings.version,
            "environment": settings.environment,
            "remote_configured": settings.remote_configured,
        },
    )
    settings.log_config_summary()

    yield

    logger.info("Shutting down agent chat service")
    await pipeline.context.remote.close()


def create_app(
    settings: Settings | None = None,
    pipeline: TurnPipeline | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override for testing
        pipeline: Optional pre-built pipeline (its settings win)

    Returns:
        Configured FastAPI application
    """
    if pipeline is not None:
        settings = pipeline.context.settings
    elif settings is None:
        settings = get_settings()

    configure_logging(
        level=settings.log_level,
        format_type=settings.log_format,
        debug_namespaces=settings.debug_namespaces,
    )

    set_service_info(
        version=settings.version,
        environment=settings.environment,
    )

    app = FastAPI(
        title="Agent Chat API",
        description="Multi-agent chat turn pipeline with protocol timelines",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
    )
    app.state.pipeline = pipeline if pipeline is not None else create_turn_pipeline(settings)

    # Last added runs first: request ids are bound before CORS handling.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if not settings.is_production else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    error_handler_middleware(app)

    app.include_router(api_router)

    return app


# Default app instance for uvicorn
app = create_app()
