"""Health check endpoints."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from agentchat.application.pipelines.turn_pipeline import TurnPipeline
from agentchat.presentation.http.dependencies import get_pipeline

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    version: str
    environment: str
    checks: dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check(pipeline: TurnPipeline = Depends(get_pipeline)) -> HealthResponse:
    """Service status and which generation path is active.

    The remote backend is not called; ``remote_configured`` only reports
    whether turns will attempt it.
    """
    settings = pipeline.context.settings

    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC).isoformat(),
        version=settings.version,
        environment=settings.environment,
        checks={
            "remote_configured": pipeline.context.remote.is_configured(),
            "turns": len(pipeline.timeline),
        },
    )


@router.get("/live")
async def liveness_check() -> dict[str, str]:
    """Kubernetes liveness probe endpoint."""
    return {"status": "alive"}
