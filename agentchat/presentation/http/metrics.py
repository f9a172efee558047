"""Prometheus scrape endpoint."""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from agentchat.application.pipelines.turn_pipeline import TurnPipeline
from agentchat.presentation.http.dependencies import get_pipeline

router = APIRouter()


@router.get("/metrics")
async def metrics(pipeline: TurnPipeline = Depends(get_pipeline)) -> Response:
    if not pipeline.context.settings.prometheus_enabled:
        raise HTTPException(status_code=404, detail="Metrics disabled")
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
