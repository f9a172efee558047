"""Turn pipeline and its stages."""

from agentchat.application.pipelines.stages.base import PipelineContext, TurnContext
from agentchat.application.pipelines.turn_pipeline import (
    TurnPipeline,
    TurnResult,
    create_turn_pipeline,
)

__all__ = [
    "PipelineContext",
    "TurnContext",
    "TurnPipeline",
    "TurnResult",
    "create_turn_pipeline",
]
