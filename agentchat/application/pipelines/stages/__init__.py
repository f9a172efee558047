"""Turn pipeline stages."""

from agentchat.application.pipelines.stages.base import (
    PipelineContext,
    Stage,
    StageResult,
    TurnContext,
)
from agentchat.application.pipelines.stages.generate import GenerateStage
from agentchat.application.pipelines.stages.pack import PackStage
from agentchat.application.pipelines.stages.plan import PlanStage
from agentchat.application.pipelines.stages.remote import RemoteGenerateStage
from agentchat.application.pipelines.stages.retrieve import RetrieveStage
from agentchat.application.pipelines.stages.route import RouteStage

__all__ = [
    # Base
    "PipelineContext",
    "Stage",
    "StageResult",
    "TurnContext",
    # Stages
    "PlanStage",
    "RemoteGenerateStage",
    "RouteStage",
    "RetrieveStage",
    "PackStage",
    "GenerateStage",
]
