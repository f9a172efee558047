"""Base stage definitions."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from agentchat.application.services.context_packer import ContextPacker
from agentchat.application.services.local_simulator import LocalSimulator
from agentchat.application.services.retrieval import RetrievalEngine
from agentchat.config import Settings
from agentchat.domain.entities.conversation import Message
from agentchat.domain.entities.protocol import EvidenceItem, PackedItem, ProtocolStep
from agentchat.domain.errors import StageFailedError
from agentchat.infrastructure.providers.remote import RemoteBackend
from agentchat.infrastructure.stores.agents import AgentRoster
from agentchat.infrastructure.stores.conversations import ConversationStore
from agentchat.infrastructure.stores.timeline import ProtocolTimelineStore
from agentchat.infrastructure.telemetry import get_logger
from agentchat.infrastructure.telemetry.metrics import record_stage_execution

logger = get_logger(__name__)


@dataclass
class PipelineContext:
    """Collaborators shared by every turn.

    Passed explicitly to each stage; nothing here is a module-level singleton.
    """

    settings: Settings
    timeline: ProtocolTimelineStore
    conversations: ConversationStore
    retrieval: RetrievalEngine
    packer: ContextPacker
    simulator: LocalSimulator
    remote: RemoteBackend

    @property
    def agents(self) -> AgentRoster:
        return self.conversations.agents

    @property
    def system_prompt(self) -> str:
        return self.simulator.system_prompt


@dataclass
class TurnContext:
    """State of a single turn, accumulated through stage processing."""

    turn_id: str
    conversation_id: str
    agent_id: str
    user_text: str
    user_message: Message

    # Planning
    query: str = ""
    remote_configured: bool = False

    # Fallback
    fallback: bool = False
    fallback_reason: str | None = None

    # Local path
    evidence: list[EvidenceItem] = field(default_factory=list)
    packed: list[PackedItem] = field(default_factory=list)

    # Output
    reply: Message | None = None
    path: str = "local"  # local, remote, fallback


@dataclass
class StageResult:
    """Result of a stage execution."""

    success: bool = True
    error: str | None = None
    error_code: str | None = None
    should_continue: bool = True  # Whether to continue pipeline
    latency_ms: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)


class Stage(ABC):
    """Base class for turn pipeline stages.

    Each stage receives the turn context, processes it, records its protocol
    step, and returns a result indicating success/failure.
    """

    def __init__(self, pipeline: PipelineContext):
        self.pipeline = pipeline

    @property
    @abstractmethod
    def name(self) -> str:
        """Stage name for logging and metrics."""
        ...

    @abstractmethod
    async def execute(self, ctx: TurnContext) -> StageResult:
        """Execute the stage.

        Args:
            ctx: Turn context

        Returns:
            Stage result
        """
        ...

    async def record(self, ctx: TurnContext, step: ProtocolStep) -> None:
        """Append a protocol step to this turn's timeline."""
        await self.pipeline.timeline.append(ctx.turn_id, step)

    def set_agent(self, agent_id: str, status: str, note: str | None = None) -> None:
        self.pipeline.agents.set_state(agent_id, status, note)

    async def run(self, ctx: TurnContext) -> StageResult:
        """Run the stage, timing it and reporting unexpected errors as ``StageFailedError``.

        Args:
            ctx: Turn context

        Returns:
            Stage result
        """
        start = time.perf_counter()

        try:
            result = await self.execute(ctx)
        except Exception as e:
            logger.exception(
                f"Stage {self.name} failed",
                extra={"stage": self.name, "error_type": type(e).__name__},
            )
            failure = StageFailedError(
                str(e) or type(e).__name__,
                stage=self.name,
                turn_id=ctx.turn_id,
                details={"error_type": type(e).__name__},
            )
            result = StageResult(
                success=False,
                error=failure.message,
                error_code=failure.code,
                metadata=failure.details,
            )

        duration = time.perf_counter() - start
        result.latency_ms = int(duration * 1000)
        record_stage_execution(
            self.name,
            "success" if result.success else "failure",
            duration,
        )
        logger.debug(
            f"Stage {self.name} finished",
            extra={
                "stage": self.name,
                "success": result.success,
                "latency_ms": result.latency_ms,
            },
        )
        return result
