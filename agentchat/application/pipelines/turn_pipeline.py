"""Turn pipeline - end-to-end processing of one user submission."""

import time
from dataclasses import dataclass

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
from agentchat.application.services.context_packer import ContextPacker
from agentchat.application.services.local_simulator import LocalSimulator, compose_reply
from agentchat.application.services.protocol_steps import error_step
from agentchat.application.services.query import sanitize_input
from agentchat.application.services.retrieval import RetrievalEngine
from agentchat.config import Settings, get_settings
from agentchat.domain.entities.agent import actor_for
from agentchat.domain.entities.conversation import Message
from agentchat.domain.entities.protocol import Turn, new_id
from agentchat.infrastructure.providers.remote import RemoteBackend
from agentchat.infrastructure.stores.conversations import ConversationStore
from agentchat.infrastructure.stores.timeline import ProtocolTimelineStore
from agentchat.infrastructure.telemetry import get_logger
from agentchat.infrastructure.telemetry.logging import conversation_id_var, turn_id_var
from agentchat.infrastructure.telemetry.metrics import TURNS_ACTIVE, record_turn_run

logger = get_logger(__name__)


@dataclass(frozen=True)
class TurnResult:
    """Outcome of a submitted turn."""

    turn_id: str
    user_message: Message
    reply: Message
    path: str  # remote, local, fallback
    fallback: bool = False
    fallback_reason: str | None = None


class TurnPipeline:
    """Orchestrates a single conversational turn.

    Runs stages in the following order:
    1. Plan - choose remote or local, reformulate the query
    2. RemoteGenerate - only when a backend is configured; success ends the turn
    3. Route - assign retrieval and generation
    4. Retrieve - rank and deduplicate evidence
    5. Pack - build the context window
    6. Generate - persona reply and agent message

    Every stage records a protocol step. Failures never end a turn: remote
    errors fall back to the local path and failed local stages are recorded
    as ``error`` steps while the turn continues.
    """

    def __init__(self, context: PipelineContext):
        self.context = context
        self.stages: list[Stage] = [
            PlanStage(context),
            RemoteGenerateStage(context),
            RouteStage(context),
            RetrieveStage(context),
            PackStage(context),
            GenerateStage(context),
        ]

    @property
    def timeline(self) -> ProtocolTimelineStore:
        return self.context.timeline

    @property
    def conversations(self) -> ConversationStore:
        return self.context.conversations

    async def submit(
        self,
        text: str,
        *,
        conversation_id: str | None = None,
        agent_id: str | None = None,
    ) -> TurnResult:
        """Run one turn for ``text``.

        Args:
            text: Raw user text; sanitized, never rejected
            conversation_id: Target conversation (defaults to the active one)
            agent_id: Responding agent (defaults to the active one)

        Returns:
            TurnResult with the user message, the reply and the turn id

        Raises:
            ConversationNotFoundError: Unknown conversation id
            AgentNotFoundError: Unknown agent id
        """
        conversation_id = conversation_id or self.conversations.active_conversation_id
        agent_id = agent_id or self.conversations.active_agent_id
        self.conversations.get(conversation_id)
        self.context.agents.get(agent_id)

        start_time = time.perf_counter()
        turn_id = new_id()
        conversation_token = conversation_id_var.set(conversation_id)
        turn_token = turn_id_var.set(turn_id)
        TURNS_ACTIVE.inc()

        status = "failure"
        ctx: TurnContext | None = None
        try:
            user_text = sanitize_input(text, self.context.settings.max_input_length)
            await self.timeline.ensure(turn_id)

            user_message = Message.create("user", user_text, turn_id=turn_id)
            await self.conversations.append_message(conversation_id, user_message)

            ctx = TurnContext(
                turn_id=turn_id,
                conversation_id=conversation_id,
                agent_id=agent_id,
                user_text=user_text,
                user_message=user_message,
            )

            logger.info(
                "Turn started",
                extra={"agent_id": agent_id, "text_length": len(user_text)},
            )

            for stage in self.stages:
                result = await stage.run(ctx)
                if not result.success:
                    await self._record_failure(ctx, stage, result)
                    continue
                if not result.should_continue:
                    break

            if ctx.reply is None:
                await self._degraded_reply(ctx)

            status = "success"
            logger.info(
                "Turn completed",
                extra={
                    "path": ctx.path,
                    "fallback": ctx.fallback,
                    "duration_ms": int((time.perf_counter() - start_time) * 1000),
                },
            )

            return TurnResult(
                turn_id=turn_id,
                user_message=user_message,
                reply=ctx.reply,
                path=ctx.path,
                fallback=ctx.fallback,
                fallback_reason=ctx.fallback_reason,
            )

        finally:
            TURNS_ACTIVE.dec()
            record_turn_run(
                ctx.path if ctx is not None else "local",
                status,
                time.perf_counter() - start_time,
            )
            turn_id_var.reset(turn_token)
            conversation_id_var.reset(conversation_token)

    def get_turn(self, turn_id: str) -> Turn | None:
        return self.timeline.get(turn_id)

    async def _record_failure(self, ctx: TurnContext, stage: Stage, result: StageResult) -> None:
        logger.warning(
            f"Stage {stage.name} failed, continuing",
            extra={"stage": stage.name, "error": result.error, "error_code": result.error_code},
        )
        await self.timeline.append(
            ctx.turn_id,
            error_step(
                result.error or "stage failed",
                actor=actor_for(ctx.agent_id),
                code=result.error_code,
                stage=stage.name,
            ),
        )

    async def _degraded_reply(self, ctx: TurnContext) -> None:
        """Reply from whatever evidence exists when generation did not complete."""
        reply = Message.create(
            "agent",
            compose_reply(ctx.agent_id, ctx.user_text, ctx.evidence),
            agent_id=ctx.agent_id,
            turn_id=ctx.turn_id,
        )
        await self.conversations.append_message(ctx.conversation_id, reply)
        ctx.reply = reply
        ctx.path = "fallback" if ctx.fallback else "local"
        self.context.agents.reset()


def create_turn_pipeline(
    settings: Settings | None = None,
    *,
    remote: RemoteBackend | None = None,
    conversations: ConversationStore | None = None,
    timeline: ProtocolTimelineStore | None = None,
    retrieval: RetrievalEngine | None = None,
) -> TurnPipeline:
    """Wire a TurnPipeline from settings, allowing collaborators to be overridden."""
    settings = settings or get_settings()

    if retrieval is None:
        retrieval = RetrievalEngine(top_k=settings.retrieval_top_k)
    packer = ContextPacker(max_retrieval_items=settings.context_max_retrieval_items)
    simulator = LocalSimulator(
        retrieval=retrieval,
        packer=packer,
        latency_ms=settings.simulator_latency_ms,
        temperature=settings.generation_temperature,
    )

    context = PipelineContext(
        settings=settings,
        timeline=timeline if timeline is not None else ProtocolTimelineStore(),
        conversations=(
            conversations
            if conversations is not None
            else ConversationStore(default_agent_id=settings.default_agent_id)
        ),
        retrieval=retrieval,
        packer=packer,
        simulator=simulator,
        remote=remote if remote is not None else RemoteBackend.from_settings(settings),
    )
    return TurnPipeline(context)
