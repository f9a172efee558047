"""Remote generation stage - delegate the turn, fall back on failure."""

from agentchat.application.pipelines.stages.base import Stage, StageResult, TurnContext
from agentchat.application.services.protocol_steps import error_step, generate_step
from agentchat.domain.entities.agent import PLANNER, actor_for
from agentchat.domain.entities.conversation import Message
from agentchat.domain.errors import ProviderError
from agentchat.domain.protocols.backends import (
    ChatMessage,
    GenerationRequest,
    GenerationResult,
    RagDirective,
)
from agentchat.infrastructure.telemetry import get_logger
from agentchat.infrastructure.telemetry.metrics import record_fallback

logger = get_logger(__name__)

UNEXPECTED_CODE = "REMOTE_UNEXPECTED_ERROR"


class RemoteGenerateStage(Stage):
    """Attempts remote generation when a backend is configured.

    On success the backend's steps and reply are merged and the turn ends
    (``should_continue=False``). On any failure an ``error`` step naming the
    backend is recorded and the turn continues down the local path.
    """

    @property
    def name(self) -> str:
        return "remote_generate"

    def build_request(self, ctx: TurnContext) -> GenerationRequest:
        settings = self.pipeline.settings
        history = self.pipeline.conversations.get(ctx.conversation_id).messages
        messages = [ChatMessage(role="system", content=self.pipeline.system_prompt)]
        messages.extend(ChatMessage(role=m.role, content=m.content) for m in history)
        return GenerationRequest(
            messages=tuple(messages),
            agent_id=ctx.agent_id,
            params={"temperature": settings.generation_temperature},
            rag=RagDirective(enable=True, k=settings.retrieval_top_k),
        )

    async def execute(self, ctx: TurnContext) -> StageResult:
        if not ctx.remote_configured:
            return StageResult(metadata={"skipped": True})

        self.set_agent(PLANNER.id, "responding", "Delegating to backend...")
        remote = self.pipeline.remote

        try:
            result = await remote.generate(self.build_request(ctx))
        except ProviderError as e:
            await self._fall_back(ctx, e.message, e.code)
            return StageResult(metadata={"fallback": True, "error_code": e.code})
        except Exception as e:
            logger.exception(
                "Unexpected remote backend failure",
                extra={"backend": remote.name, "error_type": type(e).__name__},
            )
            await self._fall_back(ctx, str(e) or type(e).__name__, UNEXPECTED_CODE)
            return StageResult(metadata={"fallback": True, "error_code": UNEXPECTED_CODE})

        await self._merge(ctx, result)
        return StageResult(should_continue=False, metadata={"steps": len(result.protocol_steps)})

    async def _fall_back(self, ctx: TurnContext, reason: str, code: str) -> None:
        ctx.fallback = True
        ctx.fallback_reason = reason
        record_fallback(code)

        logger.warning(
            "Remote generation failed, falling back to local simulation",
            extra={"reason": reason, "error_code": code},
        )

        self.set_agent(PLANNER.id, "error", reason)
        await self.record(ctx, error_step(reason, code=code, stage=self.name))

    async def _merge(self, ctx: TurnContext, result: GenerationResult) -> None:
        for step in result.protocol_steps:
            await self.record(ctx, step)

        if not any(step.kind == "generate" for step in result.protocol_steps):
            await self.record(
                ctx,
                generate_step(actor_for(ctx.agent_id), result.content, result.model_call_info),
            )

        reply = Message.create(
            "agent",
            result.content,
            agent_id=ctx.agent_id,
            context=result.context,
            model_call_info=result.model_call_info,
            turn_id=ctx.turn_id,
        )
        await self.pipeline.conversations.append_message(ctx.conversation_id, reply)
        ctx.reply = reply
        ctx.path = "remote"

        self.pipeline.agents.reset()
        logger.info(
            "Remote generation merged",
            extra={"backend_steps": len(result.protocol_steps)},
        )
