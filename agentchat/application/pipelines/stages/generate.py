"""Generate stage - persona-framed local reply."""

from agentchat.application.pipelines.stages.base import Stage, StageResult, TurnContext
from agentchat.application.services.protocol_steps import generate_step
from agentchat.domain.entities.agent import PLANNER, RESEARCHER, WRITER, actor_for
from agentchat.domain.entities.conversation import Message, RagContext


class GenerateStage(Stage):
    """Synthesizes the reply, appends it, and returns the agents to idle."""

    @property
    def name(self) -> str:
        return "generate"

    async def execute(self, ctx: TurnContext) -> StageResult:
        self.set_agent(PLANNER.id, "idle")
        self.set_agent(RESEARCHER.id, "idle")
        self.set_agent(WRITER.id, "responding", "Finalizing response...")

        content, model_info = await self.pipeline.simulator.synthesize(
            ctx.agent_id, ctx.user_text, ctx.evidence, ctx.packed
        )

        await self.record(ctx, generate_step(actor_for(ctx.agent_id), content, model_info))

        reply = Message.create(
            "agent",
            content,
            agent_id=ctx.agent_id,
            context=RagContext(query=ctx.query, chunks=tuple(ctx.evidence)),
            model_call_info=model_info,
            turn_id=ctx.turn_id,
        )
        await self.pipeline.conversations.append_message(ctx.conversation_id, reply)
        ctx.reply = reply
        ctx.path = "fallback" if ctx.fallback else "local"

        self.set_agent(WRITER.id, "idle")
        return StageResult(metadata={"model": model_info.model})
