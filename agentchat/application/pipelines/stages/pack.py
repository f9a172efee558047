"""Pack stage - assemble the context window."""

from agentchat.application.pipelines.stages.base import Stage, StageResult, TurnContext
from agentchat.application.services.protocol_steps import pack_step
from agentchat.domain.entities.agent import WRITER


class PackStage(Stage):
    @property
    def name(self) -> str:
        return "pack"

    async def execute(self, ctx: TurnContext) -> StageResult:
        ctx.packed = self.pipeline.simulator.pack(ctx.user_text, ctx.evidence)
        await self.record(ctx, pack_step(WRITER.as_actor(), ctx.packed))
        return StageResult(metadata={"items": len(ctx.packed)})
