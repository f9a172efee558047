"""Retrieve stage - ranked, deduplicated evidence for the turn's query."""

from agentchat.application.pipelines.stages.base import Stage, StageResult, TurnContext
from agentchat.application.services.protocol_steps import retrieve_step
from agentchat.domain.entities.agent import RESEARCHER, WRITER


class RetrieveStage(Stage):
    @property
    def name(self) -> str:
        return "retrieve"

    async def execute(self, ctx: TurnContext) -> StageResult:
        ctx.evidence = self.pipeline.simulator.retrieve(
            ctx.query, self.pipeline.settings.retrieval_top_k
        )

        self.set_agent(RESEARCHER.id, "responding", "Ranking and summarizing...")
        self.set_agent(WRITER.id, "thinking", "Drafting response...")

        await self.record(ctx, retrieve_step(RESEARCHER.as_actor(), ctx.query, ctx.evidence))
        return StageResult(metadata={"count": len(ctx.evidence)})
