"""Route stage - assign retrieval and generation responsibilities."""

from agentchat.application.pipelines.stages.base import Stage, StageResult, TurnContext
from agentchat.application.services.protocol_steps import route_step
from agentchat.domain.entities.agent import PLANNER, RESEARCHER


class RouteStage(Stage):
    @property
    def name(self) -> str:
        return "route"

    async def execute(self, ctx: TurnContext) -> StageResult:
        self.set_agent(PLANNER.id, "responding", "Coordinating agents...")
        self.set_agent(RESEARCHER.id, "retrieving", "Searching knowledge base...")

        await self.record(
            ctx,
            route_step(
                PLANNER.as_actor(),
                ctx.query,
                retriever_id=RESEARCHER.id,
                generator_id=ctx.agent_id,
                fallback=ctx.fallback,
            ),
        )
        return StageResult()
