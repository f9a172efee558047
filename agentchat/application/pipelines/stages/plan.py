"""Plan stage - choose a strategy and derive the retrieval query."""

from agentchat.application.pipelines.stages.base import Stage, StageResult, TurnContext
from agentchat.application.services.protocol_steps import plan_step
from agentchat.application.services.query import reformulate_query
from agentchat.domain.entities.agent import PLANNER, RESEARCHER, WRITER


class PlanStage(Stage):
    """Records the ``plan`` step.

    The strategy is remote delegation when a backend is configured,
    otherwise local simulation. The reformulated query is computed either
    way so a remote failure can fall back without replanning.
    """

    @property
    def name(self) -> str:
        return "plan"

    async def execute(self, ctx: TurnContext) -> StageResult:
        self.set_agent(PLANNER.id, "thinking", "Analyzing task...")
        self.set_agent(RESEARCHER.id, "idle")
        self.set_agent(WRITER.id, "idle")

        ctx.remote_configured = self.pipeline.remote.is_configured()
        ctx.query = reformulate_query(ctx.user_text)

        await self.record(
            ctx,
            plan_step(
                PLANNER.as_actor(),
                ctx.user_text,
                remote=ctx.remote_configured,
                query=ctx.query,
            ),
        )
        return StageResult(metadata={"strategy": "remote" if ctx.remote_configured else "local"})
