"""Agent roster with live per-agent state."""

from collections.abc import Iterable

from agentchat.domain.entities.agent import DEFAULT_AGENTS, AgentDescriptor, AgentState
from agentchat.domain.errors import AgentNotFoundError
from agentchat.infrastructure.stores.broadcast import Broadcaster, Subscription
from agentchat.infrastructure.telemetry.logging import get_logger

logger = get_logger(__name__)

_ROSTER_KEY = "roster"


class AgentRoster:
    """Owned map from agent id to descriptor.

    ``set_state`` is the narrow update operation. Each agent holds exactly
    one status at a time; concurrent writers are last-writer-wins.
    """

    def __init__(self, agents: Iterable[AgentDescriptor] = DEFAULT_AGENTS) -> None:
        self._agents: dict[str, AgentDescriptor] = {a.id: a for a in agents}
        self._broadcaster: Broadcaster[list[AgentDescriptor]] = Broadcaster("agents")

    def get(self, agent_id: str) -> AgentDescriptor:
        try:
            return self._agents[agent_id]
        except KeyError:
            raise AgentNotFoundError(agent_id) from None

    def list_agents(self) -> list[AgentDescriptor]:
        return list(self._agents.values())

    def __contains__(self, agent_id: object) -> bool:
        return agent_id in self._agents

    def state_of(self, agent_id: str) -> AgentState:
        return self.get(agent_id).state

    def set_state(self, agent_id: str, status: str, note: str | None = None) -> AgentDescriptor:
        """Replace the agent's state and notify roster watchers."""
        agent = self.get(agent_id).with_state(AgentState(status=status, note=note))  # type: ignore[arg-type]
        self._agents[agent_id] = agent
        logger.debug(
            "Agent state changed",
            extra={"agent_id": agent_id, "status": status, "note": note},
        )
        self._broadcaster.publish(_ROSTER_KEY, self.list_agents())
        return agent

    def reset(self, *agent_ids: str) -> None:
        """Return the given agents (all when none given) to idle."""
        for agent_id in agent_ids or tuple(self._agents):
            self.set_state(agent_id, "idle")

    def watch_agents(self) -> Subscription[list[AgentDescriptor]]:
        """Roster snapshots: the current one, then one per state change."""
        return self._broadcaster.subscribe(_ROSTER_KEY, self.list_agents())
