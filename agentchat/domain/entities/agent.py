"""Agent personas and their observable processing state."""

from dataclasses import dataclass, field, replace
from typing import Any, Literal

from agentchat.domain.entities.protocol import ProtocolActor

AgentStatus = Literal["idle", "thinking", "retrieving", "responding", "error", "offline"]

AGENT_STATUSES: tuple[str, ...] = (
    "idle", "thinking", "retrieving", "responding", "error", "offline",
)


@dataclass(frozen=True)
class AgentState:
    """Exactly one status per agent at any instant, plus an optional note."""

    status: AgentStatus = "idle"
    note: str | None = None

    def __post_init__(self) -> None:
        if self.status not in AGENT_STATUSES:
            raise ValueError(f"unknown agent status: {self.status}")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.status}
        if self.note is not None:
            data["note"] = self.note
        return data


@dataclass(frozen=True)
class AgentDescriptor:
    """A named persona with expertise tags and live state."""

    id: str
    name: str
    description: str
    icon: str
    expertise: tuple[str, ...] = ()
    state: AgentState = field(default_factory=AgentState)

    def with_state(self, state: AgentState) -> "AgentDescriptor":
        return replace(self, state=state)

    def as_actor(self) -> ProtocolActor:
        return ProtocolActor(id=self.id, name=self.name, icon=self.icon)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "expertise": list(self.expertise),
            "state": self.state.to_dict(),
        }


PLANNER = AgentDescriptor(
    id="planner",
    name="Planner",
    description="Decomposes tasks and orchestrates sub-agents.",
    icon="🧭",
    expertise=("Planning", "Decomposition", "Coordination"),
)

RESEARCHER = AgentDescriptor(
    id="researcher",
    name="Researcher",
    description="Finds and ranks relevant information from knowledge sources.",
    icon="🔎",
    expertise=("RAG", "Ranking", "Summarization"),
)

WRITER = AgentDescriptor(
    id="writer",
    name="Writer",
    description="Crafts articulate, context-aware responses.",
    icon="✍️",
    expertise=("Writing", "Synthesis", "Clarity"),
)

DEFAULT_AGENTS: tuple[AgentDescriptor, ...] = (PLANNER, RESEARCHER, WRITER)

BACKEND_ACTOR = ProtocolActor(id="backend", name="Backend", icon="🛰️")


def actor_for(agent_id: str | None) -> ProtocolActor:
    """Actor for a roster agent id; unknown ids map to the writer."""
    for agent in DEFAULT_AGENTS:
        if agent.id == agent_id:
            return agent.as_actor()
    return WRITER.as_actor()
