"""Domain entities."""

from agentchat.domain.entities.agent import (
    BACKEND_ACTOR,
    DEFAULT_AGENTS,
    PLANNER,
    RESEARCHER,
    WRITER,
    AgentDescriptor,
    AgentState,
    AgentStatus,
    actor_for,
)
from agentchat.domain.entities.conversation import Conversation, Message, RagContext, Role
from agentchat.domain.entities.protocol import (
    EvidenceItem,
    ModelCallInfo,
    PackedItem,
    ProtocolActor,
    ProtocolStep,
    RetrievalBatch,
    StepPayload,
    TokenUsage,
    Turn,
    new_id,
    utcnow,
)

__all__ = [
    # Agents
    "AgentDescriptor",
    "AgentState",
    "AgentStatus",
    "BACKEND_ACTOR",
    "DEFAULT_AGENTS",
    "PLANNER",
    "RESEARCHER",
    "WRITER",
    "actor_for",
    # Conversations
    "Conversation",
    "Message",
    "RagContext",
    "Role",
    # Protocol
    "EvidenceItem",
    "ModelCallInfo",
    "PackedItem",
    "ProtocolActor",
    "ProtocolStep",
    "RetrievalBatch",
    "StepPayload",
    "TokenUsage",
    "Turn",
    "new_id",
    "utcnow",
]
