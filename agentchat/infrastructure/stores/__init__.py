"""In-memory stores: protocol timelines, conversations, agent roster."""

from agentchat.infrastructure.stores.agents import AgentRoster
from agentchat.infrastructure.stores.broadcast import Broadcaster, Subscription
from agentchat.infrastructure.stores.conversations import (
    WELCOME_CONVERSATION_ID,
    WELCOME_GREETING,
    ConversationStore,
)
from agentchat.infrastructure.stores.timeline import ProtocolTimelineStore

__all__ = [
    "AgentRoster",
    "Broadcaster",
    "ConversationStore",
    "ProtocolTimelineStore",
    "Subscription",
    "WELCOME_CONVERSATION_ID",
    "WELCOME_GREETING",
]
