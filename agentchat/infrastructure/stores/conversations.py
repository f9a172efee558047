"""In-memory conversation store.

Conversations live for the lifetime of the process. Messages are only ever
appended, and appends from concurrent turns are serialized by a lock.
"""

import asyncio

from agentchat.domain.entities.agent import PLANNER
from agentchat.domain.entities.conversation import Conversation, Message
from agentchat.domain.entities.protocol import new_id
from agentchat.domain.errors import ConversationNotFoundError
from agentchat.infrastructure.stores.agents import AgentRoster
from agentchat.infrastructure.stores.broadcast import Broadcaster, Subscription
from agentchat.infrastructure.telemetry.logging import get_logger

logger = get_logger(__name__)

WELCOME_CONVERSATION_ID = "conv-1"
WELCOME_TITLE = "Welcome"
WELCOME_GREETING = "Hello! I am your multi-agent assistant. How can we help today?"

_LIST_KEY = "__conversations__"


def _welcome_conversation() -> Conversation:
    conversation = Conversation(
        id=WELCOME_CONVERSATION_ID,
        title=WELCOME_TITLE,
        agent_id=PLANNER.id,
    )
    conversation.messages.append(
        Message.create("agent", WELCOME_GREETING, agent_id=PLANNER.id)
    )
    return conversation


class ConversationStore:
    """Conversations, the active selection, and the agent roster."""

    def __init__(
        self,
        agents: AgentRoster | None = None,
        *,
        default_agent_id: str = PLANNER.id,
        seed_welcome: bool = True,
    ) -> None:
        self.agents = agents or AgentRoster()
        self.agents.get(default_agent_id)

        self._conversations: list[Conversation] = []
        self._lock = asyncio.Lock()
        self._broadcaster: Broadcaster[object] = Broadcaster("conversations")

        self.active_agent_id = default_agent_id
        if seed_welcome:
            self._conversations.append(_welcome_conversation())
            self.active_conversation_id = WELCOME_CONVERSATION_ID
        else:
            conversation = Conversation(id=new_id(), title="New Chat", agent_id=default_agent_id)
            self._conversations.append(conversation)
            self.active_conversation_id = conversation.id

    # --- Queries ---

    def get(self, conversation_id: str) -> Conversation:
        """Snapshot of a conversation."""
        return self._find(conversation_id).snapshot()

    def list_conversations(self) -> list[Conversation]:
        """Snapshots of all conversations, most recently created first."""
        return [c.snapshot() for c in self._conversations]

    @property
    def active(self) -> Conversation:
        return self.get(self.active_conversation_id)

    # --- Mutations ---

    def new_conversation(self, title: str = "New Chat") -> Conversation:
        """Start a conversation with the active agent and make it active."""
        conversation = Conversation(id=new_id(), title=title, agent_id=self.active_agent_id)
        self._conversations.insert(0, conversation)
        self.active_conversation_id = conversation.id

        logger.info(
            "Conversation created",
            extra={"conversation": conversation.id, "agent_id": conversation.agent_id},
        )
        self._publish_list()
        return conversation.snapshot()

    def set_active_conversation(self, conversation_id: str) -> Conversation:
        conversation = self._find(conversation_id)
        self.active_conversation_id = conversation.id
        return conversation.snapshot()

    def set_active_agent(self, agent_id: str) -> None:
        """Select the agent for subsequent turns and assign it to the active conversation."""
        self.agents.get(agent_id)
        self.active_agent_id = agent_id

        conversation = self._find(self.active_conversation_id)
        conversation.agent_id = agent_id
        conversation.touch()

        logger.info(
            "Active agent changed",
            extra={"agent_id": agent_id, "conversation": conversation.id},
        )
        self._publish(conversation)

    async def append_message(self, conversation_id: str, message: Message) -> Conversation:
        """Append ``message`` and bump the conversation's updated timestamp."""
        async with self._lock:
            conversation = self._find(conversation_id)
            conversation.append(message)
            snapshot = conversation.snapshot()
            self._publish(conversation)

        logger.debug(
            "Message appended",
            extra={
                "conversation": conversation_id,
                "message_id": message.id,
                "role": message.role,
                "turn": message.turn_id,
            },
        )
        return snapshot

    # --- Observation ---

    def watch(self, conversation_id: str) -> Subscription[object]:
        """Snapshots of one conversation: current, then one per change."""
        return self._broadcaster.subscribe(conversation_id, self.get(conversation_id))

    def watch_conversations(self) -> Subscription[object]:
        """Snapshots of the full conversation list."""
        return self._broadcaster.subscribe(_LIST_KEY, self.list_conversations())

    # --- Internals ---

    def _find(self, conversation_id: str) -> Conversation:
        for conversation in self._conversations:
            if conversation.id == conversation_id:
                return conversation
        raise ConversationNotFoundError(conversation_id)

    def _publish(self, conversation: Conversation) -> None:
        self._broadcaster.publish(conversation.id, conversation.snapshot())
        self._publish_list()

    def _publish_list(self) -> None:
        self._broadcaster.publish(_LIST_KEY, self.list_conversations())

