"""Tests for the conversation store and agent roster."""

import pytest

from agentchat.domain.entities.conversation import Message
from agentchat.domain.errors import AgentNotFoundError, ConversationNotFoundError
from agentchat.infrastructure.stores.agents import AgentRoster
from agentchat.infrastructure.stores.conversations import (
    WELCOME_CONVERSATION_ID,
    WELCOME_GREETING,
    ConversationStore,
)


class TestAgentRoster:
    def test_defaults(self):
        roster = AgentRoster()

        assert [a.id for a in roster.list_agents()] == ["planner", "researcher", "writer"]
        assert all(roster.state_of(agent_id).status == "idle" for agent_id in ("planner", "researcher", "writer"))

    def test_unknown_agent(self):
        with pytest.raises(AgentNotFoundError) as exc_info:
            AgentRoster().get("critic")
        assert exc_info.value.details == {"resource": "Agent", "identifier": "critic"}

    def test_set_state_replaces_state(self):
        roster = AgentRoster()

        roster.set_state("planner", "thinking", "Analyzing task...")
        roster.set_state("planner", "responding")

        state = roster.state_of("planner")
        assert state.status == "responding"
        assert state.note is None

    def test_invalid_status(self):
        with pytest.raises(ValueError):
            AgentRoster().set_state("planner", "sleeping")

    def test_reset(self):
        roster = AgentRoster()
        roster.set_state("planner", "error", "down")
        roster.set_state("writer", "responding")

        roster.reset("planner")
        assert roster.state_of("planner").status == "idle"
        assert roster.state_of("writer").status == "responding"

        roster.reset()
        assert roster.state_of("writer").status == "idle"

    @pytest.mark.asyncio
    async def test_watch_agents(self):
        roster = AgentRoster()
        subscription = roster.watch_agents()

        roster.set_state("researcher", "retrieving")

        await subscription.next()
        latest = await subscription.next()
        assert next(a for a in latest if a.id == "researcher").state.status == "retrieving"
        subscription.close()


class TestConversationStore:
    def test_welcome_conversation(self):
        store = ConversationStore()

        conversation = store.active
        assert conversation.id == WELCOME_CONVERSATION_ID
        assert conversation.agent_id == "planner"
        assert [m.content for m in conversation.messages] == [WELCOME_GREETING]
        assert conversation.messages[0].role == "agent"

    def test_without_welcome(self):
        store = ConversationStore(seed_welcome=False)

        assert store.active.messages == []
        assert len(store.list_conversations()) == 1

    def test_unknown_default_agent(self):
        with pytest.raises(AgentNotFoundError):
            ConversationStore(default_agent_id="critic")

    def test_new_conversation_becomes_active_and_first(self):
        store = ConversationStore()

        conversation = store.new_conversation("Research")

        assert store.active_conversation_id == conversation.id
        assert store.list_conversations()[0].id == conversation.id
        assert conversation.title == "Research"
        assert conversation.messages == []

    def test_new_conversation_uses_active_agent(self):
        store = ConversationStore()
        store.set_active_agent("writer")

        assert store.new_conversation().agent_id == "writer"

    def test_set_active_conversation(self):
        store = ConversationStore()
        store.new_conversation()

        store.set_active_conversation(WELCOME_CONVERSATION_ID)

        assert store.active.id == WELCOME_CONVERSATION_ID

    def test_set_active_conversation_unknown(self):
        with pytest.raises(ConversationNotFoundError):
            ConversationStore().set_active_conversation("missing")

    def test_set_active_agent_reassigns_conversation(self):
        store = ConversationStore()
        before = store.active.updated_at

        store.set_active_agent("researcher")

        assert store.active_agent_id == "researcher"
        assert store.active.agent_id == "researcher"
        assert store.active.updated_at >= before

    def test_set_active_agent_unknown(self):
        store = ConversationStore()

        with pytest.raises(AgentNotFoundError):
            store.set_active_agent("critic")
        assert store.active_agent_id == "planner"

    @pytest.mark.asyncio
    async def test_append_message(self):
        store = ConversationStore()
        message = Message.create("user", "hello")

        snapshot = await store.append_message(WELCOME_CONVERSATION_ID, message)

        assert snapshot.messages[-1] == message
        assert store.get(WELCOME_CONVERSATION_ID).updated_at >= message.timestamp

    @pytest.mark.asyncio
    async def test_append_to_unknown_conversation(self):
        with pytest.raises(ConversationNotFoundError):
            await ConversationStore().append_message("missing", Message.create("user", "x"))

    @pytest.mark.asyncio
    async def test_snapshots_are_detached(self):
        store = ConversationStore()
        snapshot = store.active

        await store.append_message(WELCOME_CONVERSATION_ID, Message.create("user", "x"))

        assert len(snapshot.messages) == 1

    @pytest.mark.asyncio
    async def test_watch_conversation(self):
        store = ConversationStore()
        subscription = store.watch(WELCOME_CONVERSATION_ID)

        await store.append_message(WELCOME_CONVERSATION_ID, Message.create("user", "x"))

        assert len((await subscription.next()).messages) == 1
        assert len((await subscription.next()).messages) == 2
        subscription.close()

    @pytest.mark.asyncio
    async def test_watch_conversations(self):
        store = ConversationStore()
        subscription = store.watch_conversations()

        store.new_conversation()

        assert len(await subscription.next()) == 1
        assert len(await subscription.next()) == 2
        subscription.close()
