"""Tests for domain entities."""

from datetime import UTC, datetime

import pytest

from agentchat.domain.entities import (
    BACKEND_ACTOR,
    DEFAULT_AGENTS,
    PLANNER,
    WRITER,
    AgentState,
    Conversation,
    EvidenceItem,
    Message,
    ModelCallInfo,
    PackedItem,
    ProtocolStep,
    RagContext,
    TokenUsage,
    Turn,
    actor_for,
    new_id,
)
from agentchat.domain.protocols import ChatMessage, GenerationRequest, RagDirective


class TestEvidenceItem:
    def test_label_prefers_title(self):
        item = EvidenceItem(id="e1", source="docs/guide.md", snippet="s", title="RAG Overview")
        assert item.label == "RAG Overview"
        assert item.dedup_key == "rag overview"

    def test_label_falls_back_to_source(self):
        item = EvidenceItem(id="e1", source=" KB/Context ", snippet="s")
        assert item.label == " KB/Context "
        assert item.dedup_key == "kb/context"

    def test_to_dict_omits_missing_fields(self):
        item = EvidenceItem(id="e1", source="kb", snippet="s")
        assert item.to_dict() == {"id": "e1", "source": "kb", "snippet": "s"}


class TestProtocolStep:
    def test_create_assigns_id_and_timestamp(self):
        step = ProtocolStep.create("plan", PLANNER.as_actor())

        assert step.id
        assert step.at.tzinfo is not None
        assert step.kind == "plan"

    def test_create_freezes_context_window(self):
        items = [PackedItem(id="p1", kind="system", text="guide", tokens=22)]
        step = ProtocolStep.create("pack", WRITER.as_actor(), context_window=items)

        assert isinstance(step.context_window, tuple)
        items.append(PackedItem(id="p2", kind="history", text="x"))
        assert len(step.context_window) == 1

    def test_steps_are_immutable(self):
        step = ProtocolStep.create("plan", PLANNER.as_actor())
        with pytest.raises(AttributeError):
            step.kind = "route"  # type: ignore[misc]

    def test_to_dict_uses_wire_names(self):
        info = ModelCallInfo(
            model="m",
            params={"temperature": 0.2},
            tokens=TokenUsage(prompt=10, completion=5, total=15),
            latency_ms=120,
        )
        step = ProtocolStep.create(
            "pack",
            WRITER.as_actor(),
            context_window=[PackedItem(id="p1", kind="system", text="guide", tokens=22)],
            model=info,
            note="ok",
        )

        data = step.to_dict()

        assert data["type"] == "pack"
        assert data["actor"] == {"id": "writer", "name": "Writer", "icon": "✍️"}
        assert data["contextWindow"] == [
            {"id": "p1", "type": "system", "text": "guide", "tokens": 22}
        ]
        assert data["model"] == {
            "model": "m",
            "params": {"temperature": 0.2},
            "tokens": {"prompt": 10, "completion": 5, "total": 15},
            "latencyMs": 120,
        }
        assert data["note"] == "ok"

    def test_turn_kinds(self):
        turn = Turn(
            turn_id="t1",
            steps=(
                ProtocolStep.create("plan", PLANNER.as_actor()),
                ProtocolStep.create("error", BACKEND_ACTOR),
            ),
        )
        assert turn.kinds == ["plan", "error"]
        assert turn.to_dict()["turnId"] == "t1"


class TestModelCallInfo:
    def test_empty_tokens_omitted(self):
        info = ModelCallInfo(model="m", tokens=TokenUsage())
        assert info.to_dict() == {"model": "m"}


class TestConversation:
    def test_append_touches_updated_at(self):
        conversation = Conversation(id="c1", title="Chat", agent_id="planner")
        before = conversation.updated_at

        conversation.append(Message.create("user", "hi"))

        assert len(conversation.messages) == 1
        assert conversation.updated_at >= before

    def test_snapshot_is_independent(self):
        conversation = Conversation(id="c1", title="Chat", agent_id="planner")
        snapshot = conversation.snapshot()

        conversation.append(Message.create("user", "hi"))

        assert snapshot.messages == []

    def test_message_to_dict(self):
        used_at = datetime(2024, 1, 1, tzinfo=UTC)
        message = Message.create(
            "agent",
            "reply",
            agent_id="writer",
            context=RagContext(query="rag", used_at=used_at),
            turn_id="t1",
        )

        data = message.to_dict()

        assert data["agentId"] == "writer"
        assert data["protocolTurnId"] == "t1"
        assert data["context"] == {"query": "rag", "chunks": [], "usedAt": used_at.isoformat()}
        assert "llm" not in data


class TestAgents:
    def test_default_roster(self):
        assert [a.id for a in DEFAULT_AGENTS] == ["planner", "researcher", "writer"]
        assert all(a.state.status == "idle" for a in DEFAULT_AGENTS)

    def test_rejects_unknown_status(self):
        with pytest.raises(ValueError, match="unknown agent status"):
            AgentState(status="sleeping")  # type: ignore[arg-type]

    def test_with_state_returns_copy(self):
        busy = PLANNER.with_state(AgentState(status="thinking", note="Analyzing task..."))

        assert busy.state.status == "thinking"
        assert PLANNER.state.status == "idle"
        assert busy.to_dict()["state"] == {"status": "thinking", "note": "Analyzing task..."}

    def test_actor_for_unknown_agent_is_writer(self):
        assert actor_for("nobody") == WRITER.as_actor()
        assert actor_for("planner").id == "planner"


class TestGenerationRequest:
    def test_payload_shape(self):
        request = GenerationRequest(
            messages=(ChatMessage("system", "guide"), ChatMessage("user", "hello")),
            agent_id="writer",
            params={"temperature": 0.2},
            rag=RagDirective(enable=True, k=3),
        )

        assert request.last_user_text == "hello"
        assert request.to_payload() == {
            "messages": [
                {"role": "system", "content": "guide"},
                {"role": "user", "content": "hello"},
            ],
            "agentId": "writer",
            "params": {"temperature": 0.2},
            "rag": {"enable": True, "k": 3},
        }


def test_new_id_is_unique():
    assert len({new_id() for _ in range(100)}) == 100
