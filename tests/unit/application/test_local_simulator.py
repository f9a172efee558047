"""Tests for the local simulator backend."""

import pytest

from agentchat.application.services.context_packer import ContextPacker
from agentchat.application.services.local_simulator import (
    NO_EVIDENCE,
    LocalSimulator,
    compose_reply,
)
from agentchat.application.services.retrieval import RetrievalEngine
from agentchat.domain.entities.protocol import EvidenceItem
from agentchat.domain.protocols import ChatMessage, GenerationRequest, RagDirective


@pytest.fixture
def simulator() -> LocalSimulator:
    return LocalSimulator(RetrievalEngine(), ContextPacker(), latency_ms=0)


def _request(text: str, agent_id: str = "writer", rag: RagDirective | None = None) -> GenerationRequest:
    return GenerationRequest(
        messages=(ChatMessage("user", text),),
        agent_id=agent_id,
        rag=rag or RagDirective(),
    )


EVIDENCE = [
    EvidenceItem(id="1", source="docs/guide.md", title="RAG Overview", snippet="RAG grounds answers.", score=0.94),
    EvidenceItem(id="2", source="blog/agents", title="Agent Collaboration", snippet="Agents coordinate.", score=0.85),
    EvidenceItem(id="3", source="kb/context", snippet="Packing matters.", score=0.75),
]


class TestComposeReply:
    def test_writer_reply_cites_top_two(self):
        reply = compose_reply("writer", "  rag  ", EVIDENCE)

        assert reply.startswith("Here's a synthesized answer based on retrieved context.")
        assert "- RAG Overview: RAG grounds answers." in reply
        assert "- Agent Collaboration: Agents coordinate." in reply
        assert "kb/context" not in reply
        assert "In summary, rag can be approached" in reply

    def test_planner_reply_is_a_plan(self):
        reply = compose_reply("planner", "rag", EVIDENCE)

        assert "1. Clarify the goal: rag" in reply
        assert "RAG Overview" in reply

    def test_researcher_reply_ranks_with_scores(self):
        reply = compose_reply("researcher", "rag", EVIDENCE)

        assert "1. RAG Overview (docs/guide.md, score 0.94)" in reply
        assert "3. kb/context (kb/context, score 0.75)" in reply
        assert reply.endswith("The strongest source is RAG Overview.")

    @pytest.mark.parametrize("agent_id", ["planner", "researcher", "writer", "unknown"])
    def test_no_evidence(self, agent_id):
        assert NO_EVIDENCE in compose_reply(agent_id, "rag", [])

    def test_unknown_agent_uses_writer_persona(self):
        assert compose_reply("unknown", "rag", EVIDENCE) == compose_reply("writer", "rag", EVIDENCE)


class TestLocalSimulator:
    def test_identity(self, simulator):
        assert simulator.kind == "local"
        assert simulator.name == "local-simulator"
        assert simulator.is_configured() is True

    @pytest.mark.asyncio
    async def test_generate_returns_steps_and_context(self, simulator):
        result = await simulator.generate(_request("please tell me about RAG"))

        assert [s.kind for s in result.protocol_steps] == ["retrieve", "pack", "generate"]
        assert result.context is not None
        assert result.context.query == "tell me about rag"
        assert result.context.chunks[0].title == "RAG Overview"
        assert "RAG Overview" in result.content

    @pytest.mark.asyncio
    async def test_model_info_is_simulated(self, simulator):
        result = await simulator.generate(_request("rag"))
        info = result.model_call_info
        packed = result.protocol_steps[1].context_window

        assert info.model == "local-simulator"
        assert info.params == {"temperature": 0.2}
        assert info.tokens.prompt == sum(i.tokens for i in packed)
        assert info.tokens.total == info.tokens.prompt + info.tokens.completion
        assert info.latency_ms == 0

    @pytest.mark.asyncio
    async def test_rag_disabled_skips_retrieval(self, simulator):
        result = await simulator.generate(_request("rag", rag=RagDirective(enable=False)))

        assert result.context is None
        assert result.protocol_steps[0].retrieval.items == ()
        assert len(result.protocol_steps[1].context_window) == 2

    @pytest.mark.asyncio
    async def test_latency_sleeps(self, monkeypatch):
        slept: list[float] = []

        async def fake_sleep(seconds):
            slept.append(seconds)

        monkeypatch.setattr("agentchat.application.services.local_simulator.asyncio.sleep", fake_sleep)
        simulator = LocalSimulator(RetrievalEngine(), ContextPacker(), latency_ms=600)

        _, info = await simulator.synthesize("writer", "rag", EVIDENCE, [])

        assert slept == [0.6]
        assert info.latency_ms == 600
