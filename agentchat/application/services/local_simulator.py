"""Local simulator - deterministic offline generation backend."""

import asyncio
from collections.abc import Sequence

from agentchat.application.services.context_packer import (
    DEFAULT_SYSTEM_PROMPT,
    ContextPacker,
    estimate_tokens,
    total_tokens,
)
from agentchat.application.services.protocol_steps import (
    generate_step,
    pack_step,
    retrieve_step,
)
from agentchat.application.services.query import reformulate_query
from agentchat.application.services.retrieval import RetrievalEngine
from agentchat.domain.entities.agent import PLANNER, RESEARCHER, WRITER, actor_for
from agentchat.domain.entities.conversation import RagContext
from agentchat.domain.entities.protocol import (
    EvidenceItem,
    ModelCallInfo,
    PackedItem,
    TokenUsage,
)
from agentchat.domain.protocols.backends import (
    BackendKind,
    GenerationRequest,
    GenerationResult,
)
from agentchat.infrastructure.telemetry.logging import get_logger

logger = get_logger(__name__)

SIMULATOR_MODEL = "local-simulator"
NO_EVIDENCE = "No supporting evidence was retrieved, so this answer relies on general guidance only."


def _evidence_lines(evidence: Sequence[EvidenceItem], limit: int = 2) -> str:
    return "\n".join(f"- {c.label}: {c.snippet}" for c in evidence[:limit])


def _writer_reply(text: str, evidence: Sequence[EvidenceItem]) -> str:
    top = _evidence_lines(evidence) or NO_EVIDENCE
    return (
        "Here's a synthesized answer based on retrieved context.\n\n"
        f"Key evidence:\n{top}\n\n"
        f"In summary, {text} can be approached by combining planning, targeted "
        "retrieval, and clear synthesis aligned with your goals."
    )


def _planner_reply(text: str, evidence: Sequence[EvidenceItem]) -> str:
    top = _evidence_lines(evidence) or NO_EVIDENCE
    return (
        "Here's a plan for your request.\n\n"
        f"1. Clarify the goal: {text}\n"
        "2. Gather supporting evidence from the knowledge base\n"
        "3. Synthesize a grounded answer from the strongest sources\n\n"
        f"Supporting evidence:\n{top}\n\n"
        "Next step: start from the highest-ranked source and refine from there."
    )


def _researcher_reply(text: str, evidence: Sequence[EvidenceItem]) -> str:
    if not evidence:
        return f"Here's what the knowledge base returned for {text}.\n\n{NO_EVIDENCE}"
    ranked = "\n".join(
        f"{rank}. {c.label} ({c.source}, score {c.score if c.score is not None else 'n/a'}): {c.snippet}"
        for rank, c in enumerate(evidence[:3], start=1)
    )
    return (
        f"Here's what the knowledge base returned for {text}, ranked by relevance.\n\n"
        f"{ranked}\n\n"
        f"The strongest source is {evidence[0].label}."
    )


_PERSONAS = {
    PLANNER.id: _planner_reply,
    RESEARCHER.id: _researcher_reply,
    WRITER.id: _writer_reply,
}


def compose_reply(agent_id: str, user_text: str, evidence: Sequence[EvidenceItem]) -> str:
    """Persona-framed reply. The evidence used is the same for every persona."""
    persona = _PERSONAS.get(agent_id, _writer_reply)
    return persona(user_text.strip(), evidence)


class LocalSimulator:
    """Offline backend: retrieval, packing and deterministic reply synthesis.

    Never fails. Sleeps for a fixed latency to emulate a real model call.
    """

    kind: BackendKind = "local"

    def __init__(
        self,
        retrieval: RetrievalEngine,
        packer: ContextPacker,
        latency_ms: int = 600,
        temperature: float = 0.2,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ):
        self.retrieval = retrieval
        self.packer = packer
        self.latency_ms = latency_ms
        self.temperature = temperature
        self.system_prompt = system_prompt

    @property
    def name(self) -> str:
        return SIMULATOR_MODEL

    def is_configured(self) -> bool:
        return True

    def retrieve(self, query: str, k: int | None = None) -> list[EvidenceItem]:
        return self.retrieval.retrieve(query, k)

    def pack(self, user_text: str, evidence: Sequence[EvidenceItem]) -> list[PackedItem]:
        return self.packer.pack(self.system_prompt, user_text, evidence)

    async def synthesize(
        self,
        agent_id: str,
        user_text: str,
        evidence: Sequence[EvidenceItem],
        packed: Sequence[PackedItem],
    ) -> tuple[str, ModelCallInfo]:
        """Compose the reply and its simulated model metadata."""
        if self.latency_ms > 0:
            await asyncio.sleep(self.latency_ms / 1000)

        content = compose_reply(agent_id, user_text, evidence)
        prompt_tokens = total_tokens(packed)
        completion_tokens = estimate_tokens(content)
        info = ModelCallInfo(
            model=SIMULATOR_MODEL,
            params={"temperature": self.temperature},
            tokens=TokenUsage(
                prompt=prompt_tokens,
                completion=completion_tokens,
                total=prompt_tokens + completion_tokens,
            ),
            latency_ms=self.latency_ms,
        )
        return content, info

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        user_text = request.last_user_text
        query = reformulate_query(user_text)
        evidence = self.retrieve(query, request.rag.k) if request.rag.enable else []
        packed = self.pack(user_text, evidence)
        content, info = await self.synthesize(request.agent_id, user_text, evidence, packed)

        logger.debug(
            "Local simulation completed",
            extra={"agent_id": request.agent_id, "evidence": len(evidence)},
        )

        return GenerationResult(
            content=content,
            context=RagContext(query=query, chunks=tuple(evidence)) if evidence else None,
            model_call_info=info,
            protocol_steps=(
                retrieve_step(RESEARCHER.as_actor(), query, evidence),
                pack_step(WRITER.as_actor(), packed),
                generate_step(actor_for(request.agent_id), content, info),
            ),
        )
