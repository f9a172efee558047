"""Builders for the protocol steps a turn records."""

from collections.abc import Sequence
from typing import Any

from agentchat.application.services.context_packer import total_tokens
from agentchat.domain.entities.agent import BACKEND_ACTOR
from agentchat.domain.entities.protocol import (
    EvidenceItem,
    ModelCallInfo,
    PackedItem,
    ProtocolActor,
    ProtocolStep,
    RetrievalBatch,
    StepPayload,
)

LOCAL_PLAN = "Simulate locally: route, retrieve, pack, generate"
REMOTE_PLAN = "Delegate retrieval and generation to the backend"


def plan_step(
    actor: ProtocolActor,
    user_text: str,
    *,
    remote: bool,
    query: str | None = None,
) -> ProtocolStep:
    fields: dict[str, Any] = {"strategy": "remote" if remote else "local"}
    if not remote and query is not None:
        fields["query"] = query
    return ProtocolStep.create(
        "plan",
        actor,
        input=StepPayload(text=user_text),
        output=StepPayload(text=REMOTE_PLAN if remote else LOCAL_PLAN, fields=fields),
    )


def route_step(
    actor: ProtocolActor,
    query: str,
    *,
    retriever_id: str,
    generator_id: str,
    fallback: bool = False,
) -> ProtocolStep:
    return ProtocolStep.create(
        "route",
        actor,
        input=StepPayload(text=query),
        output=StepPayload(
            text=f"Retrieval -> {retriever_id}, generation -> {generator_id}",
            fields={
                "retrieval": retriever_id,
                "generation": generator_id,
                "fallback": fallback,
            },
        ),
    )


def retrieve_step(
    actor: ProtocolActor,
    query: str,
    items: Sequence[EvidenceItem],
    note: str | None = None,
) -> ProtocolStep:
    return ProtocolStep.create(
        "retrieve",
        actor,
        input=StepPayload(text=query),
        retrieval=RetrievalBatch(query=query, items=tuple(items)),
        output=StepPayload(fields={"count": len(items)}),
        note=note,
    )


def pack_step(
    actor: ProtocolActor,
    items: Sequence[PackedItem],
    note: str | None = None,
) -> ProtocolStep:
    return ProtocolStep.create(
        "pack",
        actor,
        context_window=items,
        output=StepPayload(fields={"items": len(items), "tokens": total_tokens(items)}),
        note=note,
    )


def generate_step(
    actor: ProtocolActor,
    content: str,
    model: ModelCallInfo | None = None,
    note: str | None = None,
) -> ProtocolStep:
    return ProtocolStep.create(
        "generate",
        actor,
        output=StepPayload(text=content),
        model=model,
        note=note,
    )


def error_step(
    reason: str,
    *,
    actor: ProtocolActor = BACKEND_ACTOR,
    code: str | None = None,
    stage: str | None = None,
) -> ProtocolStep:
    fields: dict[str, Any] = {}
    if code is not None:
        fields["code"] = code
    if stage is not None:
        fields["stage"] = stage
    return ProtocolStep.create(
        "error",
        actor,
        output=StepPayload(text=reason, fields=fields),
        note=reason,
    )
