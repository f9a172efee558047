"""Protocol timeline entities.

A turn's timeline is the ordered list of steps that assembled the context
and produced the reply. Steps are immutable once created.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal
from uuid import uuid4

StepKind = Literal[
    "plan", "route", "retrieve", "rerank", "pack", "generate", "reflect", "tool", "error"
]
PackedKind = Literal["system", "instruction", "history", "retrieval", "tool", "scratchpad"]

STEP_KINDS: tuple[str, ...] = (
    "plan", "route", "retrieve", "rerank", "pack", "generate", "reflect", "tool", "error",
)
PACKED_KINDS: tuple[str, ...] = (
    "system", "instruction", "history", "retrieval", "tool", "scratchpad",
)


def new_id() -> str:
    """Unique identifier for steps, turns, messages and evidence."""
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


@dataclass(frozen=True)
class ProtocolActor:
    """Which agent or component performed a step."""

    id: str
    name: str
    icon: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({"id": self.id, "name": self.name, "icon": self.icon})


@dataclass(frozen=True)
class StepPayload:
    """Input or output of a step: free text plus structured fields."""

    text: str | None = None
    fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.text is not None:
            data["text"] = self.text
        if self.fields:
            data["fields"] = dict(self.fields)
        return data


@dataclass(frozen=True)
class EvidenceItem:
    """A retrieved snippet with provenance and relevance score."""

    id: str
    source: str
    snippet: str
    title: str | None = None
    score: float | None = None
    url: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def label(self) -> str:
        """Display label: the title, or the source when untitled."""
        return self.title or self.source

    @property
    def dedup_key(self) -> str:
        return self.label.strip().lower()

    def to_dict(self) -> dict[str, Any]:
        data = _drop_none({
            "id": self.id,
            "source": self.source,
            "title": self.title,
            "snippet": self.snippet,
            "score": self.score,
            "url": self.url,
        })
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        return data


@dataclass(frozen=True)
class RetrievalBatch:
    """The query used for a retrieval and the items it returned."""

    query: str
    items: tuple[EvidenceItem, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"query": self.query, "items": [i.to_dict() for i in self.items]}


@dataclass(frozen=True)
class PackedItem:
    """One fragment packed into the model context window."""

    id: str
    kind: PackedKind
    text: str
    tokens: int | None = None
    origin: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "type": self.kind,
            "text": self.text,
            "tokens": self.tokens,
            "origin": self.origin,
        })


@dataclass(frozen=True)
class TokenUsage:
    prompt: int | float | None = None
    completion: int | float | None = None
    total: int | float | None = None

    def is_empty(self) -> bool:
        return self.prompt is None and self.completion is None and self.total is None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none({
            "prompt": self.prompt,
            "completion": self.completion,
            "total": self.total,
        })


@dataclass(frozen=True)
class ModelCallInfo:
    """Model name, parameters, token usage and latency of a generation call."""

    model: str
    params: dict[str, float] = field(default_factory=dict)
    tokens: TokenUsage | None = None
    latency_ms: int | float | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"model": self.model}
        if self.params:
            data["params"] = dict(self.params)
        if self.tokens is not None and not self.tokens.is_empty():
            data["tokens"] = self.tokens.to_dict()
        if self.latency_ms is not None:
            data["latencyMs"] = self.latency_ms
        return data


@dataclass(frozen=True)
class ProtocolStep:
    """One recorded stage of turn processing."""

    id: str
    at: datetime
    kind: str
    actor: ProtocolActor
    input: StepPayload | None = None
    output: StepPayload | None = None
    retrieval: RetrievalBatch | None = None
    context_window: tuple[PackedItem, ...] | None = None
    model: ModelCallInfo | None = None
    note: str | None = None

    @classmethod
    def create(cls, kind: str, actor: ProtocolActor, **kwargs: Any) -> "ProtocolStep":
        """Build a step with a fresh id and the current timestamp."""
        if kwargs.get("context_window") is not None:
            kwargs["context_window"] = tuple(kwargs["context_window"])
        return cls(id=new_id(), at=utcnow(), kind=kind, actor=actor, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "at": self.at.isoformat(),
            "type": self.kind,
            "actor": self.actor.to_dict(),
        }
        if self.input is not None:
            data["input"] = self.input.to_dict()
        if self.output is not None:
            data["output"] = self.output.to_dict()
        if self.retrieval is not None:
            data["retrieval"] = self.retrieval.to_dict()
        if self.context_window is not None:
            data["contextWindow"] = [item.to_dict() for item in self.context_window]
        if self.model is not None:
            data["model"] = self.model.to_dict()
        if self.note is not None:
            data["note"] = self.note
        return data


@dataclass(frozen=True)
class Turn:
    """Snapshot of a turn's protocol timeline."""

    turn_id: str
    steps: tuple[ProtocolStep, ...] = ()

    @property
    def kinds(self) -> list[str]:
        return [step.kind for step in self.steps]

    def to_dict(self) -> dict[str, Any]:
        return {"turnId": self.turn_id, "steps": [s.to_dict() for s in self.steps]}
