"""Conversation and message entities."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Literal

from agentchat.domain.entities.protocol import EvidenceItem, ModelCallInfo, new_id, utcnow

Role = Literal["user", "agent", "system"]


@dataclass(frozen=True)
class RagContext:
    """Evidence bound to a message: the query, chunks and retrieval time."""

    query: str
    chunks: tuple[EvidenceItem, ...] = ()
    used_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "chunks": [c.to_dict() for c in self.chunks],
            "usedAt": self.used_at.isoformat(),
        }


@dataclass(frozen=True)
class Message:
    """A single chat message."""

    id: str
    role: Role
    content: str
    timestamp: datetime = field(default_factory=utcnow)
    agent_id: str | None = None
    context: RagContext | None = None
    model_call_info: ModelCallInfo | None = None
    turn_id: str | None = None

    @classmethod
    def create(cls, role: Role, content: str, **kwargs: Any) -> "Message":
        return cls(id=new_id(), role=role, content=content, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.agent_id is not None:
            data["agentId"] = self.agent_id
        if self.context is not None:
            data["context"] = self.context.to_dict()
        if self.model_call_info is not None:
            data["llm"] = self.model_call_info.to_dict()
        if self.turn_id is not None:
            data["protocolTurnId"] = self.turn_id
        return data


@dataclass
class Conversation:
    """A conversation container. Mutated only by appending messages."""

    id: str
    title: str
    agent_id: str
    messages: list[Message] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def append(self, message: Message) -> None:
        self.messages.append(message)
        self.touch()

    def touch(self) -> None:
        self.updated_at = utcnow()

    def snapshot(self) -> "Conversation":
        """Copy that is safe to hand to observers."""
        return replace(self, messages=list(self.messages))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "agentId": self.agent_id,
            "messages": [m.to_dict() for m in self.messages],
        }
