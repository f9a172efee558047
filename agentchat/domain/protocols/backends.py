"""Generation backend protocol - the capability both backends implement."""

from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

from agentchat.domain.entities.conversation import RagContext
from agentchat.domain.entities.protocol import ModelCallInfo, ProtocolStep

BackendKind = Literal["remote", "local"]
ParamValue = float | int | str | bool


@dataclass(frozen=True)
class ChatMessage:
    """A message sent to a generation backend."""

    role: str  # 'system', 'user', 'assistant'
    content: str


@dataclass(frozen=True)
class RagDirective:
    """Whether the backend should retrieve, and how many items."""

    enable: bool = True
    k: int = 5


@dataclass(frozen=True)
class GenerationRequest:
    """Full message history, selected agent, model params and retrieval directive."""

    messages: tuple[ChatMessage, ...]
    agent_id: str
    params: dict[str, ParamValue] = field(default_factory=dict)
    rag: RagDirective = field(default_factory=RagDirective)

    @property
    def last_user_text(self) -> str:
        for message in reversed(self.messages):
            if message.role == "user":
                return message.content
        return ""

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the chat-completions endpoint."""
        return {
            "messages": [{"role": m.role, "content": m.content} for m in self.messages],
            "agentId": self.agent_id,
            "params": dict(self.params),
            "rag": {"enable": self.rag.enable, "k": self.rag.k},
        }


@dataclass(frozen=True)
class GenerationResult:
    """Reply content plus optional evidence, model info and protocol steps."""

    content: str
    context: RagContext | None = None
    model_call_info: ModelCallInfo | None = None
    protocol_steps: tuple[ProtocolStep, ...] = ()


class GenerationBackend(Protocol):
    """Generate a reply for a request.

    Exactly two implementations exist: the remote backend (delegates to an
    external chat-completions endpoint) and the local simulator. Callers
    dispatch on ``is_configured()`` of the remote backend.
    """

    kind: BackendKind

    @property
    def name(self) -> str:
        """Backend name for logging/metrics."""
        ...

    def is_configured(self) -> bool:
        ...

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Generate a reply; remote failures raise ProviderError subclasses."""
        ...
