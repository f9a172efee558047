"""Domain protocols - abstract interfaces for external capabilities."""

from agentchat.domain.protocols.backends import (
    BackendKind,
    ChatMessage,
    GenerationBackend,
    GenerationRequest,
    GenerationResult,
    ParamValue,
    RagDirective,
)

__all__ = [
    "BackendKind",
    "ChatMessage",
    "GenerationBackend",
    "GenerationRequest",
    "GenerationResult",
    "ParamValue",
    "RagDirective",
]
