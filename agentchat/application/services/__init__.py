"""Application services - retrieval, packing, simulation."""

from agentchat.application.services.context_packer import (
    DEFAULT_SYSTEM_PROMPT,
    ContextPacker,
    estimate_tokens,
)
from agentchat.application.services.local_simulator import LocalSimulator, compose_reply
from agentchat.application.services.query import reformulate_query, sanitize_input
from agentchat.application.services.retrieval import (
    DEFAULT_CORPUS,
    CorpusEntry,
    RetrievalEngine,
    rank_evidence,
)

__all__ = [
    "DEFAULT_CORPUS",
    "DEFAULT_SYSTEM_PROMPT",
    "ContextPacker",
    "CorpusEntry",
    "LocalSimulator",
    "RetrievalEngine",
    "compose_reply",
    "estimate_tokens",
    "rank_evidence",
    "reformulate_query",
    "sanitize_input",
]
