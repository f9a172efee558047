"""Context packing under a per-item token estimate."""

import math
from collections.abc import Sequence

from agentchat.domain.entities.protocol import EvidenceItem, PackedItem, new_id

DEFAULT_SYSTEM_PROMPT = (
    "You are a multi-agent assistant. Ground every answer in the retrieved "
    "evidence, cite sources by title, and say so when evidence is missing."
)

MAX_RETRIEVAL_ITEMS = 3
TOKEN_BASE_COST = 20
TOKEN_CHARS_PER_TOKEN = 4
TOKEN_CEILING = 400


def estimate_tokens(text: str) -> int:
    """Cheap deterministic token estimate; not a tokenizer.

    A fixed base cost plus one token per four characters, clamped to a
    per-item ceiling.
    """
    return min(TOKEN_CEILING, TOKEN_BASE_COST + math.ceil(len(text) / TOKEN_CHARS_PER_TOKEN))


class ContextPacker:
    """Assemble a bounded context window.

    Always one ``system`` item then one ``history`` item, followed by up to
    ``max_retrieval_items`` ``retrieval`` items taken in the order given.
    Evidence must already be ranked and deduplicated.
    """

    def __init__(self, max_retrieval_items: int = MAX_RETRIEVAL_ITEMS):
        self.max_retrieval_items = min(max(max_retrieval_items, 0), MAX_RETRIEVAL_ITEMS)

    def pack(
        self,
        system_prompt: str,
        user_text: str,
        evidence: Sequence[EvidenceItem],
    ) -> list[PackedItem]:
        history_text = f"User: {user_text}"
        items = [
            PackedItem(
                id=new_id(),
                kind="system",
                text=system_prompt,
                tokens=estimate_tokens(system_prompt),
                origin="system",
            ),
            PackedItem(
                id=new_id(),
                kind="history",
                text=history_text,
                tokens=estimate_tokens(history_text),
                origin="conversation",
            ),
        ]

        for chunk in evidence[: self.max_retrieval_items]:
            text = f"{chunk.label}: {chunk.snippet}"
            items.append(
                PackedItem(
                    id=new_id(),
                    kind="retrieval",
                    text=text,
                    tokens=estimate_tokens(text),
                    origin=chunk.source,
                )
            )

        return items


def total_tokens(items: Sequence[PackedItem]) -> int:
    return sum(item.tokens or 0 for item in items)
