"""Tests for the context packer."""

import pytest

from agentchat.application.services.context_packer import (
    DEFAULT_SYSTEM_PROMPT,
    ContextPacker,
    estimate_tokens,
    total_tokens,
)
from agentchat.domain.entities.protocol import EvidenceItem


def _evidence(n: int) -> list[EvidenceItem]:
    return [
        EvidenceItem(id=str(i), source=f"kb/{i}", title=f"Doc {i}", snippet=f"snippet {i}", score=1 - i / 10)
        for i in range(n)
    ]


class TestEstimateTokens:
    def test_base_plus_length_term(self):
        assert estimate_tokens("") == 20
        assert estimate_tokens("abcd") == 21
        assert estimate_tokens("abcde") == 22

    def test_clamped_to_ceiling(self):
        assert estimate_tokens("x" * 10_000) == 400


class TestContextPacker:
    @pytest.mark.parametrize("n", [0, 1, 2, 3, 4, 7])
    def test_length_bound_and_order(self, n):
        items = ContextPacker().pack(DEFAULT_SYSTEM_PROMPT, "hi", _evidence(n))

        assert len(items) <= 2 + min(3, n)
        assert len(items) == 2 + min(3, n)
        assert [i.kind for i in items[:2]] == ["system", "history"]
        assert all(i.kind == "retrieval" for i in items[2:])

    def test_item_contents(self):
        items = ContextPacker().pack("guide", "tell me about rag", _evidence(2))

        assert items[0].text == "guide"
        assert items[1].text == "User: tell me about rag"
        assert items[2].text == "Doc 0: snippet 0"
        assert items[2].origin == "kb/0"
        assert all(i.tokens == estimate_tokens(i.text) for i in items)

    def test_takes_evidence_in_given_order(self):
        evidence = list(reversed(_evidence(5)))
        items = ContextPacker().pack("guide", "q", evidence)

        assert [i.origin for i in items[2:]] == ["kb/4", "kb/3", "kb/2"]

    def test_max_items_is_capped_at_three(self):
        assert ContextPacker(max_retrieval_items=10).max_retrieval_items == 3
        assert len(ContextPacker(max_retrieval_items=1).pack("g", "q", _evidence(5))) == 3

    def test_total_tokens(self):
        items = ContextPacker().pack("guide", "q", _evidence(1))
        assert total_tokens(items) == sum(i.tokens for i in items)
