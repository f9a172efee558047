"""Tests for the retrieval engine."""

import pytest

from agentchat.application.services.retrieval import (
    DEFAULT_CORPUS,
    CorpusEntry,
    RetrievalEngine,
    rank_evidence,
)
from agentchat.domain.entities.protocol import EvidenceItem


@pytest.fixture
def engine() -> RetrievalEngine:
    return RetrievalEngine()


def _scores(items):
    return [item.score if item.score is not None else 0 for item in items]


class TestRetrieve:
    @pytest.mark.parametrize(
        "query", ["tell me about rag", "", "   ", "agents", "zzz unmatched", "rag overview"]
    )
    def test_sorted_and_deduplicated(self, engine, query):
        items = engine.retrieve(query)

        keys = [item.dedup_key for item in items]
        assert len(keys) == len(set(keys))
        assert _scores(items) == sorted(_scores(items), reverse=True)

    def test_truncates_to_top_k(self, engine):
        assert len(engine.retrieve("rag")) == 5
        assert len(engine.retrieve("rag", k=2)) == 2
        assert engine.retrieve("rag", k=0) == []

    def test_duplicate_title_keeps_highest_ranked(self, engine):
        items = engine.retrieve("rag overview", k=10)

        rag = [item for item in items if item.dedup_key == "rag overview"]
        assert len(rag) == 1
        assert rag[0].source == "docs/guide.md"

    def test_deterministic_for_same_query(self, engine):
        first = engine.retrieve("tell me about rag")
        second = engine.retrieve("tell me about rag")

        assert [(i.source, i.score) for i in first] == [(i.source, i.score) for i in second]
        assert {i.id for i in first}.isdisjoint({i.id for i in second})

    def test_empty_query_returns_default_ranking(self, engine):
        items = engine.retrieve("")

        assert [i.title for i in items[:3]] == ["RAG Overview", "Agent Collaboration", "Context Windows"]
        assert [i.score for i in items[:3]] == [0.92, 0.85, 0.75]

    def test_matched_terms_raise_score(self, engine):
        unmatched = {i.source: i.score for i in engine.retrieve("")}
        matched = {i.source: i.score for i in engine.retrieve("tell me about rag")}

        assert matched["docs/guide.md"] == pytest.approx(unmatched["docs/guide.md"] + 0.02)
        assert matched["blog/agents"] == unmatched["blog/agents"]

    def test_terms_match_whole_words_only(self, engine):
        # "fragment" in the Token Budgets snippet contains "rag"
        unmatched = {i.source: i for i in engine.retrieve("")}
        matched = {i.source: i for i in engine.retrieve("rag")}

        assert matched["kb/tokens"].score == unmatched["kb/tokens"].score == 0.57
        assert matched["kb/tokens"].metadata["matchedTerms"] == []
        assert matched["docs/guide.md"].metadata["matchedTerms"] == ["rag"]

    def test_results_come_from_corpus(self, engine):
        sources = {entry.source for entry in DEFAULT_CORPUS}
        assert all(item.source in sources for item in engine.retrieve("rag"))

    def test_untitled_entry_without_score_sorts_last(self):
        engine = RetrievalEngine(
            corpus=[
                CorpusEntry(source="notes/a", snippet="no score", base_score=None),
                CorpusEntry(source="docs/b", title="B", snippet="scored", base_score=0.5),
            ]
        )

        items = engine.retrieve("")

        assert [i.source for i in items] == ["docs/b", "notes/a"]
        assert items[1].score is None
        assert items[1].label == "notes/a"


def test_rank_evidence_treats_missing_score_as_zero():
    items = [
        EvidenceItem(id="1", source="a", snippet="", score=None),
        EvidenceItem(id="2", source="b", snippet="", score=-0.1),
        EvidenceItem(id="3", source="c", snippet="", score=0.3),
    ]

    assert [i.id for i in rank_evidence(items, top_k=5)] == ["3", "1", "2"]
