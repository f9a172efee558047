"""Retrieval engine over a fixed illustrative corpus.

The scoring is a stand-in for embedding similarity or BM25: each corpus
entry has a base relevance, penalized by its position, with a small bonus
for query terms found in its title or snippet. Callers only rely on the
contract: deduplicated by title-or-source, sorted by descending score,
truncated to top K.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from agentchat.application.services.query import query_terms
from agentchat.domain.entities.protocol import EvidenceItem, new_id
from agentchat.infrastructure.telemetry.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TOP_K = 5
POSITION_DECREMENT = 0.03
TERM_BONUS = 0.02
MAX_BONUS_TERMS = 3

STOPWORDS = frozenset({
    "a", "an", "and", "are", "about", "for", "how", "into", "is", "me", "of",
    "on", "or", "tell", "the", "to", "what", "when", "why", "with",
})


@dataclass(frozen=True)
class CorpusEntry:
    source: str
    snippet: str
    base_score: float | None
    title: str | None = None
    url: str | None = None


DEFAULT_CORPUS: tuple[CorpusEntry, ...] = (
    CorpusEntry(
        source="docs/guide.md",
        title="RAG Overview",
        snippet="RAG combines retrieval with generation to ground responses.",
        base_score=0.92,
    ),
    CorpusEntry(
        source="blog/agents",
        title="Agent Collaboration",
        snippet="Planner, Researcher, and Writer coordinate to answer complex queries.",
        base_score=0.88,
    ),
    CorpusEntry(
        source="kb/context",
        title="Context Windows",
        snippet="Efficient context packing improves factual grounding.",
        base_score=0.81,
    ),
    CorpusEntry(
        source="kb/ranking",
        title="Retrieval Ranking",
        snippet="Rerank candidates by relevance and drop near-duplicates before packing.",
        base_score=0.78,
    ),
    CorpusEntry(
        source="docs/rag-faq.md",
        title="RAG overview",
        snippet="Retrieval-augmented generation grounds answers in retrieved sources.",
        base_score=0.76,
    ),
    CorpusEntry(
        source="kb/tokens",
        title="Token Budgets",
        snippet="Estimate the token cost of each fragment and cap the context window.",
        base_score=0.72,
    ),
    CorpusEntry(
        source="docs/prompting.md",
        title="Prompt Design",
        snippet="Clear system guidance keeps answers focused and consistent.",
        base_score=0.68,
    ),
    CorpusEntry(
        source="blog/resilience",
        title="Fallback Strategies",
        snippet="When a remote model is unavailable, degrade to a local simulation.",
        base_score=0.64,
    ),
    CorpusEntry(
        source="notes/observability",
        snippet="Protocol timelines record each stage of a turn for auditing.",
        base_score=None,
    ),
)


def _sort_key(item: EvidenceItem) -> float:
    return item.score if item.score is not None else 0.0


def rank_evidence(items: Iterable[EvidenceItem], top_k: int) -> list[EvidenceItem]:
    """Sort by descending score, drop duplicate labels, keep the first ``top_k``.

    Missing scores sort as 0. Among items sharing a normalized
    title-or-source key, the highest ranked occurrence is kept.
    """
    ranked = sorted(items, key=_sort_key, reverse=True)
    seen: set[str] = set()
    unique: list[EvidenceItem] = []
    for item in ranked:
        if item.dedup_key in seen:
            continue
        seen.add(item.dedup_key)
        unique.append(item)
    return unique[: max(top_k, 0)]


class RetrievalEngine:
    """Deterministic retrieval against a fixed corpus.

    Swappable for a real index: callers depend only on ``retrieve``.
    """

    def __init__(
        self,
        corpus: Sequence[CorpusEntry] = DEFAULT_CORPUS,
        top_k: int = DEFAULT_TOP_K,
        position_decrement: float = POSITION_DECREMENT,
    ):
        self.corpus = tuple(corpus)
        self.top_k = top_k
        self.position_decrement = position_decrement

    def retrieve(self, query: str, k: int | None = None) -> list[EvidenceItem]:
        """Ranked, deduplicated evidence for ``query``.

        An empty or unmatched query returns the corpus's default ranking.
        """
        top_k = self.top_k if k is None else k
        terms = [t for t in query_terms(query or "") if t not in STOPWORDS]

        candidates = [
            self._score(position, entry, terms)
            for position, entry in enumerate(self.corpus)
        ]
        results = rank_evidence(candidates, top_k)

        logger.debug(
            "Retrieval completed",
            extra={
                "query": query,
                "candidates": len(candidates),
                "returned": len(results),
                "top_k": top_k,
            },
        )
        return results

    def _score(self, position: int, entry: CorpusEntry, terms: list[str]) -> EvidenceItem:
        # Whole tokens only: "rag" must not match "fragment".
        entry_terms = set(query_terms(f"{entry.title or ''} {entry.snippet}"))
        matched = [t for t in terms if t in entry_terms][:MAX_BONUS_TERMS]

        score: float | None = None
        if entry.base_score is not None:
            score = round(
                entry.base_score
                - position * self.position_decrement
                + len(matched) * TERM_BONUS,
                2,
            )

        return EvidenceItem(
            id=new_id(),
            source=entry.source,
            title=entry.title,
            snippet=entry.snippet,
            score=score,
            url=entry.url,
            metadata={"corpusRank": position, "matchedTerms": matched},
        )
