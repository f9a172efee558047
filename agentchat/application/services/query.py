"""Input sanitization and retrieval-query reformulation."""

import re

MAX_QUERY_TOKENS = 10

# Multi-word phrases first so "can you" wins over a bare "you".
FILLER_PHRASES: tuple[str, ...] = (
    "i would like to know",
    "i'd like to know",
    "i want to know",
    "thank you",
    "can you",
    "could you",
    "would you",
    "will you",
    "please",
    "kindly",
    "thanks",
    "hello",
    "hey",
    "hi",
    "just",
    "quickly",
)

_WHITESPACE = re.compile(r"\s+")
_NON_ALNUM = re.compile(r"[^a-z0-9\s]+")
_FILLER = re.compile(
    r"\b(?:" + "|".join(re.escape(p) for p in FILLER_PHRASES) + r")\b"
)


def sanitize_input(text: str, max_length: int = 4000) -> str:
    """Collapse runs of whitespace, trim, and cap the length.

    Oversized or empty input is never rejected; it is truncated or
    returned as an empty string.
    """
    collapsed = _WHITESPACE.sub(" ", text or "").strip()
    if len(collapsed) > max_length:
        collapsed = collapsed[:max_length].rstrip()
    return collapsed


def _tokens(text: str) -> list[str]:
    return _NON_ALNUM.sub(" ", text).split()


def reformulate_query(text: str, max_tokens: int = MAX_QUERY_TOKENS) -> str:
    """Turn user text into a retrieval query.

    Lower-cases, strips filler phrases and non-alphanumeric characters,
    and keeps at most ``max_tokens`` tokens. Text made only of filler keeps
    its own tokens rather than collapsing to an empty query.

    >>> reformulate_query("please tell me about RAG")
    'tell me about rag'
    """
    lowered = (text or "").lower()
    tokens = _tokens(_FILLER.sub(" ", lowered))
    if not tokens:
        tokens = _tokens(lowered)
    return " ".join(tokens[:max_tokens])


def query_terms(query: str) -> list[str]:
    """Distinct terms of a query, in order of first appearance."""
    seen: dict[str, None] = {}
    for token in _tokens(query.lower()):
        seen.setdefault(token, None)
    return list(seen)
