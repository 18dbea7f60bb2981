from __future__ import annotations

"""Ranking of stored resume chunks and prompt context formatting."""

import logging
import math
from typing import Iterable, Sequence

from resume_chat.rag.similarity import cosine_similarity
from resume_chat.rag.types import ChunkCandidate, SearchResult

logger = logging.getLogger(__name__)

NO_CONTEXT_FOUND = "No relevant information found."
DEFAULT_LIMIT = 5


def rank(
    query_embedding: Sequence[float],
    candidates: Iterable[ChunkCandidate],
    limit: int = DEFAULT_LIMIT,
) -> list[SearchResult]:
    """Rank candidates by cosine similarity to the query, most relevant first.

    Candidates whose similarity is indeterminate (a zero-magnitude vector on
    either side) are dropped. Exact ties keep their input order.
    """
    if limit < 0:
        raise ValueError("limit must not be negative")
    if limit == 0:
        return []
    scored: list[SearchResult] = []
    skipped = 0
    for candidate in candidates:
        similarity = cosine_similarity(query_embedding, candidate.embedding)
        if math.isnan(similarity):
            skipped += 1
            continue
        scored.append(
            SearchResult(text=candidate.text, index=candidate.index, similarity=similarity)
        )
    if skipped:
        logger.debug("ranking_skipped_zero_vectors", extra={"skipped": skipped})
    scored.sort(key=lambda result: result.similarity, reverse=True)
    return scored[:limit]


def format_context(results: Sequence[SearchResult]) -> str:
    """Render ranked results as numbered context blocks for a prompt."""
    if not results:
        return NO_CONTEXT_FOUND
    blocks = [
        f"[Context {position}] (Relevance: {result.similarity * 100:.1f}%)\n{result.text}"
        for position, result in enumerate(results, start=1)
    ]
    return "\n\n".join(blocks)
