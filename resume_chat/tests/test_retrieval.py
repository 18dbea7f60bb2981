from __future__ import annotations

"""Ranking and context formatting tests."""

import pytest

from resume_chat.rag.retrieval import NO_CONTEXT_FOUND, format_context, rank
from resume_chat.rag.similarity import VectorDimensionError
from resume_chat.rag.types import ChunkCandidate, SearchResult

QUERY = [1.0, 0.0]


def _candidate(text: str, index: int, similarity: float) -> ChunkCandidate:
    """Build a unit vector whose cosine with QUERY equals similarity."""
    return ChunkCandidate(
        text=text,
        index=index,
        embedding=[similarity, (1.0 - similarity**2) ** 0.5],
    )


def test_rank_orders_by_descending_similarity() -> None:
    candidates = [
        _candidate("middle", 0, 0.90),
        _candidate("low", 1, 0.85),
        _candidate("high", 2, 0.95),
    ]

    results = rank(QUERY, candidates, limit=5)

    assert [result.text for result in results] == ["high", "middle", "low"]
    assert [result.index for result in results] == [2, 0, 1]
    assert [result.similarity for result in results] == pytest.approx([0.95, 0.90, 0.85])


def test_rank_truncates_to_limit() -> None:
    candidates = [
        _candidate("a", 0, 0.95),
        _candidate("b", 1, 0.90),
        _candidate("c", 2, 0.85),
    ]
    assert [result.text for result in rank(QUERY, candidates, limit=2)] == ["a", "b"]


def test_rank_with_zero_limit_or_no_candidates_is_empty() -> None:
    assert rank(QUERY, [_candidate("a", 0, 0.9)], limit=0) == []
    assert rank(QUERY, [], limit=5) == []


def test_rank_rejects_negative_limit() -> None:
    with pytest.raises(ValueError):
        rank(QUERY, [], limit=-1)


def test_rank_default_limit_is_five() -> None:
    candidates = [_candidate(f"chunk {i}", i, 0.5) for i in range(8)]
    assert len(rank(QUERY, candidates)) == 5


def test_rank_keeps_input_order_on_ties() -> None:
    candidates = [
        ChunkCandidate(text="first", index=0, embedding=[1.0, 0.0]),
        ChunkCandidate(text="second", index=1, embedding=[2.0, 0.0]),
        ChunkCandidate(text="third", index=2, embedding=[3.0, 0.0]),
    ]
    assert [result.text for result in rank(QUERY, candidates)] == ["first", "second", "third"]


def test_rank_drops_zero_magnitude_candidates() -> None:
    candidates = [
        ChunkCandidate(text="empty", index=0, embedding=[0.0, 0.0]),
        _candidate("real", 1, 0.4),
    ]
    results = rank(QUERY, candidates)
    assert [result.text for result in results] == ["real"]


def test_rank_with_zero_query_vector_returns_nothing() -> None:
    assert rank([0.0, 0.0], [_candidate("a", 0, 0.9)]) == []


def test_rank_fails_fast_on_dimension_mismatch() -> None:
    candidates = [ChunkCandidate(text="bad", index=0, embedding=[1.0, 0.0, 0.0])]
    with pytest.raises(VectorDimensionError):
        rank(QUERY, candidates)


def test_format_context_empty_returns_sentinel() -> None:
    assert format_context([]) == "No relevant information found."
    assert NO_CONTEXT_FOUND == "No relevant information found."


def test_format_context_single_result() -> None:
    results = [
        SearchResult(
            text="Experienced software engineer with 5 years in web development.",
            index=0,
            similarity=0.95,
        )
    ]
    assert format_context(results) == (
        "[Context 1] (Relevance: 95.0%)\n"
        "Experienced software engineer with 5 years in web development."
    )


def test_format_context_renders_one_decimal_percentages() -> None:
    context = format_context(
        [
            SearchResult(text="a", index=0, similarity=0.875),
            SearchResult(text="b", index=1, similarity=0.15),
            SearchResult(text="c", index=2, similarity=1.0),
        ]
    )
    assert "(Relevance: 87.5%)" in context
    assert "(Relevance: 15.0%)" in context
    assert "(Relevance: 100.0%)" in context


def test_format_context_labels_follow_rank_not_chunk_index() -> None:
    results = [
        SearchResult(text="First", index=5, similarity=0.95),
        SearchResult(text="Second", index=2, similarity=0.9),
        SearchResult(text="Third", index=8, similarity=0.85),
    ]

    context = format_context(results)

    assert context.index("[Context 1]") < context.index("[Context 2]") < context.index("[Context 3]")
    assert context.index("[Context 1]") < context.index("First") < context.index("[Context 2]")
    assert "[Context 4]" not in context


def test_format_context_separates_blocks_with_blank_line() -> None:
    context = format_context(
        [
            SearchResult(text="First chunk", index=0, similarity=0.9),
            SearchResult(text="Second chunk", index=1, similarity=0.8),
        ]
    )
    assert "First chunk\n\n[Context 2]" in context


def test_format_context_preserves_chunk_text() -> None:
    text = "Multi-line\ncontent with\nspecial characters: $@#"
    context = format_context([SearchResult(text=text, index=0, similarity=0.9)])
    assert context.endswith("\n" + text)


def test_format_context_many_results() -> None:
    results = [
        SearchResult(text=f"Chunk {i + 1}", index=i, similarity=0.9 - i * 0.05)
        for i in range(10)
    ]
    context = format_context(results)
    for i in range(1, 11):
        assert f"[Context {i}]" in context
        assert f"Chunk {i}" in context
