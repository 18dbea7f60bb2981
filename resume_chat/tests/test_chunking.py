from __future__ import annotations

"""Chunking behavior tests."""

import re

import pytest

from resume_chat.loaders.chunking import (
    DEFAULT_CHUNK_CONFIG,
    ChunkConfig,
    ChunkConfigError,
    chunk_document,
    chunk_text,
    estimate_token_count,
)

RESUME_TEXT = """JOHN DOE
Software Engineer

SUMMARY
Experienced software engineer with 5 years in web development.
Specialized in React, Node.js, and cloud technologies.

EXPERIENCE
Senior Developer at Tech Corp (2020-Present)
- Led team of 5 developers
- Built scalable microservices
- Reduced deployment time by 50%

Developer at StartupCo (2018-2020)
- Developed React applications
- Integrated third-party APIs
- Improved performance metrics

EDUCATION
BS Computer Science, University of Technology (2018)

SKILLS
JavaScript, TypeScript, React, Node.js, AWS, Docker, PostgreSQL"""


def test_empty_and_whitespace_text_yield_no_chunks() -> None:
    assert chunk_text("") == []
    assert chunk_text("   ") == []
    assert chunk_text("\n\n\n") == []


def test_short_text_is_a_single_chunk() -> None:
    text = "This is a short resume."
    assert chunk_text(text) == [text]


def test_paragraphs_that_fit_stay_together() -> None:
    text = "Paragraph 1: Short text.\n\nParagraph 2: Another short text."
    assert chunk_text(text) == [text]


def test_blank_line_runs_split_paragraphs_and_single_newlines_do_not() -> None:
    text = "Line 1\nLine 2\n\nParagraph 2\n\n\nParagraph 3"
    chunks = chunk_text(text, ChunkConfig(max_chunk_size=15, overlap=0))
    assert chunks == ["Line 1\nLine 2", "Paragraph 2", "Paragraph 3"]


def test_two_long_paragraphs_overlap_at_boundaries() -> None:
    text = "A" * 300 + "\n\n" + "B" * 300
    config = ChunkConfig(max_chunk_size=200, overlap=20)

    chunks = chunk_text(text, config)

    assert len(chunks) >= 2
    assert all(len(chunk) <= 200 for chunk in chunks)
    for previous, current in zip(chunks, chunks[1:]):
        tail = previous[-20:]
        assert current.startswith(tail)
    assert "A" * 20 + " " + "B" in "".join(chunks)


def test_unbreakable_run_is_cut_at_max_size_with_exact_overlap() -> None:
    text = "".join(chr(ord("a") + (i % 26)) for i in range(1000))
    config = ChunkConfig(max_chunk_size=200, overlap=20)

    chunks = chunk_text(text, config)

    assert [len(chunk) for chunk in chunks[:-1]] == [200] * (len(chunks) - 1)
    for previous, current in zip(chunks, chunks[1:]):
        assert previous[-20:] == current[:20]
    assert chunks[-1].endswith(text[-20:])


def test_force_split_never_emits_overlap_only_tail() -> None:
    text = "x" * 380
    chunks = chunk_text(text, ChunkConfig(max_chunk_size=200, overlap=20))
    assert chunks == ["x" * 200, "x" * 200]


def test_long_paragraph_splits_on_word_boundaries() -> None:
    text = "Word " * 200
    config = ChunkConfig(max_chunk_size=100, overlap=10)

    chunks = chunk_text(text, config)

    assert len(chunks) > 1
    for chunk in chunks:
        assert len(chunk) <= 100
        assert re.fullmatch(r"Word( Word)*", chunk)


def test_chunks_are_trimmed_and_non_empty() -> None:
    chunks = chunk_text("  Paragraph 1  \n\n  Paragraph 2  ", ChunkConfig(max_chunk_size=12, overlap=2))
    assert chunks
    for chunk in chunks:
        assert chunk == chunk.strip()
        assert chunk


def test_every_word_is_covered() -> None:
    chunks = chunk_text(RESUME_TEXT, ChunkConfig(max_chunk_size=120, overlap=15))
    combined = " ".join(chunks)
    for word in RESUME_TEXT.split():
        assert word in combined


def test_zero_overlap_does_not_repeat_previous_chunk() -> None:
    text = "first paragraph here\n\nsecond paragraph here"
    chunks = chunk_text(text, ChunkConfig(max_chunk_size=25, overlap=0))
    assert chunks == ["first paragraph here", "second paragraph here"]


def test_real_resume_with_default_config() -> None:
    chunks = chunk_text(RESUME_TEXT)
    assert chunks
    for chunk in chunks:
        assert len(chunk) > 10
        assert len(chunk) <= DEFAULT_CHUNK_CONFIG.max_chunk_size


def test_chunk_document_assigns_sequential_indices() -> None:
    chunks = chunk_document("A" * 1000, ChunkConfig(max_chunk_size=200, overlap=20))
    assert [chunk.index for chunk in chunks] == list(range(len(chunks)))
    assert all(chunk.text for chunk in chunks)


@pytest.mark.parametrize(
    ("max_chunk_size", "overlap"),
    [(0, 0), (-5, 0), (100, 100), (100, 150), (100, -1)],
)
def test_invalid_config_is_rejected(max_chunk_size: int, overlap: int) -> None:
    with pytest.raises(ChunkConfigError):
        ChunkConfig(max_chunk_size=max_chunk_size, overlap=overlap)


def test_default_config_is_sensible() -> None:
    assert 0 < DEFAULT_CHUNK_CONFIG.overlap < DEFAULT_CHUNK_CONFIG.max_chunk_size
    assert DEFAULT_CHUNK_CONFIG.max_chunk_size < 2000


def test_estimate_token_count() -> None:
    assert estimate_token_count("") == 0
    assert estimate_token_count("This is a test") == 4
    assert estimate_token_count("A" * 400) == 100
    assert estimate_token_count("A" * 401) == 101
