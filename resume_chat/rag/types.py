from __future__ import annotations

"""Core data types for resume chunks and retrieval."""

from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class Chunk:
    """Trimmed slice of a resume prepared for embedding."""
    text: str
    index: int


@dataclass(frozen=True)
class ChunkRecord:
    """Stored chunk with its embedding vector."""
    resume_id: str
    chunk_index: int
    chunk_text: str
    embedding: list[float]


@dataclass(frozen=True)
class ChunkCandidate:
    """Chunk considered for ranking against a query embedding."""
    text: str
    index: int
    embedding: Sequence[float]


@dataclass(frozen=True)
class SearchResult:
    """Ranked chunk with its cosine similarity to the query."""
    text: str
    index: int
    similarity: float
