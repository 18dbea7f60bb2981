from __future__ import annotations

"""Paragraph-aware text chunking with character overlap."""

import math
import re
from dataclasses import dataclass

from resume_chat.rag.types import Chunk

_PARAGRAPH_RE = re.compile(r"\n\n+")


class ChunkConfigError(ValueError):
    """Raised when chunk size and overlap are inconsistent."""
    pass


@dataclass(frozen=True)
class ChunkConfig:
    """Chunk size limits in characters."""
    max_chunk_size: int = 500
    overlap: int = 50

    def __post_init__(self) -> None:
        """Reject sizes the chunker cannot make progress with."""
        if self.max_chunk_size <= 0:
            raise ChunkConfigError("max_chunk_size must be greater than zero")
        if self.overlap < 0:
            raise ChunkConfigError("overlap must not be negative")
        if self.overlap >= self.max_chunk_size:
            raise ChunkConfigError(
                f"overlap ({self.overlap}) must be smaller than "
                f"max_chunk_size ({self.max_chunk_size})"
            )


# About 125 tokens per chunk.
DEFAULT_CHUNK_CONFIG = ChunkConfig()


def chunk_text(text: str, config: ChunkConfig = DEFAULT_CHUNK_CONFIG) -> list[str]:
    """Split text into overlapping chunks, keeping paragraphs together where possible."""
    if not text or not text.strip():
        return []
    max_size = config.max_chunk_size
    overlap = config.overlap
    paragraphs = [part.strip() for part in _PARAGRAPH_RE.split(text) if part.strip()]

    chunks: list[str] = []
    current = ""
    for paragraph in paragraphs:
        if current and len(current) + len(paragraph) > max_size:
            chunks.append(current.strip())
            tail = current[-overlap:] if overlap else ""
            current = f"{tail} {paragraph}" if tail else paragraph
        else:
            current = f"{current}\n\n{paragraph}" if current else paragraph

        if len(current) > max_size:
            pieces = _force_split(current, max_size, overlap)
            chunks.extend(pieces[:-1])
            current = pieces[-1] if pieces else ""

    if current.strip():
        chunks.append(current.strip())
    return chunks


def _force_split(text: str, max_size: int, overlap: int) -> list[str]:
    """Split an oversized chunk on word boundaries with a fixed overlap."""
    pieces: list[str] = []
    start = 0
    length = len(text)
    while start < length:
        end = start + max_size
        if end < length:
            last_space = text.rfind(" ", start, end + 1)
            if last_space > start and last_space - overlap > start:
                end = last_space
        piece = text[start:end].strip()
        if piece:
            pieces.append(piece)
        if end >= length:
            break
        start = end - overlap
    return pieces


def chunk_document(text: str, config: ChunkConfig = DEFAULT_CHUNK_CONFIG) -> list[Chunk]:
    """Chunk text and attach zero-based chunk indices."""
    return [Chunk(text=piece, index=idx) for idx, piece in enumerate(chunk_text(text, config))]


def estimate_token_count(text: str) -> int:
    """Approximate token count at four characters per token."""
    return math.ceil(len(text) / 4)
