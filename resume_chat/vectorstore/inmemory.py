from __future__ import annotations

"""In-memory chunk vector store for local testing and small deployments."""

from dataclasses import dataclass, field
from typing import Iterable

from resume_chat.rag.types import ChunkCandidate, ChunkRecord


@dataclass
class InMemoryVectorStore:
    """Chunk records keyed by resume ID."""
    records: dict[str, list[ChunkRecord]] = field(default_factory=dict)

    def replace(self, resume_id: str, records: Iterable[ChunkRecord]) -> int:
        """Replace all stored chunks for a resume."""
        stored = sorted(records, key=lambda record: record.chunk_index)
        if any(record.resume_id != resume_id for record in stored):
            raise ValueError("All records must belong to the resume being replaced")
        self.records[resume_id] = stored
        return len(stored)

    def candidates(self, resume_id: str) -> list[ChunkCandidate]:
        """Return stored chunks for a resume in chunk order."""
        return [
            ChunkCandidate(
                text=record.chunk_text,
                index=record.chunk_index,
                embedding=record.embedding,
            )
            for record in self.records.get(resume_id, [])
        ]

    def count(self, resume_id: str) -> int:
        """Return the number of chunks stored for a resume."""
        return len(self.records.get(resume_id, []))

    def delete(self, resume_id: str) -> int:
        """Delete all chunks for a resume."""
        return len(self.records.pop(resume_id, []))

    def stats(self) -> dict[str, int | str]:
        """Return basic stats for the vector store."""
        return {
            "backend": "memory",
            "resume_count": len(self.records),
            "chunk_count": sum(len(items) for items in self.records.values()),
        }

    def health(self) -> dict[str, str | bool]:
        """Return health information for the vector store."""
        return {
            "backend": "memory",
            "ok": True,
        }
