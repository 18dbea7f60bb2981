from __future__ import annotations

"""SQL-backed chunk vector store with client-side similarity search."""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    delete,
    func,
    select,
)
from sqlalchemy.exc import SQLAlchemyError

from resume_chat.rag.types import ChunkCandidate, ChunkRecord

logger = logging.getLogger(__name__)


class VectorStoreError(RuntimeError):
    """Raised when chunk persistence fails."""
    pass


class SQLVectorStore:
    """Store one row per chunk with its embedding serialized as JSON."""
    def __init__(self, connection_uri: str) -> None:
        """Initialize the store and ensure the embeddings table exists."""
        self._engine = create_engine(connection_uri)
        self._metadata = MetaData()
        self._table = Table(
            "embeddings",
            self._metadata,
            Column("id", String(36), primary_key=True),
            Column("resume_id", String(64), nullable=False, index=True),
            Column("chunk_index", Integer, nullable=False),
            Column("chunk_text", Text, nullable=False),
            Column("embedding", Text, nullable=False),
            Column("created_at", DateTime(timezone=True), nullable=False),
        )
        self._metadata.create_all(self._engine)

    def replace(self, resume_id: str, records: Iterable[ChunkRecord]) -> int:
        """Replace all stored chunks for a resume in one transaction."""
        created_at = datetime.now(timezone.utc)
        rows = []
        for record in records:
            if record.resume_id != resume_id:
                raise ValueError("All records must belong to the resume being replaced")
            rows.append(
                {
                    "id": str(uuid.uuid4()),
                    "resume_id": resume_id,
                    "chunk_index": record.chunk_index,
                    "chunk_text": record.chunk_text,
                    "embedding": json.dumps(record.embedding),
                    "created_at": created_at,
                }
            )
        try:
            with self._engine.begin() as conn:
                conn.execute(delete(self._table).where(self._table.c.resume_id == resume_id))
                if rows:
                    conn.execute(self._table.insert(), rows)
        except SQLAlchemyError as exc:
            logger.error(
                "vectorstore_replace_failed",
                extra={"resume_id": resume_id, "detail": type(exc).__name__},
            )
            raise VectorStoreError("Failed to store embeddings") from exc
        return len(rows)

    def candidates(self, resume_id: str) -> list[ChunkCandidate]:
        """Fetch stored chunks for a resume in chunk order."""
        query = (
            select(
                self._table.c.chunk_text,
                self._table.c.chunk_index,
                self._table.c.embedding,
            )
            .where(self._table.c.resume_id == resume_id)
            .order_by(self._table.c.chunk_index)
        )
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(query).all()
        except SQLAlchemyError as exc:
            raise VectorStoreError("Failed to search resume") from exc
        return [
            ChunkCandidate(
                text=row.chunk_text,
                index=row.chunk_index,
                embedding=json.loads(row.embedding),
            )
            for row in rows
        ]

    def count(self, resume_id: str) -> int:
        """Return the number of chunks stored for a resume."""
        query = select(func.count()).select_from(self._table).where(
            self._table.c.resume_id == resume_id
        )
        try:
            with self._engine.connect() as conn:
                return int(conn.execute(query).scalar_one())
        except SQLAlchemyError as exc:
            raise VectorStoreError("Failed to count embeddings") from exc

    def delete(self, resume_id: str) -> int:
        """Delete all chunks for a resume."""
        try:
            with self._engine.begin() as conn:
                result = conn.execute(
                    delete(self._table).where(self._table.c.resume_id == resume_id)
                )
        except SQLAlchemyError as exc:
            logger.error(
                "vectorstore_delete_failed",
                extra={"resume_id": resume_id, "detail": type(exc).__name__},
            )
            raise VectorStoreError("Failed to delete embeddings") from exc
        return result.rowcount or 0

    def stats(self) -> dict[str, int | str]:
        """Return row counts for the embeddings table."""
        try:
            with self._engine.connect() as conn:
                chunk_count = conn.execute(
                    select(func.count()).select_from(self._table)
                ).scalar_one()
                resume_count = conn.execute(
                    select(func.count(func.distinct(self._table.c.resume_id)))
                ).scalar_one()
        except SQLAlchemyError as exc:
            raise VectorStoreError("Failed to read embedding stats") from exc
        return {
            "backend": "sql",
            "resume_count": int(resume_count),
            "chunk_count": int(chunk_count),
        }

    def health(self) -> dict[str, str | bool]:
        """Check that the database answers a trivial query."""
        try:
            with self._engine.connect() as conn:
                conn.execute(select(1))
        except SQLAlchemyError as exc:
            return {"backend": "sql", "ok": False, "detail": type(exc).__name__}
        return {"backend": "sql", "ok": True}
