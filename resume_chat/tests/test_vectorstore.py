from __future__ import annotations

"""Chunk vector store tests for the in-memory and SQL backends."""

import pytest
from sqlalchemy import create_engine

from resume_chat.rag.embeddings import HashEmbedder
from resume_chat.rag.pipeline import ResumeRAGPipeline
from resume_chat.rag.types import ChunkRecord
from resume_chat.vectorstore.inmemory import InMemoryVectorStore
from resume_chat.vectorstore.sql import SQLVectorStore, VectorStoreError


def _records(resume_id: str, count: int) -> list[ChunkRecord]:
    return [
        ChunkRecord(
            resume_id=resume_id,
            chunk_index=idx,
            chunk_text=f"chunk {idx}",
            embedding=[float(idx), 1.0],
        )
        for idx in range(count)
    ]


@pytest.fixture(params=["memory", "sql"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemoryVectorStore()
    return SQLVectorStore(f"sqlite:///{tmp_path / 'vectors.db'}")


def test_replace_and_fetch_candidates_in_chunk_order(store) -> None:
    records = list(reversed(_records("resume-1", 3)))

    assert store.replace("resume-1", records) == 3

    candidates = store.candidates("resume-1")
    assert [candidate.index for candidate in candidates] == [0, 1, 2]
    assert [candidate.text for candidate in candidates] == ["chunk 0", "chunk 1", "chunk 2"]
    assert list(candidates[2].embedding) == [2.0, 1.0]


def test_replace_overwrites_previous_chunks(store) -> None:
    store.replace("resume-1", _records("resume-1", 4))
    store.replace("resume-1", _records("resume-1", 2))
    assert store.count("resume-1") == 2


def test_resumes_are_isolated(store) -> None:
    store.replace("resume-1", _records("resume-1", 2))
    store.replace("resume-2", _records("resume-2", 3))

    assert store.count("resume-1") == 2
    assert store.count("resume-2") == 3
    assert store.candidates("missing") == []
    stats = store.stats()
    assert stats["resume_count"] == 2
    assert stats["chunk_count"] == 5


def test_delete_removes_only_that_resume(store) -> None:
    store.replace("resume-1", _records("resume-1", 2))
    store.replace("resume-2", _records("resume-2", 1))

    assert store.delete("resume-1") == 2
    assert store.count("resume-1") == 0
    assert store.count("resume-2") == 1


def test_replace_rejects_foreign_records(store) -> None:
    with pytest.raises(ValueError):
        store.replace("resume-1", _records("resume-2", 1))


def test_health_reports_ok(store) -> None:
    assert store.health()["ok"] is True


def _drop_table(uri: str, table: str) -> None:
    with create_engine(uri).begin() as conn:
        conn.exec_driver_sql(f"DROP TABLE {table}")


def test_sql_failures_are_wrapped(tmp_path) -> None:
    uri = f"sqlite:///{tmp_path / 'vectors.db'}"
    store = SQLVectorStore(uri)
    _drop_table(uri, "embeddings")

    with pytest.raises(VectorStoreError):
        store.count("resume-1")
    with pytest.raises(VectorStoreError):
        store.candidates("resume-1")
    with pytest.raises(VectorStoreError):
        store.delete("resume-1")
    with pytest.raises(VectorStoreError):
        store.stats()
    with pytest.raises(VectorStoreError):
        store.replace("resume-1", _records("resume-1", 1))
    assert store.health()["ok"] is True


def test_indexing_against_broken_database_raises_store_error(tmp_path) -> None:
    uri = f"sqlite:///{tmp_path / 'vectors.db'}"
    pipeline = ResumeRAGPipeline(embedder=HashEmbedder(), vectorstore=SQLVectorStore(uri))
    _drop_table(uri, "embeddings")

    with pytest.raises(VectorStoreError):
        pipeline.index_resume("resume-1", "Python developer with ten years of experience.")
