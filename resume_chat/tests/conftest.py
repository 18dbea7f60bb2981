from __future__ import annotations

"""Shared pytest fixtures and test environment defaults."""

import os
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ["RAG_ANSWERER"] = "extractive"
os.environ.pop("OPENAI_API_KEY", None)
os.environ["RAG_VECTORSTORE"] = "memory"
os.environ["EMBEDDING_PROVIDER"] = "hash"
os.environ["EMBEDDING_DIMENSION"] = "256"
os.environ.setdefault("RAG_CHUNK_SIZE", "500")
os.environ.setdefault("RAG_CHUNK_OVERLAP", "50")


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
