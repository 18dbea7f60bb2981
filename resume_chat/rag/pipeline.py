from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

from resume_chat.loaders.chunking import DEFAULT_CHUNK_CONFIG, ChunkConfig, chunk_document
from resume_chat.rag.answerer import ExtractiveAnswerer
from resume_chat.rag.embeddings import EmbeddingError, EmbeddingProvider
from resume_chat.rag.llm import LLMError, OpenAIChatAnswerer, build_system_prompt
from resume_chat.rag.retrieval import DEFAULT_LIMIT, format_context, rank
from resume_chat.rag.types import ChunkCandidate, ChunkRecord, SearchResult

logger = logging.getLogger(__name__)


class EmptyDocumentError(ValueError):
    """Raised when a resume has no text to chunk."""
    pass


class InvalidChatError(ValueError):
    """Raised when a chat transcript cannot be answered."""
    pass


class ChunkVectorStore(Protocol):
    def replace(self, resume_id: str, records: list[ChunkRecord]) -> int: ...

    def candidates(self, resume_id: str) -> list[ChunkCandidate]: ...

    def count(self, resume_id: str) -> int: ...

    def delete(self, resume_id: str) -> int: ...


@dataclass(frozen=True)
class IndexResult:
    chunks: int
    created: bool


@dataclass
class ChatAnswer:
    answer: str
    sources: list[SearchResult]
    context: str
    answerer: str


def latest_user_message(messages: list[dict[str, str]]) -> str:
    if not messages:
        raise InvalidChatError("Messages are required")
    latest = messages[-1]
    if latest.get("role") != "user":
        raise InvalidChatError("Latest message must be from user")
    content = (latest.get("content") or "").strip()
    if not content:
        raise InvalidChatError("Latest message must not be empty")
    return content


@dataclass
class ResumeRAGPipeline:
    embedder: EmbeddingProvider
    vectorstore: ChunkVectorStore
    answerer: ExtractiveAnswerer = field(default_factory=ExtractiveAnswerer)
    llm: OpenAIChatAnswerer | None = None
    chunk_config: ChunkConfig = DEFAULT_CHUNK_CONFIG
    max_chunks: int = DEFAULT_LIMIT

    def index_resume(self, resume_id: str, text: str, replace: bool = False) -> IndexResult:
        """Chunk, embed and store a resume unless it is already indexed."""
        existing = self.vectorstore.count(resume_id)
        if existing and not replace:
            logger.info(
                "resume_already_indexed",
                extra={"resume_id": resume_id, "chunks": existing},
            )
            return IndexResult(chunks=existing, created=False)
        chunks = chunk_document(text, self.chunk_config)
        if not chunks:
            raise EmptyDocumentError("No text to embed")
        vectors = self.embedder.embed_batch([chunk.text for chunk in chunks])
        if len(vectors) != len(chunks):
            raise EmbeddingError(
                f"Expected {len(chunks)} embeddings, got {len(vectors)}"
            )
        records = [
            ChunkRecord(
                resume_id=resume_id,
                chunk_index=chunk.index,
                chunk_text=chunk.text,
                embedding=vector,
            )
            for chunk, vector in zip(chunks, vectors)
        ]
        stored = self.vectorstore.replace(resume_id, records)
        logger.info(
            "resume_indexed",
            extra={"resume_id": resume_id, "chunks": stored, "replaced": bool(existing)},
        )
        return IndexResult(chunks=stored, created=True)

    def search(self, resume_id: str, query: str, limit: int | None = None) -> list[SearchResult]:
        """Embed the query and rank the resume's stored chunks."""
        query_embedding = self.embedder.embed(query)
        candidates = self.vectorstore.candidates(resume_id)
        results = rank(
            query_embedding,
            candidates,
            limit=self.max_chunks if limit is None else limit,
        )
        logger.info(
            "retrieval_complete",
            extra={
                "resume_id": resume_id,
                "candidates": len(candidates),
                "results": len(results),
                "query_length": len(query),
            },
        )
        return results

    async def answer(
        self,
        resume_id: str,
        messages: list[dict[str, str]],
        summary: str | None = None,
    ) -> ChatAnswer:
        """Answer the latest user message from the resume's most relevant chunks."""
        question = latest_user_message(messages)
        results = self.search(resume_id, question)
        context = format_context(results)
        if self.llm is not None:
            system_prompt = build_system_prompt(summary, context)
            try:
                reply = await self.llm.generate(system_prompt, messages)
            except LLMError as exc:
                logger.error(
                    "llm_failed",
                    extra={"resume_id": resume_id, "detail": type(exc).__name__},
                )
            else:
                return ChatAnswer(answer=reply, sources=results, context=context, answerer="llm")
        reply = self.answerer.generate(question, results)
        return ChatAnswer(answer=reply, sources=results, context=context, answerer="extractive")

    def delete_resume(self, resume_id: str) -> int:
        return self.vectorstore.delete(resume_id)
