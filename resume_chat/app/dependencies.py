from __future__ import annotations

from functools import lru_cache

from resume_chat.app.settings import settings
from resume_chat.rag.answerer import ExtractiveAnswerer
from resume_chat.rag.embeddings import (
    EmbeddingConfigError,
    EmbeddingConfigReport,
    EmbeddingProvider,
    HashEmbedder,
    OpenAIEmbedder,
    build_embedding_config_report,
)
from resume_chat.rag.llm import OpenAIChatAnswerer, build_llm_answerer
from resume_chat.rag.pipeline import ResumeRAGPipeline
from resume_chat.resumes.store import InMemoryResumeStore, ResumeStore, SQLResumeStore
from resume_chat.vectorstore.inmemory import InMemoryVectorStore
from resume_chat.vectorstore.sql import SQLVectorStore


@lru_cache
def get_pipeline() -> ResumeRAGPipeline:
    embedder = build_embedder()
    return ResumeRAGPipeline(
        embedder=embedder,
        vectorstore=build_vectorstore(),
        answerer=ExtractiveAnswerer(),
        llm=build_llm(),
        chunk_config=settings.chunk_config,
        max_chunks=settings.max_chunks,
    )


@lru_cache
def get_resume_store() -> ResumeStore:
    if settings.vectorstore_backend.lower().strip() == "sql":
        return SQLResumeStore(_require_database_uri())
    return InMemoryResumeStore()


def reset_pipeline_cache() -> None:
    get_pipeline.cache_clear()
    get_resume_store.cache_clear()


def get_embedding_config_report() -> EmbeddingConfigReport:
    provider = settings.embedding_provider
    model = None
    if provider.lower().strip() == "openai":
        model = settings.openai_embedding_model
    return build_embedding_config_report(provider, model, settings.embedding_dimension)


def build_embedder() -> EmbeddingProvider:
    provider = settings.embedding_provider.lower().strip()
    if provider == "hash":
        return HashEmbedder(dimension=settings.embedding_dimension)
    if provider == "openai":
        return OpenAIEmbedder(
            api_key=settings.openai_api_key or "",
            model=settings.openai_embedding_model,
            dimension=settings.embedding_dimension,
            batch_size=settings.openai_embedding_batch_size,
        )
    raise EmbeddingConfigError(f"Unsupported embedding provider: {provider}")


def build_vectorstore() -> InMemoryVectorStore | SQLVectorStore:
    backend = settings.vectorstore_backend.lower().strip()
    if backend == "sql":
        return SQLVectorStore(_require_database_uri())
    return InMemoryVectorStore()


def build_llm() -> OpenAIChatAnswerer | None:
    if settings.answerer_mode != "llm":
        return None
    return build_llm_answerer(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        model=settings.openai_chat_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
        timeout=settings.llm_timeout,
    )


def _require_database_uri() -> str:
    if not settings.database_uri:
        raise RuntimeError("RAG_DATABASE_URI is required when RAG_VECTORSTORE=sql")
    return settings.database_uri
