from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from resume_chat.loaders.chunking import ChunkConfig

load_dotenv()


@dataclass(frozen=True)
class Settings:
    log_level: str = os.getenv("RAG_LOG_LEVEL", "INFO")
    chunk_size: int = int(os.getenv("RAG_CHUNK_SIZE", "500"))
    chunk_overlap: int = int(os.getenv("RAG_CHUNK_OVERLAP", "50"))
    max_chunks: int = int(os.getenv("RAG_MAX_CHUNKS", "5"))
    vectorstore_backend: str = os.getenv("RAG_VECTORSTORE", "memory")
    database_uri: str | None = os.getenv("RAG_DATABASE_URI")
    embedding_provider: str = os.getenv("EMBEDDING_PROVIDER", "hash")
    embedding_dimension: int = int(os.getenv("EMBEDDING_DIMENSION", "256"))
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    openai_embedding_model: str = os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-3-small")
    openai_embedding_batch_size: int = int(os.getenv("OPENAI_EMBEDDING_BATCH_SIZE", "2048"))
    openai_chat_model: str = os.getenv("OPENAI_CHAT_MODEL", "gpt-4-turbo")
    answerer_mode: str = os.getenv("RAG_ANSWERER", "extractive").strip().lower()
    llm_temperature: float = float(os.getenv("RAG_LLM_TEMPERATURE", "0.7"))
    llm_max_tokens: int = int(os.getenv("RAG_LLM_MAX_TOKENS", "500"))
    llm_timeout: float = float(os.getenv("RAG_LLM_TIMEOUT", "60"))
    file_max_bytes: int = int(os.getenv("RAG_FILE_MAX_BYTES", str(5 * 1024 * 1024)))
    metrics_enabled: bool = os.getenv("RAG_METRICS_ENABLED", "true").lower() in {"1", "true", "yes"}

    @property
    def chunk_config(self) -> ChunkConfig:
        return ChunkConfig(max_chunk_size=self.chunk_size, overlap=self.chunk_overlap)


settings = Settings()
