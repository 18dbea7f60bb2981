from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    resume_id: str
    share_slug: str
    summary: str
    characters: int
    estimated_tokens: int


class EmbeddingsResponse(BaseModel):
    resume_id: str
    chunks_processed: int
    created: bool
    message: str


class ResumeResponse(BaseModel):
    resume_id: str
    share_slug: str
    file_name: str
    owner_name: str | None = None
    summary: str


class SearchRequest(BaseModel):
    query: str = Field(min_length=1)
    limit: int | None = Field(default=None, ge=0, le=50)


class SearchHit(BaseModel):
    text: str
    index: int
    similarity: float


class SearchResponse(BaseModel):
    results: list[SearchHit]
    context: str


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class ChatRequest(BaseModel):
    resume_id: str = Field(min_length=1)
    messages: list[ChatMessage] = Field(default_factory=list)


class ChatResponse(BaseModel):
    answer: str
    sources: list[SearchHit]
    context: str
    answerer: str
    request_id: str


class StatsResponse(BaseModel):
    backend: str
    resume_count: int
    chunk_count: int


class StatsHealthResponse(BaseModel):
    backend: str
    ok: bool
    detail: str | None = None


class EmbeddingHealthResponse(BaseModel):
    provider: str
    model: str | None
    configured_dimension: int
    expected_dimension: int | None = None
    ok: bool
    status: str
    detail: str | None = None
    action: str | None = None


class DeleteResumeResponse(BaseModel):
    resume_id: str
    deleted_chunks: int
