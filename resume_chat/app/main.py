from __future__ import annotations

"""FastAPI application entrypoint for the resume chat service."""

import logging
import uuid

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile

from resume_chat.app.dependencies import (
    get_embedding_config_report,
    get_pipeline,
    get_resume_store,
)
from resume_chat.app.metrics import (
    metrics_middleware,
    metrics_response,
    record_chat_answer,
    record_chunks_indexed,
)
from resume_chat.app.schemas import (
    ChatRequest,
    ChatResponse,
    DeleteResumeResponse,
    EmbeddingHealthResponse,
    EmbeddingsResponse,
    ResumeResponse,
    SearchHit,
    SearchRequest,
    SearchResponse,
    StatsHealthResponse,
    StatsResponse,
    UploadResponse,
)
from resume_chat.app.settings import settings
from resume_chat.loaders.chunking import estimate_token_count
from resume_chat.loaders.docx import DocxLoaderError
from resume_chat.loaders.files import (
    MIN_RESUME_TEXT_CHARS,
    extract_resume_text,
    resolve_content_type,
    validate_resume_file,
)
from resume_chat.loaders.pdf import PDFLoaderError
from resume_chat.rag.embeddings import EmbeddingError
from resume_chat.rag.pipeline import (
    EmptyDocumentError,
    InvalidChatError,
    latest_user_message,
)
from resume_chat.rag.retrieval import format_context
from resume_chat.rag.similarity import VectorDimensionError
from resume_chat.rag.types import SearchResult
from resume_chat.resumes.slug import generate_slug, is_valid_slug
from resume_chat.resumes.store import ResumeRecord, ResumeStoreError, new_resume
from resume_chat.vectorstore.sql import VectorStoreError

logger = logging.getLogger(__name__)

app = FastAPI(title="Resume Chat", version="0.1.0")


def _configure_logging() -> None:
    """Configure root logging using environment settings."""
    level_name = settings.log_level.strip().upper()
    level = getattr(logging, level_name, logging.INFO)
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
    logger.setLevel(level)


_configure_logging()


def _safe_error_message(exc: Exception) -> str:
    """Return a safe error type name for logs and responses."""
    return type(exc).__name__


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


def _lookup_resume(resume_id: str | None = None, slug: str | None = None) -> ResumeRecord | None:
    store = get_resume_store()
    try:
        return store.get_by_slug(slug) if slug is not None else store.get(resume_id)
    except ResumeStoreError as exc:
        logger.error(
            "resume_lookup_failed",
            extra={"resume_id": resume_id, "detail": _safe_error_message(exc)},
        )
        raise HTTPException(status_code=500, detail="Failed to load resume") from exc


def _get_resume_or_404(resume_id: str) -> ResumeRecord:
    resume = _lookup_resume(resume_id)
    if resume is None:
        raise HTTPException(status_code=404, detail="Resume not found")
    return resume


def _to_hits(results: list[SearchResult]) -> list[SearchHit]:
    return [
        SearchHit(text=result.text, index=result.index, similarity=result.similarity)
        for result in results
    ]


async def _read_upload_bytes(upload: UploadFile, max_bytes: int | None) -> bytes:
    """Stream upload bytes with a hard size limit."""
    if not max_bytes or max_bytes <= 0:
        return await upload.read()
    buffer = bytearray()
    while True:
        chunk = await upload.read(65536)
        if not chunk:
            break
        buffer.extend(chunk)
        if len(buffer) > max_bytes:
            raise HTTPException(
                status_code=400,
                detail=f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB.",
            )
    return bytes(buffer)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Attach or create a request ID for traceability."""
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.middleware("http")
async def record_metrics(request: Request, call_next):
    """Capture request metrics before returning the response."""
    return await metrics_middleware(request, call_next)


@app.get("/metrics")
async def metrics():
    """Expose Prometheus-style metrics."""
    return metrics_response()


@app.get("/health")
async def health() -> dict[str, str]:
    """Simple health probe for uptime checks."""
    return {"status": "ok"}


@app.get("/stats", response_model=StatsResponse)
async def stats() -> StatsResponse:
    """Return vector store stats."""
    pipeline = get_pipeline()
    try:
        return StatsResponse(**pipeline.vectorstore.stats())
    except VectorStoreError as exc:
        logger.error("stats_failed", extra={"detail": _safe_error_message(exc)})
        raise HTTPException(status_code=500, detail="Failed to read stats") from exc


@app.get("/stats/health", response_model=StatsHealthResponse)
async def stats_health() -> StatsHealthResponse:
    """Return vector store health status."""
    pipeline = get_pipeline()
    return StatsHealthResponse(**pipeline.vectorstore.health())


@app.get("/stats/embedding", response_model=EmbeddingHealthResponse)
async def embedding_health() -> EmbeddingHealthResponse:
    """Return embedding configuration health checks."""
    report = get_embedding_config_report()
    return EmbeddingHealthResponse(**report.__dict__)


@app.post("/resumes/upload", response_model=UploadResponse)
async def upload_resume(
    http_request: Request,
    file: UploadFile | None = File(None),
    name: str | None = Form(None),
) -> UploadResponse:
    """Validate an uploaded resume, extract its text and store it."""
    request_id = _request_id(http_request)
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")
    data = await _read_upload_bytes(file, settings.file_max_bytes)
    content_type = resolve_content_type(file.filename, file.content_type)
    validation = validate_resume_file(
        file.filename, content_type, len(data), max_bytes=settings.file_max_bytes
    )
    if not validation.valid:
        raise HTTPException(status_code=400, detail=validation.error)

    try:
        raw_text = extract_resume_text(data, content_type)
    except (PDFLoaderError, DocxLoaderError) as exc:
        logger.error(
            "resume_parse_failed",
            extra={
                "request_id": request_id,
                "file_name": file.filename,
                "detail": _safe_error_message(exc),
            },
        )
        raise HTTPException(
            status_code=400,
            detail="Failed to parse file. Please ensure it is a valid resume file.",
        ) from exc

    if len(raw_text) < MIN_RESUME_TEXT_CHARS:
        raise HTTPException(
            status_code=400,
            detail="Could not extract enough text from file. Please try a different format.",
        )

    record = new_resume(
        raw_text=raw_text,
        file_name=file.filename or "resume",
        share_slug=generate_slug(name),
        owner_name=name,
    )
    try:
        get_resume_store().create(record)
    except ResumeStoreError as exc:
        logger.error(
            "resume_save_failed",
            extra={"request_id": request_id, "detail": _safe_error_message(exc)},
        )
        raise HTTPException(status_code=500, detail="Failed to save resume") from exc

    logger.info(
        "resume_uploaded",
        extra={
            "request_id": request_id,
            "resume_id": record.id,
            "characters": len(raw_text),
            "content_type": content_type,
        },
    )
    return UploadResponse(
        resume_id=record.id,
        share_slug=record.share_slug,
        summary=record.summary,
        characters=len(raw_text),
        estimated_tokens=estimate_token_count(raw_text),
    )


@app.get("/resumes/by-slug/{slug}", response_model=ResumeResponse)
async def resume_by_slug(slug: str) -> ResumeResponse:
    """Look up a shared resume by its public slug."""
    if not is_valid_slug(slug):
        raise HTTPException(status_code=400, detail="Invalid share link")
    resume = _lookup_resume(slug=slug)
    if resume is None:
        raise HTTPException(status_code=404, detail="Resume not found")
    return ResumeResponse(
        resume_id=resume.id,
        share_slug=resume.share_slug,
        file_name=resume.file_name,
        owner_name=resume.owner_name,
        summary=resume.summary,
    )


@app.post("/resumes/{resume_id}/embeddings", response_model=EmbeddingsResponse)
async def generate_embeddings(
    resume_id: str,
    http_request: Request,
    replace: bool = False,
) -> EmbeddingsResponse:
    """Chunk and embed a stored resume so it can be searched."""
    request_id = _request_id(http_request)
    resume = _get_resume_or_404(resume_id)
    pipeline = get_pipeline()
    try:
        result = pipeline.index_resume(resume.id, resume.raw_text, replace=replace)
    except EmptyDocumentError as exc:
        raise HTTPException(status_code=400, detail="No text to embed") from exc
    except (EmbeddingError, VectorStoreError) as exc:
        logger.error(
            "embedding_generation_failed",
            extra={
                "request_id": request_id,
                "resume_id": resume_id,
                "detail": _safe_error_message(exc),
            },
        )
        raise HTTPException(status_code=500, detail="Failed to generate embeddings") from exc

    if not result.created:
        return EmbeddingsResponse(
            resume_id=resume_id,
            chunks_processed=result.chunks,
            created=False,
            message="Embeddings already exist for this resume",
        )
    record_chunks_indexed(result.chunks)
    return EmbeddingsResponse(
        resume_id=resume_id,
        chunks_processed=result.chunks,
        created=True,
        message="Embeddings generated successfully",
    )


@app.delete("/resumes/{resume_id}", response_model=DeleteResumeResponse)
async def delete_resume(resume_id: str, http_request: Request) -> DeleteResumeResponse:
    """Delete a resume together with its stored chunks and chat log."""
    request_id = _request_id(http_request)
    resume = _get_resume_or_404(resume_id)
    pipeline = get_pipeline()
    try:
        deleted_chunks = pipeline.delete_resume(resume.id)
        get_resume_store().delete(resume.id)
    except (VectorStoreError, ResumeStoreError) as exc:
        logger.error(
            "resume_delete_failed",
            extra={
                "request_id": request_id,
                "resume_id": resume_id,
                "detail": _safe_error_message(exc),
            },
        )
        raise HTTPException(status_code=500, detail="Failed to delete resume") from exc
    logger.info(
        "resume_deleted",
        extra={"request_id": request_id, "resume_id": resume_id, "chunks": deleted_chunks},
    )
    return DeleteResumeResponse(resume_id=resume_id, deleted_chunks=deleted_chunks)


@app.post("/resumes/{resume_id}/search", response_model=SearchResponse)
async def search_resume(
    resume_id: str,
    request: SearchRequest,
    http_request: Request,
) -> SearchResponse:
    """Rank a resume's chunks against a query and return the prompt context."""
    _get_resume_or_404(resume_id)
    pipeline = get_pipeline()
    try:
        results = pipeline.search(resume_id, request.query, limit=request.limit)
    except (EmbeddingError, VectorStoreError, VectorDimensionError) as exc:
        logger.error(
            "search_failed",
            extra={
                "request_id": _request_id(http_request),
                "resume_id": resume_id,
                "detail": _safe_error_message(exc),
            },
        )
        raise HTTPException(status_code=500, detail="Failed to search resume") from exc
    return SearchResponse(results=_to_hits(results), context=format_context(results))


@app.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, http_request: Request) -> ChatResponse:
    """Answer a recruiter's question about a resume."""
    request_id = _request_id(http_request)
    if not request.messages:
        raise HTTPException(status_code=400, detail="Messages are required")
    resume = _get_resume_or_404(request.resume_id)
    pipeline = get_pipeline()
    messages = [message.model_dump() for message in request.messages]
    try:
        question = latest_user_message(messages)
    except InvalidChatError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    try:
        get_resume_store().record_chat(resume.id, question)
    except ResumeStoreError as exc:
        logger.error(
            "chat_log_failed",
            extra={
                "request_id": request_id,
                "resume_id": resume.id,
                "detail": _safe_error_message(exc),
            },
        )
    try:
        result = await pipeline.answer(resume.id, messages, summary=resume.summary)
    except InvalidChatError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except (EmbeddingError, VectorStoreError, VectorDimensionError) as exc:
        logger.error(
            "chat_failed",
            extra={
                "request_id": request_id,
                "resume_id": resume.id,
                "detail": _safe_error_message(exc),
            },
        )
        raise HTTPException(status_code=500, detail="Internal server error") from exc

    top_similarity = result.sources[0].similarity if result.sources else None
    record_chat_answer(result.answerer, top_similarity)
    logger.info(
        "chat_answered",
        extra={
            "request_id": request_id,
            "resume_id": resume.id,
            "answerer": result.answerer,
            "sources": len(result.sources),
            "top_similarity": top_similarity,
        },
    )
    return ChatResponse(
        answer=result.answer,
        sources=_to_hits(result.sources),
        context=result.context,
        answerer=result.answerer,
        request_id=request_id,
    )
