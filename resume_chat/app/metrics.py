from __future__ import annotations

import time

from fastapi import Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.responses import Response

from resume_chat.app.settings import settings

REQUEST_COUNT = Counter(
    "resume_chat_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "resume_chat_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)
CHUNKS_INDEXED = Counter(
    "resume_chat_chunks_indexed_total",
    "Resume chunks embedded and stored",
)
CHAT_ANSWERS = Counter(
    "resume_chat_answers_total",
    "Chat answers by answerer",
    ["answerer"],
)
TOP_SIMILARITY = Histogram(
    "resume_chat_top_similarity",
    "Similarity of the best ranked chunk per query",
    buckets=(0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0),
)


def _route_path(request: Request) -> str:
    """Return the route template so resume IDs do not become label values."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


async def metrics_middleware(request: Request, call_next):
    if not settings.metrics_enabled:
        return await call_next(request)
    if request.url.path == "/metrics":
        return await call_next(request)
    start = time.monotonic()
    status = 500
    try:
        response = await call_next(request)
        status = response.status_code
        return response
    finally:
        duration = time.monotonic() - start
        path = _route_path(request)
        REQUEST_COUNT.labels(request.method, path, str(status)).inc()
        REQUEST_LATENCY.labels(request.method, path).observe(duration)


def record_chat_answer(answerer: str, top_similarity: float | None) -> None:
    if not settings.metrics_enabled:
        return
    CHAT_ANSWERS.labels(answerer).inc()
    if top_similarity is not None:
        TOP_SIMILARITY.observe(top_similarity)


def record_chunks_indexed(count: int) -> None:
    if settings.metrics_enabled and count > 0:
        CHUNKS_INDEXED.inc(count)


def metrics_response() -> Response:
    if not settings.metrics_enabled:
        return Response(status_code=404)
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
