from __future__ import annotations

"""Embedding providers and configuration validation."""

import hashlib
import math
import re
from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

from openai import OpenAI, OpenAIError

_TOKEN_RE = re.compile(r"[a-z0-9]+")

DEFAULT_OPENAI_EMBEDDING_MODEL = "text-embedding-3-small"
OPENAI_MAX_BATCH_SIZE = 2048


class EmbeddingError(RuntimeError):
    """Raised when embeddings fail or are invalid."""
    pass


class EmbeddingConfigError(RuntimeError):
    """Raised when embedding configuration is invalid."""
    pass


class EmbeddingProvider(Protocol):
    """Protocol for embedding providers."""
    dimension: int

    def embed(self, text: str) -> list[float]:
        """Return an embedding vector for the provided text."""
        raise NotImplementedError

    def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        """Return one embedding vector per text, in input order."""
        raise NotImplementedError


def validate_vector(vector: list[float], dimension: int) -> list[float]:
    """Validate embedding vectors and coerce values to float."""
    if len(vector) != dimension:
        raise EmbeddingError(
            f"Embedding dimension mismatch: expected {dimension}, got {len(vector)}"
        )
    cleaned: list[float] = []
    for value in vector:
        if not isinstance(value, (int, float)):
            raise EmbeddingError("Embedding contains a non-numeric value")
        if not math.isfinite(value):
            raise EmbeddingError("Embedding contains a non-finite value")
        cleaned.append(float(value))
    return cleaned


def iter_batches(texts: Sequence[str], batch_size: int) -> list[list[str]]:
    """Split texts into consecutive batches of at most batch_size items."""
    if batch_size <= 0:
        raise EmbeddingConfigError("Embedding batch size must be greater than zero")
    return [list(texts[start : start + batch_size]) for start in range(0, len(texts), batch_size)]


@dataclass
class HashEmbedder:
    """Deterministic hash-based embedder for testing or offline use."""
    dimension: int = 256

    def embed(self, text: str) -> list[float]:
        """Embed text using token hashing and L2 normalization."""
        tokens = _TOKEN_RE.findall(text.lower())
        if not tokens:
            return validate_vector([0.0] * self.dimension, self.dimension)
        vector = [0.0] * self.dimension
        for token in tokens:
            digest = hashlib.sha256(token.encode("utf-8")).digest()
            idx = int.from_bytes(digest[:4], "big") % self.dimension
            vector[idx] += 1.0
        return validate_vector(self._l2_normalize(vector), self.dimension)

    def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed each text independently."""
        return [self.embed(text) for text in texts]

    def _l2_normalize(self, vector: list[float]) -> list[float]:
        """Normalize vector magnitude to 1.0."""
        norm = math.sqrt(sum(value * value for value in vector))
        if norm == 0.0:
            return vector
        return [value / norm for value in vector]


def resolve_openai_dimension(model: str) -> int | None:
    """Return expected dimension for OpenAI embedding model."""
    mapping = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-embedding-ada-002": 1536,
    }
    return mapping.get(model)


@dataclass(frozen=True)
class EmbeddingConfigReport:
    """Validation report for embedding settings."""
    provider: str
    model: str | None
    configured_dimension: int
    expected_dimension: int | None
    ok: bool
    status: str
    detail: str | None = None
    action: str | None = None


def _report(
    provider: str,
    model: str | None,
    dimension: int,
    expected: int | None,
    status: str = "ok",
    detail: str | None = None,
    action: str | None = None,
) -> EmbeddingConfigReport:
    return EmbeddingConfigReport(
        provider=provider,
        model=model,
        configured_dimension=dimension,
        expected_dimension=expected,
        ok=status != "error",
        status=status,
        detail=detail,
        action=action,
    )


def build_embedding_config_report(
    provider: str, model: str | None, dimension: int
) -> EmbeddingConfigReport:
    """Check that the configured dimension matches the embedding provider."""
    normalized = provider.lower().strip()

    if normalized in {"", "hash"}:
        if dimension <= 0:
            return _report(
                "hash",
                None,
                dimension,
                None,
                status="error",
                detail="EMBEDDING_DIMENSION must be greater than zero for hash embeddings.",
                action="Set EMBEDDING_DIMENSION to a positive integer.",
            )
        return _report("hash", None, dimension, dimension)

    if normalized != "openai":
        return _report(
            normalized,
            model,
            dimension,
            None,
            status="error",
            detail="Unsupported embedding provider.",
            action="Set EMBEDDING_PROVIDER to hash or openai.",
        )
    if not model:
        return _report(
            "openai",
            None,
            dimension,
            None,
            status="error",
            detail="OPENAI_EMBEDDING_MODEL is required for OpenAI embeddings.",
            action="Set OPENAI_EMBEDDING_MODEL in .env.",
        )

    expected = resolve_openai_dimension(model)
    if expected is None:
        if dimension <= 0:
            return _report(
                "openai",
                model,
                dimension,
                None,
                status="error",
                detail="EMBEDDING_DIMENSION must be set for the configured OpenAI model.",
                action="Set EMBEDDING_DIMENSION based on the OpenAI model documentation.",
            )
        return _report(
            "openai",
            model,
            dimension,
            None,
            status="warning",
            detail="Model dimension cannot be auto-validated. Confirm EMBEDDING_DIMENSION manually.",
        )
    # Zero means "use the model's native dimension".
    if dimension > 0 and dimension != expected:
        return _report(
            "openai",
            model,
            dimension,
            expected,
            status="error",
            detail="EMBEDDING_DIMENSION does not match the OpenAI model dimension.",
            action=f"Set EMBEDDING_DIMENSION to {expected}.",
        )
    return _report("openai", model, dimension, expected)


@dataclass
class OpenAIEmbedder:
    """Embedding provider using the OpenAI embeddings API."""
    api_key: str
    model: str = DEFAULT_OPENAI_EMBEDDING_MODEL
    dimension: int = 0
    batch_size: int = OPENAI_MAX_BATCH_SIZE
    client: Any = field(default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate OpenAI configuration and create a client unless one is injected."""
        if not self.model:
            raise EmbeddingConfigError("OPENAI_EMBEDDING_MODEL is required for OpenAIEmbedder")
        resolved = resolve_openai_dimension(self.model)
        if self.dimension <= 0:
            if resolved is None:
                raise EmbeddingConfigError(
                    "EMBEDDING_DIMENSION must be set for OpenAI embeddings when model is unknown"
                )
            self.dimension = resolved
        elif resolved is not None and self.dimension != resolved:
            raise EmbeddingConfigError(
                f"EMBEDDING_DIMENSION should be {resolved} for model {self.model}"
            )
        if not 0 < self.batch_size <= OPENAI_MAX_BATCH_SIZE:
            raise EmbeddingConfigError(
                f"Embedding batch size must be between 1 and {OPENAI_MAX_BATCH_SIZE}"
            )
        if self.client is not None:
            return
        if not self.api_key:
            raise EmbeddingConfigError("OPENAI_API_KEY is required for OpenAIEmbedder")
        self.client = OpenAI(api_key=self.api_key)

    def embed(self, text: str) -> list[float]:
        """Embed a single text using the OpenAI embeddings API."""
        vectors = self._request([text])
        if not vectors:
            raise EmbeddingError("OpenAI embedding response missing embedding vector")
        return vectors[0]

    def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed texts in provider-sized batches, preserving input order."""
        if not texts:
            return []
        vectors: list[list[float]] = []
        for batch in iter_batches(texts, self.batch_size):
            batch_vectors = self._request(batch)
            if len(batch_vectors) != len(batch):
                raise EmbeddingError(
                    f"OpenAI returned {len(batch_vectors)} embeddings for {len(batch)} inputs"
                )
            vectors.extend(batch_vectors)
        return vectors

    def _request(self, inputs: list[str]) -> list[list[float]]:
        """Call the embeddings endpoint and validate returned vectors."""
        try:
            response = self.client.embeddings.create(model=self.model, input=inputs)
        except OpenAIError as exc:
            raise EmbeddingError("Failed to generate embeddings") from exc
        items = sorted(response.data, key=lambda item: getattr(item, "index", 0))
        return [validate_vector(list(item.embedding), self.dimension) for item in items]
