from __future__ import annotations

"""Vector similarity math for embedding search."""

import math
from typing import Sequence


class VectorDimensionError(ValueError):
    """Raised when two vectors of different lengths are compared."""
    pass


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Compute cosine similarity between two vectors.

    The result is clamped to [-1, 1] to absorb rounding. Returns ``math.nan``
    when either vector has zero magnitude, since the angle is undefined.
    Callers ranking results must treat NaN as unusable.
    """
    if len(a) != len(b):
        raise VectorDimensionError(
            f"Vectors must have same dimensions (got {len(a)} and {len(b)})"
        )
    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y
    if norm_a == 0.0 or norm_b == 0.0:
        return math.nan
    return max(-1.0, min(1.0, dot / (math.sqrt(norm_a) * math.sqrt(norm_b))))
