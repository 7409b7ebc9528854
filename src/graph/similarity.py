"""Cosine similarity over dense embedding vectors."""

from __future__ import annotations

import math
from collections.abc import Sequence
from enum import StrEnum

from postgraph.errors import DimensionMismatchError


class SimilarityMode(StrEnum):
    """How unequal-length vectors are handled."""

    STRICT = "strict"  # raise DimensionMismatchError
    LENIENT = "lenient"  # score the pair as 0.0


def cosine_similarity(
    a: Sequence[float],
    b: Sequence[float],
    *,
    mode: SimilarityMode = SimilarityMode.STRICT,
) -> float:
    """Cosine similarity ``dot(a, b) / (|a| * |b|)``.

    Returns 0.0 when either vector has zero norm.

    Raises:
        DimensionMismatchError: In STRICT mode, if the lengths differ.
    """
    if len(a) != len(b):
        if mode is SimilarityMode.STRICT:
            raise DimensionMismatchError(len(a), len(b))
        return 0.0

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b, strict=True):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    # Clamp float drift; the result must stay inside [-1, 1].
    return max(-1.0, min(1.0, dot / math.sqrt(norm_a * norm_b)))
