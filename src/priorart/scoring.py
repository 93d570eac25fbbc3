"""
Prior-Art Ranker - Scoring Primitives
=====================================
Cosine similarity over embeddings and the semantic/keyword blend.

License: MIT
"""

from __future__ import annotations

from typing import Optional, Sequence, Union

import numpy as np

SEMANTIC_WEIGHT = 0.6
KEYWORD_WEIGHT = 0.4

Vector = Union[np.ndarray, Sequence[float]]


def try_cosine_similarity(a: Optional[Vector], b: Optional[Vector]) -> Optional[float]:
    """
    Cosine similarity, or None when it is undefined.

    Undefined means either vector is missing, empty, has zero or non-finite
    norm, or the dimensions differ.
    """
    if a is None or b is None:
        return None

    va = np.asarray(a, dtype=np.float64).ravel()
    vb = np.asarray(b, dtype=np.float64).ravel()
    if va.size == 0 or va.shape != vb.shape:
        return None

    denominator = np.linalg.norm(va) * np.linalg.norm(vb)
    if denominator == 0 or not np.isfinite(denominator):
        return None

    return float(np.dot(va, vb) / denominator)


def cosine_similarity(a: Optional[Vector], b: Optional[Vector]) -> float:
    """Cosine similarity between two embeddings; 0.0 when undefined."""
    score = try_cosine_similarity(a, b)
    return 0.0 if score is None else score


def blended_score(
    semantic: float,
    keyword: float,
    semantic_weight: float = SEMANTIC_WEIGHT,
    keyword_weight: float = KEYWORD_WEIGHT,
) -> float:
    """Weighted combination of semantic and keyword scores."""
    return semantic_weight * semantic + keyword_weight * keyword
