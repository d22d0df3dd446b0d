"""
Vector math for retrieval.

Cosine similarity is the only metric used: embeddings from the
embedding model are compared by angle, not magnitude.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np


def cosine_similarity(a: Sequence[float] | np.ndarray, b: Sequence[float] | np.ndarray) -> float:
    """
    Cosine of the angle between two equal-length vectors.

    Returns NaN when either vector has zero norm. Callers must treat NaN
    as "no similarity" rather than as an error.

    Raises:
        ValueError: If the vectors are empty or differ in length.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)

    if va.ndim != 1 or vb.ndim != 1:
        raise ValueError("cosine_similarity expects one-dimensional vectors")
    if va.shape[0] == 0 or va.shape != vb.shape:
        raise ValueError(
            f"cosine_similarity expects equal non-zero lengths, got {va.shape[0]} and {vb.shape[0]}"
        )

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0.0 or norm_b == 0.0:
        return math.nan

    return float(np.dot(va, vb) / (norm_a * norm_b))
