"""
Top-K retrieval over the in-memory index.

A full linear scan per query. The knowledge base holds hundreds to low
thousands of entries, so an approximate nearest-neighbour structure would
add nothing but moving parts.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from culinary_rag.retrieval.document import Document, EmbeddedDocument
from culinary_rag.retrieval.similarity import cosine_similarity

DEFAULT_TOP_K = 8


@dataclass(frozen=True)
class ScoredDocument:
    """A document with its similarity to the query."""
    document: Document
    score: float


def score_documents(
    query_vector: Sequence[float] | np.ndarray,
    index: Iterable[EmbeddedDocument],
) -> list[ScoredDocument]:
    """
    Score every indexed document against the query, best first.

    The sort is stable, so equal scores keep index order. A NaN score
    (zero-norm vector) counts as no similarity and sorts last.
    """
    scored = [
        ScoredDocument(doc.document, cosine_similarity(query_vector, doc.vector))
        for doc in index
    ]
    scored.sort(key=lambda s: -math.inf if math.isnan(s.score) else s.score, reverse=True)
    return scored


def top_k(
    query_vector: Sequence[float] | np.ndarray,
    index: Iterable[EmbeddedDocument],
    k: int = DEFAULT_TOP_K,
) -> list[Document]:
    """Return the k documents most similar to the query (without scores)."""
    if k <= 0:
        return []
    return [s.document for s in score_documents(query_vector, index)[:k]]
