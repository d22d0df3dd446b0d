"""
Knowledge-base statistics.

Pure read-side aggregation over a ready index and the service counters.
These functions never trigger indexing; the `stats` command loads or
builds the index before calling them.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

import numpy as np

from culinary_rag.core.protocols import EmbeddingIntent

if TYPE_CHECKING:
    from culinary_rag.indexing.initializer import Index
    from culinary_rag.service import RagService


def summarize_index(index: Index) -> dict:
    """Per-category counts and content/embedding averages for an index."""
    total = len(index)
    grouped: dict[str, list] = defaultdict(list)
    for doc in index:
        grouped[doc.category.value].append(doc.document)

    categories = {}
    for name in sorted(grouped):
        docs = grouped[name]
        categories[name] = {
            "count": len(docs),
            "percentage": round(len(docs) / total * 100),
            "avg_title_length": round(sum(len(d.title) for d in docs) / len(docs)),
            "avg_body_length": round(sum(len(d.body) for d in docs) / len(docs)),
        }

    magnitudes = [float(np.linalg.norm(doc.vector)) for doc in index]
    return {
        "total_documents": total,
        "total_categories": len(categories),
        "categories": categories,
        "embedding_dimension": index.dimension,
        "average_magnitude": round(sum(magnitudes) / total, 3) if total else 0.0,
        "computed_at": index.computed_at.isoformat() if index.computed_at else None,
        "from_cache": index.from_cache,
    }


def summarize_service(service: RagService) -> dict:
    """Index state, usage counters, embedding setup and (when ready) the index summary."""
    initializer = service.initializer
    usage = service.usage
    summary = {
        "state": initializer.state.value,
        "usage": {
            "started_at": usage.started_at.isoformat(),
            "total_queries": usage.total_queries,
            "last_query_at": usage.last_query_at.isoformat() if usage.last_query_at else None,
        },
        "embeddings": {
            "model": service.gateway.embed_model,
            "input_type": EmbeddingIntent.DOCUMENT.value,
            "dimension": service.gateway.dimensions,
            "file_info": initializer.cache.file_info(),
        },
        "knowledge_base": None,
    }
    if initializer.index is not None:
        summary["knowledge_base"] = summarize_index(initializer.index)
    return summary
