"""
Span attribute keys.

GenAI keys follow the OpenTelemetry GenAI semantic conventions; the rag.*
namespace covers indexing and retrieval.

Reference: https://opentelemetry.io/docs/specs/semconv/gen-ai/
"""

from __future__ import annotations

from typing import Any

# ---------------------------------------------------------------------------
# GENAI NAMESPACE (OTel standard)
# ---------------------------------------------------------------------------

GEN_AI_REQUEST_MODEL = "gen_ai.request.model"
GEN_AI_REQUEST_TEMPERATURE = "gen_ai.request.temperature"
GEN_AI_PROMPT = "gen_ai.prompt"  # only with TRACING_CAPTURE_CONTENT

# ---------------------------------------------------------------------------
# RAG NAMESPACE (custom)
# ---------------------------------------------------------------------------

# Indexing
RAG_INDEX_SOURCE = "rag.index.source"  # "cache" or "computed"
RAG_INDEX_DOCUMENT_COUNT = "rag.index.document_count"
RAG_INDEX_DIMENSION = "rag.index.dimension"
RAG_EMBED_BATCH_COUNT = "rag.embed.batch_count"
RAG_EMBED_BATCH_SIZE = "rag.embed.batch_size"
RAG_EMBED_INTENT = "rag.embed.intent"

# Retrieval / answering
RAG_RETRIEVAL_TOP_K = "rag.retrieval.top_k"
RAG_RETRIEVAL_DOC_COUNT = "rag.retrieval.doc_count"
RAG_RETRIEVAL_CATEGORIES = "rag.retrieval.categories"
RAG_ANSWER_CITATION_COUNT = "rag.answer.citation_count"


def index_build_attributes(source: str, document_count: int, dimension: int) -> dict[str, Any]:
    """Attributes for a finished index build."""
    return {
        RAG_INDEX_SOURCE: source,
        RAG_INDEX_DOCUMENT_COUNT: document_count,
        RAG_INDEX_DIMENSION: dimension,
    }


def retrieval_attributes(top_k: int, doc_count: int, categories: list[str]) -> dict[str, Any]:
    """Attributes describing what a query retrieved."""
    return {
        RAG_RETRIEVAL_TOP_K: top_k,
        RAG_RETRIEVAL_DOC_COUNT: doc_count,
        RAG_RETRIEVAL_CATEGORIES: ",".join(categories),
    }
