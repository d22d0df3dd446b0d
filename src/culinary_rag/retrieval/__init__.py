"""
Retrieval module - document model, loading, caching and similarity search.

This module provides:
- Document / EmbeddedDocument / Category: the document model
- load_documents(): categorized knowledge-file loader
- FileEmbeddingCache / InMemoryEmbeddingCache: persisted vectors
- cosine_similarity() and top_k(): linear-scan retrieval
"""

from culinary_rag.retrieval.cache import (
    CacheRecord,
    EmbeddingCacheStore,
    FileEmbeddingCache,
    InMemoryEmbeddingCache,
    get_cache_store,
)
from culinary_rag.retrieval.document import Category, Document, EmbeddedDocument, make_id
from culinary_rag.retrieval.loader import (
    SOURCE_CATEGORIES,
    KnowledgeSource,
    SourceLoadResult,
    default_sources,
    load_documents,
    load_source,
)
from culinary_rag.retrieval.retriever import DEFAULT_TOP_K, ScoredDocument, score_documents, top_k
from culinary_rag.retrieval.similarity import cosine_similarity

__all__ = [
    # Documents
    "Category",
    "Document",
    "EmbeddedDocument",
    "make_id",
    # Loading
    "SOURCE_CATEGORIES",
    "KnowledgeSource",
    "SourceLoadResult",
    "default_sources",
    "load_documents",
    "load_source",
    # Cache
    "CacheRecord",
    "EmbeddingCacheStore",
    "FileEmbeddingCache",
    "InMemoryEmbeddingCache",
    "get_cache_store",
    # Search
    "DEFAULT_TOP_K",
    "ScoredDocument",
    "cosine_similarity",
    "score_documents",
    "top_k",
]
