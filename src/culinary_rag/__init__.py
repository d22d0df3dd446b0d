"""
culinary_rag - retrieval-augmented question answering over a culinary
knowledge base.

Pipeline:
1. Load categorized knowledge files into documents
2. Embed them in rate-limited batches (or restore from the on-disk cache)
3. Per query: embed, take the top-K by cosine similarity, ask the chat model
"""

from culinary_rag.config import RagConfig, get_config
from culinary_rag.core.errors import (
    IndexBuildError,
    InputError,
    RagError,
    SourceLoadError,
    UpstreamError,
)
from culinary_rag.service import AnswerResult, RagService, build_service

__all__ = [
    "RagConfig",
    "get_config",
    "RagError",
    "InputError",
    "UpstreamError",
    "IndexBuildError",
    "SourceLoadError",
    "AnswerResult",
    "RagService",
    "build_service",
]
