"""
Core module - shared protocols, types and errors for the entire system.

USAGE:
------
from culinary_rag.core import GenerationGateway, EmbeddingIntent, UpstreamError
"""

from culinary_rag.core.errors import (
    IndexBuildError,
    InputError,
    RagError,
    SourceLoadError,
    UpstreamError,
)
from culinary_rag.core.protocols import (
    ChatResponse,
    Citation,
    ContextDocument,
    EmbeddingIntent,
    GenerationGateway,
)

__all__ = [
    # Protocols
    "GenerationGateway",
    # Data classes
    "EmbeddingIntent",
    "ContextDocument",
    "Citation",
    "ChatResponse",
    # Errors
    "RagError",
    "InputError",
    "UpstreamError",
    "IndexBuildError",
    "SourceLoadError",
]
