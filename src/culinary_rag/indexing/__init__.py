"""
Indexing module - batch embedding and single-flight index initialization.
"""

from culinary_rag.indexing.embedder import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_INTER_BATCH_DELAY,
    embed_batches,
)
from culinary_rag.indexing.initializer import Index, IndexInitializer, IndexState

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_INTER_BATCH_DELAY",
    "embed_batches",
    "Index",
    "IndexInitializer",
    "IndexState",
]
