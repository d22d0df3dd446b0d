"""
Index initializer - owns the in-memory index and its lifecycle.

State machine:

    IDLE --get_index()--> INITIALIZING --cache hit--------------> READY
                                       --miss: load/embed/save--> READY
                                       --error------------------> IDLE

Single flight: the first caller starts one build task; every caller,
including the first, awaits that same task through asyncio.shield(). A
concurrent caller never starts a second build, and a cancelled caller
does not cancel the build for everyone else. If the build fails, every
waiter sees the same exception and the next call starts a fresh attempt.

Once READY the index is never mutated or rebuilt for the life of the
process. Deleting the cache file only takes effect on the next start.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterator

from culinary_rag.core.errors import IndexBuildError
from culinary_rag.core.protocols import GenerationGateway
from culinary_rag.indexing.embedder import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_INTER_BATCH_DELAY,
    Sleep,
    embed_batches,
)
from culinary_rag.observability.attributes import index_build_attributes
from culinary_rag.observability.tracer import get_tracer
from culinary_rag.retrieval.cache import EmbeddingCacheStore
from culinary_rag.retrieval.document import EmbeddedDocument
from culinary_rag.retrieval.loader import KnowledgeSource, load_documents

logger = logging.getLogger(__name__)


class IndexState(Enum):
    """Lifecycle of the in-memory index."""
    IDLE = "idle"
    INITIALIZING = "initializing"
    READY = "ready"


@dataclass(frozen=True)
class Index:
    """An immutable generation of embedded documents."""
    documents: tuple[EmbeddedDocument, ...]
    computed_at: datetime | None = None
    from_cache: bool = False

    def __len__(self) -> int:
        return len(self.documents)

    def __iter__(self) -> Iterator[EmbeddedDocument]:
        return iter(self.documents)

    @property
    def dimension(self) -> int:
        return self.documents[0].dimension if self.documents else 0

    def category_counts(self) -> dict[str, int]:
        return dict(Counter(doc.category.value for doc in self.documents))


class IndexInitializer:
    """
    Builds the index once and hands the same instance to every caller.

    Dependencies are INJECTED: the gateway, the cache store and the
    sleep used between embedding batches.
    """

    def __init__(
        self,
        gateway: GenerationGateway,
        cache: EmbeddingCacheStore,
        sources: list[KnowledgeSource],
        batch_size: int = DEFAULT_BATCH_SIZE,
        inter_batch_delay: float = DEFAULT_INTER_BATCH_DELAY,
        sleep: Sleep = asyncio.sleep,
    ):
        self._gateway = gateway
        self._cache = cache
        self._sources = list(sources)
        self._batch_size = batch_size
        self._inter_batch_delay = inter_batch_delay
        self._sleep = sleep

        self._state = IndexState.IDLE
        self._index: Index | None = None
        self._build_task: asyncio.Task[Index] | None = None

    @property
    def state(self) -> IndexState:
        return self._state

    @property
    def cache(self) -> EmbeddingCacheStore:
        return self._cache

    @property
    def index(self) -> Index | None:
        """The published index, or None before the first successful build."""
        return self._index

    async def get_index(self) -> Index:
        """Return the ready index, building it first if necessary."""
        if self._index is not None:
            return self._index

        if self._build_task is None:
            self._state = IndexState.INITIALIZING
            self._build_task = asyncio.ensure_future(self._build())
            self._build_task.add_done_callback(self._on_build_done)

        return await asyncio.shield(self._build_task)

    def _on_build_done(self, task: asyncio.Task[Index]) -> None:
        self._build_task = None
        if task.cancelled():
            self._state = IndexState.IDLE
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Index initialization failed: {error}")
            self._state = IndexState.IDLE
            return
        self._index = task.result()
        self._state = IndexState.READY

    async def _build(self) -> Index:
        with get_tracer().start_span("rag.index.build") as span:
            cached = await asyncio.to_thread(self._cache.load)
            if cached is not None and cached[0].dimension != self._gateway.dimensions:
                logger.warning(
                    f"Cached embeddings have {cached[0].dimension} dimensions, "
                    f"expected {self._gateway.dimensions}. Recomputing."
                )
                cached = None

            if cached is not None:
                logger.info("Using cached embeddings from file.")
                index = Index(
                    documents=tuple(cached),
                    computed_at=getattr(self._cache, "computed_at", None),
                    from_cache=True,
                )
                for key, value in index_build_attributes("cache", len(index), index.dimension).items():
                    span.set_attribute(key, value)
                return index

            logger.info("Computing embeddings for the first time...")
            documents = await asyncio.to_thread(load_documents, self._sources)
            if not documents:
                raise IndexBuildError("No documents could be loaded from any knowledge source")

            logger.info("Embedding documents...")
            vectors = await embed_batches(
                self._gateway,
                documents,
                batch_size=self._batch_size,
                inter_batch_delay=self._inter_batch_delay,
                sleep=self._sleep,
            )

            dimensions = {int(v.shape[0]) for v in vectors}
            if len(dimensions) != 1:
                raise IndexBuildError(f"Embedding lengths differ within one index: {sorted(dimensions)}")
            if dimensions != {self._gateway.dimensions}:
                raise IndexBuildError(
                    f"Embeddings have {dimensions.pop()} dimensions, expected {self._gateway.dimensions}"
                )

            embedded = [EmbeddedDocument(doc, vec) for doc, vec in zip(documents, vectors)]
            await asyncio.to_thread(self._cache.save, embedded)

            index = Index(
                documents=tuple(embedded),
                computed_at=getattr(self._cache, "computed_at", None) or datetime.now(timezone.utc),
                from_cache=False,
            )
            for key, value in index_build_attributes("computed", len(index), index.dimension).items():
                span.set_attribute(key, value)
            logger.info("Embeddings ready.")
            return index
