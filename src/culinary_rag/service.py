"""
Answer service - the query entry point.

Per query:
1. Reject empty input before touching the index or the gateway
2. Get (or lazily build) the index
3. Embed the query with QUERY intent
4. Take the top-K documents by cosine similarity
5. Ask the chat model, passing exactly those documents as context
6. Assemble the answer with citations and retrieval metadata

A failed query leaves the ready index untouched and can simply be retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from culinary_rag.config import RagConfig, get_config
from culinary_rag.core.errors import InputError, UpstreamError
from culinary_rag.core.protocols import (
    Citation,
    ContextDocument,
    EmbeddingIntent,
    GenerationGateway,
)
from culinary_rag.indexing.initializer import IndexInitializer
from culinary_rag.observability.attributes import (
    GEN_AI_PROMPT,
    GEN_AI_REQUEST_TEMPERATURE,
    RAG_ANSWER_CITATION_COUNT,
    retrieval_attributes,
)
from culinary_rag.observability.config import get_tracing_config
from culinary_rag.observability.tracer import get_tracer
from culinary_rag.prompts import CULINARY_PREAMBLE, DEFAULT_TEMPERATURE
from culinary_rag.retrieval.cache import get_cache_store
from culinary_rag.retrieval.loader import default_sources
from culinary_rag.retrieval.retriever import DEFAULT_TOP_K, top_k

logger = logging.getLogger(__name__)


@dataclass
class AnswerResult:
    """Grounded answer plus what was used to produce it."""
    text: str
    citations: list[Citation]
    documents_used: int
    categories_referenced: list[str]

    def to_dict(self) -> dict:
        """External JSON shape."""
        return {
            "text": self.text,
            "citations": [c.to_dict() for c in self.citations],
            "documentsUsed": self.documents_used,
            "categoriesReferenced": self.categories_referenced,
        }


@dataclass
class UsageStats:
    """Query counters for the lifetime of the service."""
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    total_queries: int = 0
    last_query_at: datetime | None = None

    def record_query(self) -> None:
        self.total_queries += 1
        self.last_query_at = datetime.now(timezone.utc)


class RagService:
    """Retrieval-augmented answering over the culinary knowledge base."""

    def __init__(
        self,
        gateway: GenerationGateway,
        initializer: IndexInitializer,
        top_k: int = DEFAULT_TOP_K,
        temperature: float = DEFAULT_TEMPERATURE,
        preamble: str = CULINARY_PREAMBLE,
    ):
        self._gateway = gateway
        self._initializer = initializer
        self._top_k = top_k
        self._temperature = temperature
        self._preamble = preamble
        self.usage = UsageStats()

    @property
    def gateway(self) -> GenerationGateway:
        return self._gateway

    @property
    def initializer(self) -> IndexInitializer:
        return self._initializer

    async def answer(self, prompt_text: str | None) -> AnswerResult:
        """
        Answer a question using the top-K retrieved documents as context.

        Raises:
            InputError: If prompt_text is empty or missing
            UpstreamError: If embedding or chat fails
            IndexBuildError: If the index cannot be built
        """
        if prompt_text is None or not prompt_text.strip():
            raise InputError("Prompt is required")

        self.usage.record_query()
        logger.info(f"Processing user prompt: \"{prompt_text[:50]}...\"")

        with get_tracer().start_span("rag.answer") as span:
            index = await self._initializer.get_index()

            query_vectors = await self._gateway.embed([prompt_text], EmbeddingIntent.QUERY)
            if len(query_vectors) != 1:
                raise UpstreamError(
                    f"Query embedding returned {len(query_vectors)} vectors", operation="embed"
                )
            if len(query_vectors[0]) != index.dimension:
                raise UpstreamError(
                    f"Query embedding has {len(query_vectors[0])} dimensions "
                    f"but the index has {index.dimension}",
                    operation="embed",
                )

            documents = top_k(query_vectors[0], index, self._top_k)
            categories = list(dict.fromkeys(doc.category.value for doc in documents))
            logger.info(f"Retrieved top {len(documents)} documents.")
            logger.info(f"Categories found: {categories}")

            for key, value in retrieval_attributes(self._top_k, len(documents), categories).items():
                span.set_attribute(key, value)
            span.set_attribute(GEN_AI_REQUEST_TEMPERATURE, self._temperature)
            if get_tracing_config().capture_content:
                span.set_attribute(GEN_AI_PROMPT, prompt_text)

            response = await self._gateway.chat(
                prompt_text,
                [ContextDocument(id=doc.id, text=doc.text) for doc in documents],
                self._preamble,
                self._temperature,
            )
            span.set_attribute(RAG_ANSWER_CITATION_COUNT, len(response.citations))
            logger.info("Response generated successfully")

        return AnswerResult(
            text=response.text,
            citations=list(response.citations),
            documents_used=len(documents),
            categories_referenced=categories,
        )


def build_service(
    config: RagConfig | None = None,
    gateway: GenerationGateway | None = None,
) -> RagService:
    """
    Wire a RagService from configuration.

    Args:
        config: Service configuration (uses env if not provided)
        gateway: Gateway override (defaults to get_gateway(config=config))
    """
    from culinary_rag.gateway import get_gateway

    config = config or get_config()
    gateway = gateway or get_gateway(config=config)
    initializer = IndexInitializer(
        gateway=gateway,
        cache=get_cache_store(file_path=config.cache_path),
        sources=default_sources(config.documents_dir),
        batch_size=config.batch_size,
        inter_batch_delay=config.batch_delay_seconds,
    )
    return RagService(
        gateway=gateway,
        initializer=initializer,
        top_k=config.top_k,
        temperature=config.temperature,
    )
