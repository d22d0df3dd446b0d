"""
Batch embedder - converts documents to vectors under API batch limits.

Documents are sent in consecutive chunks of at most `batch_size`, one
request per chunk, strictly one after another. A fixed pause between
chunks keeps the request rate under the provider's limit. No retries
here: a failed chunk fails the whole run and nothing is cached.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Awaitable, Callable

import numpy as np

from culinary_rag.core.errors import UpstreamError
from culinary_rag.core.protocols import EmbeddingIntent, GenerationGateway
from culinary_rag.observability.attributes import (
    RAG_EMBED_BATCH_COUNT,
    RAG_EMBED_BATCH_SIZE,
    RAG_EMBED_INTENT,
)
from culinary_rag.observability.tracer import get_tracer
from culinary_rag.retrieval.document import Document

logger = logging.getLogger(__name__)

# Provider ceiling on texts per embedding request
DEFAULT_BATCH_SIZE = 96
DEFAULT_INTER_BATCH_DELAY = 2.0

Sleep = Callable[[float], Awaitable[None]]


async def embed_batches(
    gateway: GenerationGateway,
    documents: list[Document],
    batch_size: int = DEFAULT_BATCH_SIZE,
    inter_batch_delay: float = DEFAULT_INTER_BATCH_DELAY,
    sleep: Sleep = asyncio.sleep,
) -> list[np.ndarray]:
    """
    Embed documents with document intent, one vector per input in order.

    Args:
        gateway: Remote embedding capability
        documents: Documents to embed (their `text` is sent)
        batch_size: Maximum documents per request
        inter_batch_delay: Seconds to wait between requests (not after the last)
        sleep: Awaitable sleep, injectable for tests

    Raises:
        ValueError: If batch_size < 1
        UpstreamError: If a request fails or returns the wrong number of vectors
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")

    total_batches = math.ceil(len(documents) / batch_size)
    vectors: list[np.ndarray] = []

    with get_tracer().start_span(
        "rag.embed_batches",
        attributes={
            RAG_EMBED_BATCH_COUNT: total_batches,
            RAG_EMBED_BATCH_SIZE: batch_size,
            RAG_EMBED_INTENT: EmbeddingIntent.DOCUMENT.value,
        },
    ):
        for batch_number, offset in enumerate(range(0, len(documents), batch_size), start=1):
            batch = documents[offset:offset + batch_size]
            logger.info(f"Embedding batch {batch_number} of {total_batches}...")

            batch_vectors = await gateway.embed([doc.text for doc in batch], EmbeddingIntent.DOCUMENT)
            if len(batch_vectors) != len(batch):
                raise UpstreamError(
                    f"Embedding batch {batch_number} returned {len(batch_vectors)} vectors "
                    f"for {len(batch)} documents",
                    operation="embed",
                )
            vectors.extend(np.asarray(v, dtype=np.float32) for v in batch_vectors)

            if batch_number < total_batches and inter_batch_delay > 0:
                await sleep(inter_batch_delay)

    return vectors
