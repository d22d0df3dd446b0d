"""
Generation Gateway - Single Responsibility: talk to the remote model.

It has ONE job: turn texts into vectors and (query, context) into a
grounded answer. No index state, no retrieval logic.

The production gateway uses the OpenAI SDK against any OpenAI-compatible
endpoint. The default endpoint is Cohere's compatibility API, which
accepts the embedding intent as `input_type` in the request body.
"""

from __future__ import annotations

import hashlib
import logging
import re

import numpy as np
from openai import AsyncOpenAI, OpenAIError

from culinary_rag.config import RagConfig, get_config
from culinary_rag.core.errors import UpstreamError
from culinary_rag.core.protocols import (
    ChatResponse,
    Citation,
    ContextDocument,
    EmbeddingIntent,
    GenerationGateway,
)
from culinary_rag.observability.attributes import (
    GEN_AI_REQUEST_MODEL,
    GEN_AI_REQUEST_TEMPERATURE,
    RAG_EMBED_INTENT,
)
from culinary_rag.observability.tracer import get_tracer

logger = logging.getLogger(__name__)

CITATION_INSTRUCTIONS = """When you use information from a document, cite it by writing its id in
square brackets at the end of the sentence, for example: "Simmer for 20 minutes [recipes_3]."
Only cite ids from the DOCUMENTS list."""

_CITATION_MARKER = re.compile(r"\[([A-Za-z][A-Za-z_]*_\d+)\]")
_SENTENCE_BREAK = re.compile(r"[.!?\n]\s*")
_MARKER_SEPARATOR = re.compile(r"[^\w]*")


# ---------------------------------------------------------------------------
# CITATION PARSING
# ---------------------------------------------------------------------------


def parse_citations(text: str, known_ids: set[str]) -> list[Citation]:
    """
    Recover citations from `[doc_id]` markers in the answer text.

    Each citation spans the sentence fragment the marker closes: from the
    end of the previous sentence (or previous marker) up to the marker.
    Markers separated only by whitespace or punctuation ("[a], [b]") form
    one group and cite the same fragment. Markers naming unknown ids are
    ignored.
    """
    citations: list[Citation] = []
    fragment_start = 0
    previous_marker_end = -1
    span: tuple[int, int] | None = None

    for match in _CITATION_MARKER.finditer(text):
        doc_id = match.group(1)

        grouped = span is not None and _MARKER_SEPARATOR.fullmatch(
            text, previous_marker_end, match.start()
        )
        if not grouped:
            start, end = fragment_start, match.start()
            for brk in _SENTENCE_BREAK.finditer(text, fragment_start, end):
                if text[brk.end():end].strip():
                    start = brk.end()
            while start < end and text[start].isspace():
                start += 1
            while end > start and text[end - 1].isspace():
                end -= 1
            span = (start, end)

        previous_marker_end = match.end()
        fragment_start = match.end()

        if doc_id in known_ids and span[1] > span[0]:
            citations.append(Citation(start=span[0], end=span[1], document_id=doc_id))

    return citations


def _format_documents(context_docs: list[ContextDocument]) -> str:
    return "\n".join(f"[{doc.id}] {doc.text}" for doc in context_docs)


# ---------------------------------------------------------------------------
# PRODUCTION GATEWAY
# ---------------------------------------------------------------------------


class OpenAIGateway:
    """
    Gateway backed by the OpenAI SDK.

    Dependencies are INJECTED where possible: pass a client to reuse a
    connection pool or to test against a mocked client.
    """

    def __init__(
        self,
        config: RagConfig | None = None,
        client: AsyncOpenAI | None = None,
    ):
        self.config = config or get_config()
        self._client = client or AsyncOpenAI(
            api_key=self.config.api_key,
            base_url=self.config.api_base_url,
        )

    @property
    def dimensions(self) -> int:
        return self.config.embed_dim

    @property
    def embed_model(self) -> str:
        return self.config.embed_model

    async def embed(self, texts: list[str], intent: EmbeddingIntent) -> list[np.ndarray]:
        """Embed a batch of texts with the declared intent."""
        if not texts:
            return []

        extra_body = {"input_type": intent.value} if self.config.send_input_type else None
        attributes = {GEN_AI_REQUEST_MODEL: self.config.embed_model, RAG_EMBED_INTENT: intent.value}
        with get_tracer().start_span("rag.gateway.embed", attributes=attributes):
            try:
                response = await self._client.embeddings.create(
                    model=self.config.embed_model,
                    input=texts,
                    encoding_format="float",
                    extra_body=extra_body,
                )
            except OpenAIError as e:
                raise UpstreamError(f"Embedding request failed: {e}", operation="embed") from e

        vectors = [np.array(item.embedding, dtype=np.float32) for item in response.data]
        logger.debug(f"Embedded {len(vectors)} texts ({self.config.embed_model}, {intent.value})")
        return vectors

    async def chat(
        self,
        query: str,
        context_docs: list[ContextDocument],
        preamble: str,
        temperature: float,
    ) -> ChatResponse:
        """Answer the query grounded in the context documents."""
        system = f"{preamble}\n\n{CITATION_INSTRUCTIONS}\n\nDOCUMENTS:\n{_format_documents(context_docs)}"
        attributes = {GEN_AI_REQUEST_MODEL: self.config.chat_model, GEN_AI_REQUEST_TEMPERATURE: temperature}
        with get_tracer().start_span("rag.gateway.chat", attributes=attributes):
            try:
                response = await self._client.chat.completions.create(
                    model=self.config.chat_model,
                    messages=[
                        {"role": "system", "content": system},
                        {"role": "user", "content": query},
                    ],
                    temperature=temperature,
                )
            except OpenAIError as e:
                raise UpstreamError(f"Chat request failed: {e}", operation="chat") from e

        if not response.choices or response.choices[0].message.content is None:
            raise UpstreamError("Chat response contained no text", operation="chat")

        text = response.choices[0].message.content
        citations = parse_citations(text, {doc.id for doc in context_docs})
        return ChatResponse(text=text, citations=citations)


# ---------------------------------------------------------------------------
# TEST DOUBLE
# ---------------------------------------------------------------------------


class MockGateway:
    """
    Mock gateway for testing without API calls.

    Generates deterministic pseudo-embeddings from text hashes and a canned
    answer that cites the first context document. Records every call.
    NOT for production use - only for testing/development.
    """

    def __init__(self, dimensions: int = 1024):
        self._dimensions = dimensions
        self.embed_calls: list[tuple[list[str], EmbeddingIntent]] = []
        self.chat_calls: list[dict] = []

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def embed_model(self) -> str:
        return "mock-embedding"

    def vector_for(self, text: str) -> np.ndarray:
        """Deterministic unit vector seeded from the text hash."""
        seed = int.from_bytes(hashlib.sha256(text.encode()).digest()[:8], "big")
        vec = np.random.default_rng(seed).standard_normal(self._dimensions)
        return (vec / np.linalg.norm(vec)).astype(np.float32)

    async def embed(self, texts: list[str], intent: EmbeddingIntent) -> list[np.ndarray]:
        self.embed_calls.append((list(texts), intent))
        return [self.vector_for(text) for text in texts]

    async def chat(
        self,
        query: str,
        context_docs: list[ContextDocument],
        preamble: str,
        temperature: float,
    ) -> ChatResponse:
        self.chat_calls.append(
            {
                "query": query,
                "context_docs": list(context_docs),
                "preamble": preamble,
                "temperature": temperature,
            }
        )
        if not context_docs:
            return ChatResponse(text=f"No reference material found for: {query}")

        sentence = f"Here is what the knowledge base says about {query}"
        text = f"{sentence} [{context_docs[0].id}]."
        return ChatResponse(
            text=text,
            citations=[Citation(start=0, end=len(sentence), document_id=context_docs[0].id)],
        )


# ---------------------------------------------------------------------------
# FACTORY
# ---------------------------------------------------------------------------


def get_gateway(use_mock: bool | None = None, config: RagConfig | None = None) -> GenerationGateway:
    """
    Factory function to get the appropriate gateway.

    Args:
        use_mock: If True, return MockGateway. Defaults to USE_MOCK_GATEWAY.
        config: Service configuration (uses env if not provided)
    """
    config = config or get_config()
    if use_mock is None:
        use_mock = config.use_mock_gateway
    if use_mock:
        return MockGateway(dimensions=config.embed_dim)
    return OpenAIGateway(config)
