"""
Core protocols defining the contract with the generation model.

The embedding and chat model is a remote black box. Everything in the
package talks to it through GenerationGateway, so the indexing pipeline
and the answer service can be tested against MockGateway without network
access.

PATTERN:
- Protocol defines the contract
- Production implementation (OpenAIGateway)
- Test double (MockGateway)
- Factory function (get_gateway)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, runtime_checkable

import numpy as np


class EmbeddingIntent(Enum):
    """
    Declared role of the text being embedded.

    The embedding model produces systematically different vectors for
    documents and for queries, so every call must say which it is.
    """

    DOCUMENT = "search_document"
    QUERY = "search_query"


@dataclass(frozen=True)
class ContextDocument:
    """A retrieved document handed to the chat model as grounding context."""
    id: str
    text: str


@dataclass(frozen=True)
class Citation:
    """A span of the answer text and the document it was drawn from."""
    start: int
    end: int
    document_id: str

    def to_dict(self) -> dict:
        return {"start": self.start, "end": self.end, "document_id": self.document_id}


@dataclass
class ChatResponse:
    """Answer text plus citations returned by the chat model."""
    text: str
    citations: list[Citation] = field(default_factory=list)


@runtime_checkable
class GenerationGateway(Protocol):
    """
    Contract for the remote embedding/chat capability.

    Implementations:
    - OpenAIGateway (production)
    - MockGateway (testing)
    """

    @property
    def dimensions(self) -> int:
        """Length of every vector embed() returns."""
        ...

    @property
    def embed_model(self) -> str:
        """Name of the embedding model, for reporting."""
        ...

    async def embed(self, texts: list[str], intent: EmbeddingIntent) -> list[np.ndarray]:
        """Embed texts, one vector per input, in input order."""
        ...

    async def chat(
        self,
        query: str,
        context_docs: list[ContextDocument],
        preamble: str,
        temperature: float,
    ) -> ChatResponse:
        """Generate a grounded answer to the query from the context documents."""
        ...
