"""
Error taxonomy for the RAG service.

Four kinds of failure exist, and each has one place where it is decided
whether it is swallowed or surfaced:

- SourceLoadError: a knowledge file is missing or malformed. Swallowed and
  logged by the loader; that source is simply absent from the index.
- Cache errors: never raised. A missing or corrupt cache file is a cache
  miss (see retrieval.cache).
- UpstreamError: the generation gateway failed (embedding or chat).
  Always propagates to the caller.
- InputError: the query is empty. Always propagates, before any index or
  gateway access.
"""

from __future__ import annotations


class RagError(Exception):
    """Base class for all errors raised by culinary_rag."""


class InputError(RagError):
    """The caller supplied an unusable request (e.g. an empty prompt)."""


class UpstreamError(RagError):
    """The generation gateway failed while embedding or chatting."""

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation


class IndexBuildError(RagError):
    """The index could not be assembled from otherwise valid inputs."""


class SourceLoadError(RagError):
    """A single knowledge source could not be read or parsed."""

    def __init__(self, source: str, reason: str):
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason
