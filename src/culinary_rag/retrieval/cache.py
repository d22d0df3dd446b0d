"""
Embedding cache storage - Protocol and implementations for persisting
document vectors between process starts.

Following the same pattern as the rest of the package:
1. Protocol defines the interface
2. FileEmbeddingCache for production (JSON file on disk)
3. InMemoryEmbeddingCache for testing (fast, no I/O)
4. Factory function for convenience

A missing or unreadable cache is a normal state (first run, or the file
was deleted to force re-indexing). load() reports it as None and never
raises.
"""

from __future__ import annotations

import json
import logging
import math
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, runtime_checkable

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from culinary_rag.retrieval.document import Category, Document, EmbeddedDocument

logger = logging.getLogger(__name__)

DEFAULT_CACHE_PATH = Path("embeddings") / "embeddings.json"


# ---------------------------------------------------------------------------
# ON-DISK RECORD
# ---------------------------------------------------------------------------


class CacheRecord(BaseModel):
    """One persisted document. Field names match the on-disk JSON."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    snippet: str
    category: str = Category.GENERAL.value
    embedding: list[float]
    computed_at: datetime = Field(alias="computedAt")

    @classmethod
    def from_embedded(cls, doc: EmbeddedDocument, computed_at: datetime) -> CacheRecord:
        return cls(
            id=doc.document.id,
            title=doc.document.title,
            snippet=doc.document.body,
            category=doc.document.category.value,
            embedding=[float(x) for x in doc.vector],
            computed_at=computed_at,
        )

    def to_embedded(self) -> EmbeddedDocument:
        return EmbeddedDocument(
            document=Document(
                id=self.id,
                category=Category.parse(self.category),
                title=self.title,
                body=self.snippet,
            ),
            vector=np.asarray(self.embedding, dtype=np.float32),
        )


_RECORDS = TypeAdapter(list[CacheRecord])


def _check_records(records: list[CacheRecord]) -> str | None:
    """Return a reason the record set is unusable, or None if it is sound."""
    if not records:
        return "cache is empty"

    dims = {len(r.embedding) for r in records}
    if len(dims) != 1 or 0 in dims:
        return f"inconsistent embedding lengths {sorted(dims)}"

    ids = [r.id for r in records]
    if len(set(ids)) != len(ids):
        return "duplicate document ids"

    if not all(math.isfinite(x) for r in records for x in r.embedding):
        return "non-finite embedding values"

    return None


# ---------------------------------------------------------------------------
# CACHE STORE PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class EmbeddingCacheStore(Protocol):
    """Protocol for embedding cache implementations."""

    def load(self) -> list[EmbeddedDocument] | None:
        """Load cached documents, returns None on a miss."""
        ...

    def save(self, documents: list[EmbeddedDocument]) -> None:
        """Persist the full document set, replacing any previous cache."""
        ...

    def file_info(self) -> dict:
        """Where and how big the stored cache is, for stats output."""
        ...


# ---------------------------------------------------------------------------
# FILE-BASED IMPLEMENTATION (Production)
# ---------------------------------------------------------------------------


class FileEmbeddingCache:
    """Production cache using a single JSON file.

    Writes go to a temporary file in the target directory which is then
    renamed over the cache, so a concurrent load() never sees a partial
    write.
    """

    def __init__(self, file_path: Path | str | None = None):
        self._path = Path(file_path) if file_path is not None else DEFAULT_CACHE_PATH
        self._computed_at: datetime | None = None

    @property
    def path(self) -> Path:
        """Get the cache file path."""
        return self._path

    @property
    def computed_at(self) -> datetime | None:
        """When the currently cached embeddings were computed, if known."""
        return self._computed_at

    def load(self) -> list[EmbeddedDocument] | None:
        """Load embeddings from the JSON file."""
        if not self._path.exists():
            logger.warning(f"No existing embeddings file at {self._path}. Will compute embeddings.")
            return None

        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
            records = _RECORDS.validate_python(data)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable embeddings file {self._path}: {e}")
            return None

        problem = _check_records(records)
        if problem:
            logger.warning(f"Ignoring embeddings file {self._path}: {problem}")
            return None

        self._computed_at = min(r.computed_at for r in records)
        logger.info(f"Loaded {len(records)} embeddings from {self._path}")
        return [r.to_embedded() for r in records]

    def save(self, documents: list[EmbeddedDocument]) -> None:
        """Write all documents to the JSON file atomically."""
        computed_at = datetime.now(timezone.utc)
        payload = [
            CacheRecord.from_embedded(doc, computed_at).model_dump(mode="json", by_alias=True)
            for doc in documents
        ]

        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        self._computed_at = computed_at
        logger.info(f"Embeddings saved to {self._path}")

    def file_info(self) -> dict:
        """Size and modification time of the cache file, for stats output."""
        if not self._path.exists():
            return {"exists": False}
        stat = self._path.stat()
        return {
            "exists": True,
            "size": stat.st_size,
            "last_modified": datetime.fromtimestamp(stat.st_mtime, timezone.utc).isoformat(),
        }


# ---------------------------------------------------------------------------
# IN-MEMORY IMPLEMENTATION (Testing)
# ---------------------------------------------------------------------------


class InMemoryEmbeddingCache:
    """Test cache - no file I/O.

    Lets tests drive the cache-hit and cache-miss paths of the index
    initializer and assert on what was saved.
    """

    def __init__(self, initial: list[EmbeddedDocument] | None = None):
        self._documents = list(initial) if initial is not None else None
        self._save_count = 0
        self._computed_at: datetime | None = None

    @property
    def save_called(self) -> bool:
        """Check if save was called (for test assertions)."""
        return self._save_count > 0

    @property
    def save_count(self) -> int:
        return self._save_count

    @property
    def computed_at(self) -> datetime | None:
        return self._computed_at

    def load(self) -> list[EmbeddedDocument] | None:
        """Return stored documents."""
        if not self._documents:
            return None
        return list(self._documents)

    def save(self, documents: list[EmbeddedDocument]) -> None:
        """Store documents in memory."""
        self._documents = list(documents)
        self._save_count += 1
        self._computed_at = datetime.now(timezone.utc)

    def file_info(self) -> dict:
        return {"exists": False}


# ---------------------------------------------------------------------------
# FACTORY FUNCTION
# ---------------------------------------------------------------------------


def get_cache_store(
    use_file: bool = True,
    file_path: Path | str | None = None,
    initial: list[EmbeddedDocument] | None = None,
) -> EmbeddingCacheStore:
    """
    Factory function for embedding cache stores.

    Args:
        use_file: If True, use FileEmbeddingCache. If False, use InMemoryEmbeddingCache.
        file_path: Custom path for FileEmbeddingCache.
        initial: Initial documents for InMemoryEmbeddingCache.
    """
    if use_file:
        return FileEmbeddingCache(file_path)
    return InMemoryEmbeddingCache(initial)
