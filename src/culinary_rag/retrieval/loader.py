"""
Knowledge-base loader.

Reads the categorized JSON knowledge files and turns every
`{prompt, response}` record into a Document with a stable id.

Each source is loaded into an explicit SourceLoadResult. The decision to
swallow a failed source is taken in exactly one place, load_documents(),
so a missing or malformed file degrades the knowledge base instead of
aborting startup.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, TypeAdapter, ValidationError

from culinary_rag.core.errors import SourceLoadError
from culinary_rag.retrieval.document import Category, Document, make_id

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# SOURCE REGISTRY
# ---------------------------------------------------------------------------

# Source name (file stem) -> category. Anything not listed is GENERAL.
SOURCE_CATEGORIES: dict[str, Category] = {
    "recipes": Category.RECIPES,
    "techniques_Tips": Category.TECHNIQUES,
    "nutrition_Advice": Category.NUTRITION,
    "ingredient_Substitutions": Category.SUBSTITUTIONS,
    "food_Safety": Category.FOOD_SAFETY,
    "equipment_Usage": Category.EQUIPMENT,
    "cooking_Advice": Category.COOKING_ADVICE,
}

DEFAULT_SOURCE_NAMES = list(SOURCE_CATEGORIES)


@dataclass(frozen=True)
class KnowledgeSource:
    """One knowledge file and the category its records belong to."""
    name: str
    path: Path

    @property
    def category(self) -> Category:
        return SOURCE_CATEGORIES.get(self.name, Category.GENERAL)

    @classmethod
    def from_path(cls, path: Path | str) -> KnowledgeSource:
        path = Path(path)
        return cls(name=path.stem, path=path)


def default_sources(documents_dir: Path | str) -> list[KnowledgeSource]:
    """The standard set of knowledge files inside a documents directory."""
    base = Path(documents_dir)
    return [KnowledgeSource(name, base / f"{name}.json") for name in DEFAULT_SOURCE_NAMES]


# ---------------------------------------------------------------------------
# RECORD SCHEMA
# ---------------------------------------------------------------------------


class KnowledgeRecord(BaseModel):
    """A single entry in a knowledge file."""

    prompt: str
    response: str


_RECORDS = TypeAdapter(list[KnowledgeRecord])


# ---------------------------------------------------------------------------
# PER-SOURCE LOADING
# ---------------------------------------------------------------------------


@dataclass
class SourceLoadResult:
    """Outcome of reading one source: records on success, an error otherwise."""
    source: KnowledgeSource
    records: list[KnowledgeRecord] = field(default_factory=list)
    error: SourceLoadError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def load_source(source: KnowledgeSource) -> SourceLoadResult:
    """Read and validate one knowledge file. Never raises for bad input."""
    try:
        raw = source.path.read_text(encoding="utf-8")
    except OSError as e:
        return SourceLoadResult(source, error=SourceLoadError(str(source.path), f"unreadable ({e})"))
    except UnicodeDecodeError:
        return SourceLoadResult(source, error=SourceLoadError(str(source.path), "not valid UTF-8"))

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        return SourceLoadResult(source, error=SourceLoadError(str(source.path), f"invalid JSON ({e})"))

    try:
        records = _RECORDS.validate_python(data)
    except ValidationError as e:
        return SourceLoadResult(
            source,
            error=SourceLoadError(
                str(source.path),
                f"expected an array of {{prompt, response}} records ({e.error_count()} errors)",
            ),
        )

    return SourceLoadResult(source, records=records)


# ---------------------------------------------------------------------------
# AGGREGATION
# ---------------------------------------------------------------------------


def load_documents(sources: list[KnowledgeSource]) -> list[Document]:
    """
    Load all sources into a flat list of documents.

    Order is source order, then record order. Ids are assigned per
    category starting at 1; if two sources share a category the
    sequence continues so ids stay unique.
    """
    documents: list[Document] = []
    next_index: Counter[Category] = Counter()

    for source in sources:
        result = load_source(source)
        if not result.ok:
            logger.error(f"Error reading knowledge source {result.error}")
            continue

        category = source.category
        for record in result.records:
            documents.append(
                Document(
                    id=make_id(category, next_index[category]),
                    category=category,
                    title=record.prompt,
                    body=record.response,
                )
            )
            next_index[category] += 1

    logger.info(f"Loaded {len(documents)} documents across all categories")
    breakdown = Counter(doc.category.value for doc in documents)
    logger.info(f"Document breakdown by category: {dict(breakdown)}")
    return documents
