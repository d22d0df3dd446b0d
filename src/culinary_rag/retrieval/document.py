"""
Document model for the retrieval system.

Single responsibility: Define the structure of knowledge-base entries
as they are loaded from source files and as they live in the index.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np


class Category(Enum):
    """Knowledge-base categories. Each source file maps to exactly one."""

    RECIPES = "recipes"
    TECHNIQUES = "techniques"
    NUTRITION = "nutrition"
    SUBSTITUTIONS = "substitutions"
    FOOD_SAFETY = "food_safety"
    EQUIPMENT = "equipment"
    COOKING_ADVICE = "cooking_advice"
    GENERAL = "general"

    @classmethod
    def parse(cls, value: str | None) -> Category:
        """Parse a stored category name, falling back to GENERAL."""
        if not value:
            return cls.GENERAL
        try:
            return cls(value)
        except ValueError:
            return cls.GENERAL


def make_id(category: Category, index: int) -> str:
    """Build the stable document id for the index-th (0-based) entry of a category."""
    return f"{category.value}_{index + 1}"


@dataclass(frozen=True)
class Document:
    """
    A single knowledge-base entry.

    Immutable once loaded. `title` comes from the source record's prompt,
    `body` from its response.
    """
    id: str
    category: Category
    title: str
    body: str

    @property
    def text(self) -> str:
        """Text used both for embedding and as generation context."""
        return f"{self.title}. {self.body}"


@dataclass(frozen=True, eq=False)
class EmbeddedDocument:
    """A document paired with its embedding vector."""
    document: Document
    vector: np.ndarray

    @property
    def id(self) -> str:
        return self.document.id

    @property
    def category(self) -> Category:
        return self.document.category

    @property
    def dimension(self) -> int:
        return int(self.vector.shape[0])
