"""
Unit Tests for the Knowledge-Base Loader

Tests categorization, id assignment, ordering and partial source failure.
Uses pytest's tmp_path so every test owns its knowledge files.
"""

import json
import logging

import pytest

from culinary_rag.core.errors import SourceLoadError
from culinary_rag.retrieval.document import Category
from culinary_rag.retrieval.loader import (
    DEFAULT_SOURCE_NAMES,
    SOURCE_CATEGORIES,
    KnowledgeSource,
    default_sources,
    load_documents,
    load_source,
)


def _write(path, records):
    path.write_text(json.dumps(records), encoding="utf-8")
    return KnowledgeSource.from_path(path)


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------


@pytest.fixture
def recipes(tmp_path):
    return _write(
        tmp_path / "recipes.json",
        [
            {"prompt": "Boil water", "response": "Heat water to 100C"},
            {"prompt": "Poach an egg", "response": "Simmer gently with a splash of vinegar"},
        ],
    )


@pytest.fixture
def safety(tmp_path):
    return _write(
        tmp_path / "food_Safety.json",
        [{"prompt": "Chicken temperature", "response": "Cook to 74C"}],
    )


@pytest.fixture
def equipment(tmp_path):
    return _write(
        tmp_path / "equipment_Usage.json",
        [{"prompt": "Sharpen a knife", "response": "Use a whetstone at 15 degrees"}],
    )


# ---------------------------------------------------------------------------
# CATEGORIZATION
# ---------------------------------------------------------------------------


class TestKnowledgeSource:
    """Test the static source -> category mapping."""

    @pytest.mark.parametrize(
        "name,category",
        [
            ("recipes", Category.RECIPES),
            ("techniques_Tips", Category.TECHNIQUES),
            ("nutrition_Advice", Category.NUTRITION),
            ("ingredient_Substitutions", Category.SUBSTITUTIONS),
            ("food_Safety", Category.FOOD_SAFETY),
            ("equipment_Usage", Category.EQUIPMENT),
            ("cooking_Advice", Category.COOKING_ADVICE),
        ],
    )
    def test_known_sources_map_to_category(self, tmp_path, name, category):
        assert KnowledgeSource(name, tmp_path / f"{name}.json").category is category

    def test_unknown_source_falls_back_to_general(self, tmp_path):
        assert KnowledgeSource("misc_notes", tmp_path / "misc_notes.json").category is Category.GENERAL

    def test_mapping_is_exact_not_substring(self, tmp_path):
        """A name merely containing a known name is not that category."""
        assert KnowledgeSource("old_recipes", tmp_path / "old_recipes.json").category is Category.GENERAL

    def test_default_sources_cover_all_known_files(self, tmp_path):
        sources = default_sources(tmp_path)
        assert [s.name for s in sources] == DEFAULT_SOURCE_NAMES
        assert {s.category for s in sources} == set(SOURCE_CATEGORIES.values())
        assert all(s.path.parent == tmp_path for s in sources)


# ---------------------------------------------------------------------------
# SINGLE SOURCE
# ---------------------------------------------------------------------------


class TestLoadSource:
    """Test load_source result objects."""

    def test_valid_source(self, recipes):
        result = load_source(recipes)
        assert result.ok
        assert [r.prompt for r in result.records] == ["Boil water", "Poach an egg"]

    def test_missing_file_is_an_error_result(self, tmp_path):
        result = load_source(KnowledgeSource("recipes", tmp_path / "missing.json"))
        assert not result.ok
        assert isinstance(result.error, SourceLoadError)
        assert result.records == []

    def test_invalid_json_is_an_error_result(self, tmp_path):
        path = tmp_path / "recipes.json"
        path.write_text("[{not json", encoding="utf-8")
        assert not load_source(KnowledgeSource.from_path(path)).ok

    def test_non_array_is_an_error_result(self, tmp_path):
        source = _write(tmp_path / "recipes.json", {"prompt": "x", "response": "y"})
        assert not load_source(source).ok

    def test_record_missing_response_is_an_error_result(self, tmp_path):
        source = _write(tmp_path / "recipes.json", [{"prompt": "only a prompt"}])
        assert not load_source(source).ok

    def test_invalid_utf8_is_an_error_result(self, tmp_path):
        path = tmp_path / "recipes.json"
        path.write_bytes(b"[\xff]")
        result = load_source(KnowledgeSource.from_path(path))
        assert not result.ok
        assert "not valid UTF-8" in str(result.error)


# ---------------------------------------------------------------------------
# AGGREGATION
# ---------------------------------------------------------------------------


class TestLoadDocuments:
    """Test load_documents aggregation."""

    def test_maps_prompt_and_response(self, recipes):
        docs = load_documents([recipes])
        assert docs[0].title == "Boil water"
        assert docs[0].body == "Heat water to 100C"
        assert docs[0].category is Category.RECIPES

    def test_ids_are_sequential_per_category(self, recipes, safety):
        docs = load_documents([recipes, safety])
        assert [d.id for d in docs] == ["recipes_1", "recipes_2", "food_safety_1"]

    def test_order_is_source_then_record(self, recipes, safety, equipment):
        docs = load_documents([equipment, recipes, safety])
        assert [d.id for d in docs] == ["equipment_1", "recipes_1", "recipes_2", "food_safety_1"]

    def test_shared_category_continues_sequence(self, tmp_path, recipes):
        extra = _write(tmp_path / "misc.json", [{"prompt": "a", "response": "b"}])
        other = _write(tmp_path / "notes.json", [{"prompt": "c", "response": "d"}])
        docs = load_documents([recipes, extra, other])
        assert [d.id for d in docs] == ["recipes_1", "recipes_2", "general_1", "general_2"]

    def test_ids_are_unique(self, recipes, safety, equipment):
        docs = load_documents([recipes, safety, equipment])
        assert len({d.id for d in docs}) == len(docs)

    def test_missing_source_is_skipped(self, tmp_path, recipes, safety, equipment, caplog):
        """Three valid sources and one missing: only the valid ones load, nothing raises."""
        missing = KnowledgeSource("nutrition_Advice", tmp_path / "nutrition_Advice.json")

        with caplog.at_level(logging.ERROR):
            docs = load_documents([recipes, missing, safety, equipment])

        assert {d.category for d in docs} == {Category.RECIPES, Category.FOOD_SAFETY, Category.EQUIPMENT}
        assert len(docs) == 4
        assert "nutrition_Advice.json" in caplog.text

    def test_malformed_source_is_skipped(self, tmp_path, recipes):
        broken = tmp_path / "food_Safety.json"
        broken.write_text("{", encoding="utf-8")
        docs = load_documents([KnowledgeSource.from_path(broken), recipes])
        assert [d.id for d in docs] == ["recipes_1", "recipes_2"]

    def test_undecodable_source_is_skipped(self, tmp_path, recipes, caplog):
        broken = tmp_path / "food_Safety.json"
        broken.write_bytes(b"[\xff]")
        with caplog.at_level(logging.ERROR):
            docs = load_documents([KnowledgeSource.from_path(broken), recipes])
        assert [d.id for d in docs] == ["recipes_1", "recipes_2"]
        assert "food_Safety.json" in caplog.text

    def test_no_sources_returns_empty(self):
        assert load_documents([]) == []

    def test_document_text_joins_title_and_body(self, recipes):
        doc = load_documents([recipes])[0]
        assert doc.text == "Boil water. Heat water to 100C"
