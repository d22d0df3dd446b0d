"""
Unit Tests for the Embedding Cache Store

Tests the file cache's round trip, its miss behaviour on missing or
corrupt files, atomic replacement, and the in-memory test double.
"""

import json
import logging

import numpy as np
import pytest

from culinary_rag.retrieval.cache import (
    EmbeddingCacheStore,
    FileEmbeddingCache,
    InMemoryEmbeddingCache,
    get_cache_store,
)
from culinary_rag.retrieval.document import Category, Document, EmbeddedDocument


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------


@pytest.fixture
def embedded_docs():
    rng = np.random.default_rng(42)
    docs = [
        Document("recipes_1", Category.RECIPES, "Boil water", "Heat water to 100C"),
        Document("recipes_2", Category.RECIPES, "Poach an egg", "Simmer gently"),
        Document("food_safety_1", Category.FOOD_SAFETY, "Chicken", "Cook to 74C"),
    ]
    return [EmbeddedDocument(doc, rng.standard_normal(8).astype(np.float32)) for doc in docs]


@pytest.fixture
def cache_path(tmp_path):
    return tmp_path / "embeddings" / "embeddings.json"


def _as_map(docs):
    return {d.id: (d.document, d.vector) for d in docs}


# ---------------------------------------------------------------------------
# FILE CACHE
# ---------------------------------------------------------------------------


class TestFileEmbeddingCache:
    """Test FileEmbeddingCache."""

    def test_implements_protocol(self, cache_path):
        assert isinstance(FileEmbeddingCache(cache_path), EmbeddingCacheStore)

    def test_missing_file_is_a_miss(self, cache_path):
        assert FileEmbeddingCache(cache_path).load() is None

    def test_round_trip(self, cache_path, embedded_docs):
        """save then load reproduces the same document set."""
        store = FileEmbeddingCache(cache_path)
        store.save(embedded_docs)
        loaded = FileEmbeddingCache(cache_path).load()

        assert loaded is not None
        original, restored = _as_map(embedded_docs), _as_map(loaded)
        assert original.keys() == restored.keys()
        for doc_id, (doc, vector) in original.items():
            assert restored[doc_id][0] == doc
            np.testing.assert_allclose(restored[doc_id][1], vector, rtol=1e-6)

    def test_save_creates_directory(self, cache_path, embedded_docs):
        assert not cache_path.parent.exists()
        FileEmbeddingCache(cache_path).save(embedded_docs)
        assert cache_path.exists()

    def test_file_uses_external_record_shape(self, cache_path, embedded_docs):
        FileEmbeddingCache(cache_path).save(embedded_docs)
        data = json.loads(cache_path.read_text())

        assert len(data) == 3
        assert set(data[0]) == {"id", "title", "snippet", "category", "embedding", "computedAt"}
        assert data[0]["snippet"] == "Heat water to 100C"
        assert data[2]["category"] == "food_safety"

    def test_save_overwrites_previous_cache(self, cache_path, embedded_docs):
        store = FileEmbeddingCache(cache_path)
        store.save(embedded_docs)
        store.save(embedded_docs[:1])
        assert [d.id for d in store.load()] == ["recipes_1"]

    def test_save_leaves_no_temporary_files(self, cache_path, embedded_docs):
        FileEmbeddingCache(cache_path).save(embedded_docs)
        assert [p.name for p in cache_path.parent.iterdir()] == ["embeddings.json"]

    def test_failed_write_keeps_previous_cache(self, cache_path, embedded_docs, monkeypatch):
        store = FileEmbeddingCache(cache_path)
        store.save(embedded_docs)

        def broken_dump(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr("culinary_rag.retrieval.cache.json.dump", broken_dump)
        with pytest.raises(OSError):
            store.save(embedded_docs[:1])
        monkeypatch.undo()

        assert len(FileEmbeddingCache(cache_path).load()) == 3
        assert [p.name for p in cache_path.parent.iterdir()] == ["embeddings.json"]

    def test_computed_at_is_tracked(self, cache_path, embedded_docs):
        store = FileEmbeddingCache(cache_path)
        assert store.computed_at is None
        store.save(embedded_docs)
        saved_at = store.computed_at
        assert saved_at is not None

        reloaded = FileEmbeddingCache(cache_path)
        reloaded.load()
        assert reloaded.computed_at == saved_at

    @pytest.mark.parametrize(
        "content",
        [
            "",
            "not json at all",
            '{"id": "recipes_1"}',
            "[]",
            '[{"id": "recipes_1", "title": "t"}]',
            '[{"id": "a_1", "title": "t", "snippet": "s", "category": "recipes", '
            '"embedding": ["x"], "computedAt": "2024-01-01T00:00:00Z"}]',
        ],
    )
    def test_corrupt_file_is_a_miss(self, cache_path, content, caplog):
        cache_path.parent.mkdir(parents=True)
        cache_path.write_text(content)

        with caplog.at_level(logging.WARNING):
            assert FileEmbeddingCache(cache_path).load() is None

    def test_invalid_utf8_file_is_a_miss(self, cache_path, caplog):
        cache_path.parent.mkdir(parents=True)
        cache_path.write_bytes(b"\xff\xfe[garbage")

        with caplog.at_level(logging.WARNING):
            assert FileEmbeddingCache(cache_path).load() is None
        assert "Ignoring unreadable embeddings file" in caplog.text

    def test_inconsistent_vector_lengths_is_a_miss(self, cache_path):
        cache_path.parent.mkdir(parents=True)
        records = [
            {"id": "a_1", "title": "t", "snippet": "s", "category": "recipes",
             "embedding": [1.0, 2.0], "computedAt": "2024-01-01T00:00:00Z"},
            {"id": "a_2", "title": "t", "snippet": "s", "category": "recipes",
             "embedding": [1.0], "computedAt": "2024-01-01T00:00:00Z"},
        ]
        cache_path.write_text(json.dumps(records))
        assert FileEmbeddingCache(cache_path).load() is None

    def test_duplicate_ids_is_a_miss(self, cache_path):
        cache_path.parent.mkdir(parents=True)
        record = {"id": "a_1", "title": "t", "snippet": "s", "category": "recipes",
                  "embedding": [1.0, 2.0], "computedAt": "2024-01-01T00:00:00Z"}
        cache_path.write_text(json.dumps([record, record]))
        assert FileEmbeddingCache(cache_path).load() is None

    def test_missing_category_falls_back_to_general(self, cache_path):
        cache_path.parent.mkdir(parents=True)
        record = {"id": "a_1", "title": "t", "snippet": "s",
                  "embedding": [1.0, 2.0], "computedAt": "2024-01-01T00:00:00Z"}
        cache_path.write_text(json.dumps([record]))
        loaded = FileEmbeddingCache(cache_path).load()
        assert loaded[0].category is Category.GENERAL

    def test_file_info(self, cache_path, embedded_docs):
        store = FileEmbeddingCache(cache_path)
        assert store.file_info() == {"exists": False}
        store.save(embedded_docs)
        info = store.file_info()
        assert info["exists"] is True
        assert info["size"] > 0


# ---------------------------------------------------------------------------
# IN-MEMORY CACHE
# ---------------------------------------------------------------------------


class TestInMemoryEmbeddingCache:
    """Test the in-memory test double."""

    def test_empty_is_a_miss(self):
        assert InMemoryEmbeddingCache().load() is None

    def test_save_then_load(self, embedded_docs):
        store = InMemoryEmbeddingCache()
        store.save(embedded_docs)
        assert store.save_called
        assert store.save_count == 1
        assert [d.id for d in store.load()] == [d.id for d in embedded_docs]

    def test_initial_documents(self, embedded_docs):
        store = InMemoryEmbeddingCache(embedded_docs)
        assert len(store.load()) == 3
        assert not store.save_called


# ---------------------------------------------------------------------------
# FACTORY FUNCTION
# ---------------------------------------------------------------------------


class TestGetCacheStore:
    """Test the get_cache_store factory."""

    def test_file_store(self, cache_path):
        store = get_cache_store(file_path=cache_path)
        assert isinstance(store, FileEmbeddingCache)
        assert store.path == cache_path

    def test_memory_store(self, embedded_docs):
        store = get_cache_store(use_file=False, initial=embedded_docs)
        assert isinstance(store, InMemoryEmbeddingCache)
        assert len(store.load()) == 3
