"""
Unit Tests for Vector Math

Cosine similarity properties: self-similarity, symmetry, degenerate input.
"""

import math

import numpy as np
import pytest

from culinary_rag.retrieval.similarity import cosine_similarity


class TestCosineSimilarity:
    """Test cosine_similarity."""

    @pytest.mark.parametrize(
        "vector",
        [
            [1.0, 0.0, 0.0],
            [0.3, -2.5, 7.0, 1e-3],
            list(np.linspace(-1.0, 1.0, 1024) + 0.01),
        ],
    )
    def test_self_similarity_is_one(self, vector):
        """A non-zero vector is maximally similar to itself."""
        assert cosine_similarity(vector, vector) == pytest.approx(1.0)

    def test_symmetry(self):
        """Order of arguments must not matter."""
        rng = np.random.default_rng(7)
        for _ in range(20):
            a = rng.standard_normal(16)
            b = rng.standard_normal(16)
            assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))

    def test_orthogonal_vectors(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_opposite_vectors(self):
        assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)

    def test_magnitude_is_ignored(self):
        assert cosine_similarity([1.0, 1.0], [10.0, 10.0]) == pytest.approx(1.0)

    def test_zero_vector_returns_nan(self):
        """Degenerate input yields NaN instead of raising."""
        assert math.isnan(cosine_similarity([0.0, 0.0], [1.0, 2.0]))
        assert math.isnan(cosine_similarity([1.0, 2.0], [0.0, 0.0]))

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError):
            cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0])

    def test_empty_vectors_raise(self):
        with pytest.raises(ValueError):
            cosine_similarity([], [])

    def test_returns_python_float(self):
        result = cosine_similarity(np.array([1.0, 2.0], dtype=np.float32), [2.0, 1.0])
        assert isinstance(result, float)
