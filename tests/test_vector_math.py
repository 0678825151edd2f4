"""Tests for cosine similarity."""

import numpy as np
import pytest

from echolog.errors import DimensionMismatch
from echolog.linking.vector_math import cosine_similarity


def test_identical_vectors_are_fully_similar() -> None:
    v = np.array([0.3, -1.2, 4.0, 0.5])
    assert cosine_similarity(v, v) == pytest.approx(1.0)


def test_opposite_vectors_are_fully_dissimilar() -> None:
    v = np.array([0.3, -1.2, 4.0, 0.5])
    assert cosine_similarity(v, -v) == pytest.approx(-1.0)


def test_orthogonal_vectors_have_zero_similarity() -> None:
    assert cosine_similarity([1.0, 0.0, 0.0], [0.0, 2.0, 0.0]) == pytest.approx(0.0)


def test_similarity_ignores_magnitude() -> None:
    assert cosine_similarity([1.0, 2.0], [10.0, 20.0]) == pytest.approx(1.0)


def test_nearly_parallel_vectors() -> None:
    similarity = cosine_similarity([1.0, 0.0], [1.0, 0.001])
    assert 0.9999 < similarity <= 1.0


def test_zero_vector_falls_back_to_zero() -> None:
    """A zero-magnitude vector must not produce NaN."""
    assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0
    assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0


def test_dimension_mismatch_raises() -> None:
    with pytest.raises(DimensionMismatch) as exc_info:
        cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])

    assert exc_info.value.left == 2
    assert exc_info.value.right == 3


def test_result_stays_within_bounds() -> None:
    rng = np.random.default_rng(42)
    for _ in range(20):
        u, v = rng.normal(size=8), rng.normal(size=8)
        assert -1.0 <= cosine_similarity(u, v) <= 1.0


def test_accepts_float32_embeddings() -> None:
    u = np.array([0.6, 0.8], dtype=np.float32)
    assert cosine_similarity(u, [0.6, 0.8]) == pytest.approx(1.0)
