"""Vector similarity helpers."""

from typing import Sequence

import numpy as np

from echolog.errors import DimensionMismatch


def cosine_similarity(u: np.ndarray | Sequence[float], v: np.ndarray | Sequence[float]) -> float:
    """Cosine similarity between two equal-length vectors.

    Args:
        u: First vector
        v: Second vector

    Returns:
        Similarity in [-1, 1]. If either vector has zero magnitude the result is 0.0,
        so that ranking never sees NaN.

    Raises:
        DimensionMismatch: If the vectors differ in length
    """
    u = np.asarray(u, dtype=np.float64).ravel()
    v = np.asarray(v, dtype=np.float64).ravel()
    if u.shape[0] != v.shape[0]:
        raise DimensionMismatch(u.shape[0], v.shape[0])

    norm = np.linalg.norm(u) * np.linalg.norm(v)
    if norm == 0.0 or not np.isfinite(norm):
        return 0.0

    similarity = float(np.dot(u, v) / norm)
    return max(-1.0, min(1.0, similarity))
