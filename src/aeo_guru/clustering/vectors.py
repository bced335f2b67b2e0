"""
Vector helpers: normalization of raw store vectors and cosine distance.
"""

import math
import numbers
from typing import Any, List, Mapping, Optional, Sequence

import numpy as np
from sklearn.metrics.pairwise import cosine_distances


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _is_finite_number(value: Any) -> bool:
    return _is_number(value) and math.isfinite(value)


def _flat_numeric(value: Any) -> Optional[List[float]]:
    """Apply the list rule: flat numeric list, or the first inner list."""
    if isinstance(value, np.ndarray):
        value = value.tolist()
    if not isinstance(value, (list, tuple)) or len(value) == 0:
        return None

    first = value[0]
    if _is_number(first):
        # Every element must be a finite number, else the vector is unusable
        if all(_is_finite_number(v) for v in value):
            return list(value)
        return None
    if isinstance(first, (list, tuple, np.ndarray)):
        return _flat_numeric(first) if len(first) and _is_number(first[0]) else None
    return None


def normalize_vector(raw: Any) -> Optional[List[float]]:
    """
    Extract exactly one flat numeric vector from a raw store value.

    Accepted shapes:
        - flat numeric list -> returned as is
        - list of numeric lists -> the first inner list
        - mapping of named vectors -> first value (in iteration order) that
          normalizes by the list rule

    Sparse vectors ({"indices": ..., "values": ...}) are not expanded and
    yield None. Lists containing non-numeric, NaN or infinite elements yield
    None. Anything unparseable yields None; this never raises.

    Args:
        raw: Vector value as returned by the store

    Returns:
        Flat list of numbers, or None
    """
    if raw is None:
        return None

    if isinstance(raw, Mapping):
        # A top-level sparse vector would otherwise return its indices list
        if 'indices' in raw and 'values' in raw:
            return None
        for value in raw.values():
            vector = _flat_numeric(value)
            if vector:
                return vector
        return None

    return _flat_numeric(raw)


def cosine_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine distance (1 - cosine similarity) between two vectors.

    A zero vector has similarity 0 with anything, so its distance is 1.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0.0 or norm_b == 0.0:
        return 1.0
    return float(1.0 - np.dot(va, vb) / (norm_a * norm_b))


def cosine_distance_matrix(vectors: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """
    Pairwise cosine distances, shape (n_vectors, n_centroids).

    scikit-learn L2-normalizes both sides and leaves zero rows at zero, which
    gives zero vectors a distance of 1 to every centroid.
    """
    return cosine_distances(vectors, centroids)
