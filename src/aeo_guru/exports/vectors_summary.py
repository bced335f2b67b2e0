"""Vector and cluster statistics for a project."""

import math
from collections import Counter
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..clustering.models import ProjectPoint

DISTRIBUTION_LIMIT = 4
SAMPLE_LIMIT = 5
PREVIEW_LENGTH = 8


def compute_magnitude(vector: Optional[Sequence[float]]) -> Optional[float]:
    if not vector:
        return None
    energy = sum(value * value for value in vector)
    if not math.isfinite(energy):
        return None
    return math.sqrt(energy)


def _first_str(payload: Dict[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = payload.get(key)
        if isinstance(value, str):
            return value
    return None


def build_distribution(
    points: Sequence[ProjectPoint],
    pick: Callable[[Dict[str, Any]], Optional[str]],
    limit: int = DISTRIBUTION_LIMIT
) -> List[Dict[str, Any]]:
    """Top values of a payload field, most frequent first."""
    counts = Counter()
    for point in points:
        key = pick(point.payload or {})
        if key:
            counts[key] += 1
    return [{"label": label, "count": count} for label, count in counts.most_common(limit)]


def _score(point: ProjectPoint) -> float:
    value = (point.payload or {}).get("score_opportunity")
    try:
        score = float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0
    return score if math.isfinite(score) else 0.0


def build_samples(points: Sequence[ProjectPoint], limit: int = SAMPLE_LIMIT) -> List[Dict[str, Any]]:
    """Highest-opportunity vectorized points with an 8-value preview."""
    vectorized = [p for p in points if p.vector]
    vectorized.sort(key=_score, reverse=True)

    samples = []
    for point in vectorized[:limit]:
        payload = point.payload or {}
        samples.append({
            "id": str(point.id),
            "url": point.url,
            "title": _first_str(payload, "title", "h1"),
            "intent": _first_str(payload, "intent", "clusterIntent"),
            "primaryKeyword": _first_str(payload, "primaryKeyword", "clusterPrimaryKeyword"),
            "lang": point.lang,
            "magnitude": compute_magnitude(point.vector),
            "preview": list(point.vector[:PREVIEW_LENGTH]),
        })
    return samples


def summarize_vectors(points: Sequence[ProjectPoint]) -> Optional[Dict[str, Any]]:
    """
    Summary of a project's vectors; None when there are no points.
    """
    if not points:
        return None

    first_vectorized = next((p for p in points if p.vector), None)
    magnitudes = [m for m in (compute_magnitude(p.vector) for p in points) if m is not None]

    return {
        "totalPoints": len(points),
        "vectorDimension": len(first_vectorized.vector) if first_vectorized else None,
        "avgMagnitude": round(sum(magnitudes) / len(magnitudes), 3) if magnitudes else None,
        "maxMagnitude": round(max(magnitudes), 3) if magnitudes else None,
        "languages": build_distribution(points, lambda payload: _first_str(payload, "lang")),
        "intents": build_distribution(points, lambda payload: _first_str(payload, "intent", "clusterIntent")),
        "sources": build_distribution(points, lambda payload: _first_str(payload, "source")),
        "samples": build_samples(points),
    }


def cluster_status(points: Sequence[ProjectPoint]) -> int:
    """Number of distinct non-blank cluster IDs."""
    return len({p.cluster_id for p in points if p.cluster_id})
