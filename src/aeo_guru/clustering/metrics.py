"""
Clustering quality metrics for logging and run summaries.
"""

import logging
from typing import Any, Dict, List, Sequence

import numpy as np
from sklearn.metrics import silhouette_score

from .models import Cluster, ProjectPoint
from .vectors import normalize_vector

logger = logging.getLogger(__name__)


def compute_quality_metrics(
    points: Sequence[ProjectPoint],
    clusters: Sequence[Cluster]
) -> Dict[str, Any]:
    """
    Compute clustering quality metrics.

    Args:
        points: Points that were clustered
        clusters: Clusters returned for those points

    Returns:
        Dictionary with n_clusters, cluster size statistics and
        silhouette_score (None when fewer than 2 clusters carry vectors)
    """
    metrics: Dict[str, Any] = {'n_clusters': len(clusters)}

    sizes = [cluster.size for cluster in clusters]
    if sizes:
        metrics['min_cluster_size'] = int(min(sizes))
        metrics['max_cluster_size'] = int(max(sizes))
        metrics['mean_cluster_size'] = float(np.mean(sizes))
        metrics['median_cluster_size'] = float(np.median(sizes))

    vectors_by_id = {}
    for point in points:
        vector = normalize_vector(point.vector)
        if vector:
            vectors_by_id[point.id] = vector

    embeddings: List[List[float]] = []
    labels: List[int] = []
    for label, cluster in enumerate(clusters):
        for point_id in cluster.point_ids:
            if point_id in vectors_by_id:
                embeddings.append(vectors_by_id[point_id])
                labels.append(label)

    metrics['silhouette_score'] = None
    n_labels = len(set(labels))
    if n_labels < 2 or n_labels >= len(labels):
        logger.warning("Too few clusters for silhouette score")
        return metrics

    try:
        score = silhouette_score(np.asarray(embeddings), labels, metric='cosine')
        metrics['silhouette_score'] = float(score)
        logger.info(f"Silhouette score: {score:.3f}")
    except ValueError as e:
        logger.warning(f"Failed to compute silhouette score: {e}")

    return metrics
