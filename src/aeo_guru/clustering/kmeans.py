"""
Core clustering logic: k-means over cosine distance with a URL fallback.

Seeding and tie-breaking are deterministic, so identical input order and
configuration always give identical clusters and centroids.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np

from .models import Cluster, PointId, ProjectPoint
from .vectors import cosine_distance_matrix, normalize_vector

logger = logging.getLogger(__name__)


@dataclass
class KMeansConfig:
    """Configuration for one k-means call."""
    desired_cluster_size: int = 20
    max_iterations: int = 30
    max_clusters: int = 12


def round_half_up(value: float) -> int:
    """Round to nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def naive_cluster(points: Sequence[ProjectPoint], max_cluster_size: int = 50) -> List[Cluster]:
    """
    Group points by payload URL, one cluster per distinct URL.

    Cluster ids are "<url>#c<n>" with n counting up from 0 in creation
    order. Points without a URL share one group.

    Args:
        points: Points in input order
        max_cluster_size: Accepted for compatibility, not enforced

    Returns:
        Clusters without centroids
    """
    clusters: List[Cluster] = []
    by_url: Dict[str, Cluster] = {}

    for point in points:
        url = point.url or ''
        cluster = by_url.get(url)
        if cluster is None:
            cluster = Cluster(id=f"{url}#c{len(clusters)}")
            by_url[url] = cluster
            clusters.append(cluster)
        cluster.point_ids.append(point.id)

    return clusters


def kmeans_cluster(
    points: Sequence[ProjectPoint],
    config: Optional[KMeansConfig] = None
) -> List[Cluster]:
    """
    Partition points into topical clusters.

    Points with vectors go through k-means over cosine distance, seeded with
    the first k vectors. Points without vectors are folded in afterwards:
    into the cluster of a vectorized point with the same URL, else into the
    currently smallest cluster.

    Falls back to naive_cluster when fewer than 2 points carry vectors.
    Vectors whose dimension differs from the first vector's are treated as
    absent, so those points are folded in like vector-less points.
    Malformed vectors (non-numeric, NaN, inf) are likewise treated as absent.

    Args:
        points: Points in input order (must not be empty)
        config: K-means configuration (defaults if None)

    Returns:
        Non-empty clusters with ids "cluster-<n>" (1-based, may skip numbers)
    """
    config = config or KMeansConfig()

    vectorized: List[ProjectPoint] = []
    vectors: List[List[float]] = []
    vectorless: List[ProjectPoint] = []

    for point in points:
        vector = normalize_vector(point.vector)
        if vector:
            vectorized.append(point)
            vectors.append(vector)
        else:
            vectorless.append(point)

    if vectors:
        # Mixed dimensionality cannot be averaged; keep the first vector's
        # dimension and treat the rest as vector-less.
        dim = len(vectors[0])
        mismatched = [i for i, v in enumerate(vectors) if len(v) != dim]
        if mismatched:
            logger.warning(
                f"{len(mismatched)} vectors do not match dimension {dim}, "
                f"treating them as vector-less"
            )
            for i in reversed(mismatched):
                vectorless.append(vectorized.pop(i))
                vectors.pop(i)

    if len(vectorized) < 2:
        logger.info(
            f"Only {len(vectorized)} vectorized points, using naive URL clustering"
        )
        return naive_cluster(points)

    data = np.asarray(vectors, dtype=np.float64)
    n_points = data.shape[0]

    k = clamp(
        round_half_up(n_points / config.desired_cluster_size),
        1,
        min(config.max_clusters, n_points)
    )
    logger.info(f"Running k-means: {n_points} vectors, dim={data.shape[1]}, k={k}")

    centroids = data[:k].copy()
    assignments = np.full(n_points, -1, dtype=np.int64)

    for iteration in range(config.max_iterations):
        distances = cosine_distance_matrix(data, centroids)
        # argmin returns the first index on ties
        new_assignments = np.argmin(distances, axis=1)
        changed = bool(np.any(new_assignments != assignments))
        assignments = new_assignments

        for c in range(k):
            members = data[assignments == c]
            if len(members):
                centroids[c] = members.mean(axis=0)

        if not changed:
            logger.debug(f"K-means converged after {iteration + 1} iterations")
            break

    buckets: List[List[PointId]] = [[] for _ in range(k)]
    url_bucket: Dict[str, int] = {}
    for point, c in zip(vectorized, assignments):
        c = int(c)
        buckets[c].append(point.id)
        url = point.url
        if url and url not in url_bucket:
            url_bucket[url] = c

    for point in vectorless:
        url = point.url
        if url and url in url_bucket:
            target = url_bucket[url]
        else:
            sizes = [len(bucket) for bucket in buckets]
            target = sizes.index(min(sizes))
        buckets[target].append(point.id)

    clusters = [
        Cluster(
            id=f"cluster-{index + 1}",
            point_ids=bucket,
            centroid=centroids[index].tolist()
        )
        for index, bucket in enumerate(buckets)
        if bucket
    ]

    logger.info(
        f"K-means produced {len(clusters)} clusters "
        f"({len(vectorless)} vector-less points folded in)"
    )
    return clusters
