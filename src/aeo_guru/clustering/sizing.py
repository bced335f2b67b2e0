"""
Cluster sizing policy.

Each cluster costs one LLM annotation call downstream, so the cluster count
grows logarithmically with the number of points.
"""

import math
from typing import Tuple

from .kmeans import KMeansConfig, clamp, round_half_up

MIN_DESIRED_CLUSTER_SIZE = 8
MAX_DESIRED_CLUSTER_SIZE = 40
MAX_CLUSTER_CEILING = 32


def cluster_sizing(total_points: int) -> Tuple[int, int]:
    """
    Compute (desired_cluster_size, max_clusters) for a clustering call.

    desired_cluster_size = clamp(round(total / ln(total + 1)), 8, 40)
    max_clusters = clamp(round(total / desired_cluster_size), 1, 32)

    Args:
        total_points: Number of points that will be clustered

    Returns:
        Tuple of (desired_cluster_size, max_clusters)
    """
    if total_points <= 0:
        return MIN_DESIRED_CLUSTER_SIZE, 1

    desired = clamp(
        round_half_up(total_points / math.log(total_points + 1)),
        MIN_DESIRED_CLUSTER_SIZE,
        MAX_DESIRED_CLUSTER_SIZE
    )
    max_clusters = clamp(round_half_up(total_points / desired), 1, MAX_CLUSTER_CEILING)
    return desired, max_clusters


def config_for(total_points: int, max_iterations: int = 30) -> KMeansConfig:
    """Build a KMeansConfig from the sizing policy."""
    desired, max_clusters = cluster_sizing(total_points)
    return KMeansConfig(
        desired_cluster_size=desired,
        max_iterations=max_iterations,
        max_clusters=max_clusters
    )
