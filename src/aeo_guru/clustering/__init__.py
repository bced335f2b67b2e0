"""
Embedding-space clustering for project points.

Groups page sections into topical clusters with k-means over cosine
distance, falling back to URL grouping when too few vectors exist.
"""

from .kmeans import KMeansConfig, kmeans_cluster, naive_cluster
from .metrics import compute_quality_metrics
from .models import Cluster, ProjectPoint
from .sizing import cluster_sizing, config_for
from .vectors import cosine_distance, normalize_vector

__all__ = [
    'Cluster',
    'KMeansConfig',
    'ProjectPoint',
    'cluster_sizing',
    'compute_quality_metrics',
    'config_for',
    'cosine_distance',
    'kmeans_cluster',
    'naive_cluster',
    'normalize_vector',
]
