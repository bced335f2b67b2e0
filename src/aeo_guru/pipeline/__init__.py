"""Ingest and clustering pipelines."""

from .clustering_run import ClusteringRun, ClusterRunResult
from .ingest import IngestError, IngestResult, collect_pages, ingest_project

__all__ = [
    "ClusterRunResult",
    "ClusteringRun",
    "IngestError",
    "IngestResult",
    "collect_pages",
    "ingest_project",
]
