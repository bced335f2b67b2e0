"""Vector store (Qdrant) and project registry."""

from .projects import (
    ClusterNote,
    Project,
    ProjectCore,
    ProjectExistsError,
    ProjectNotFoundError,
    ProjectStore,
)
from .vector_store import DEFAULT_COLLECTION, VectorStore, point_id_for

__all__ = [
    "ClusterNote",
    "DEFAULT_COLLECTION",
    "Project",
    "ProjectCore",
    "ProjectExistsError",
    "ProjectNotFoundError",
    "ProjectStore",
    "VectorStore",
    "point_id_for",
]
