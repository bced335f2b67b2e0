"""
Runtime configuration from environment variables.

Environment Variables:
    QDRANT_URL: Qdrant endpoint (required for store access)
    QDRANT_API_KEY: Qdrant API key
    QDRANT_COLLECTION: Collection name (default: answergraph_corpus)
    GCP_PROJECT: GCP project ID for Vertex AI
    GCP_REGION: GCP region (default: europe-west4)
    EMBEDDING_MODEL: Gemini embedding model (default: gemini-embedding-001)
    EMBEDDING_DIMENSIONS: Output dimensionality (default: 768)
    AEO_PROJECTS_PATH: Flat-file project store (default: data/projects.json)
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "answergraph_corpus"
DEFAULT_EMBEDDING_MODEL = "gemini-embedding-001"
DEFAULT_EMBEDDING_DIMENSIONS = 768
DEFAULT_PROJECTS_PATH = os.path.join("data", "projects.json")


def _int_env(name: str, default: int) -> int:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {name}: {value!r}, using {default}")
        return default


@dataclass
class Settings:
    """Resolved configuration for clients and stores."""
    qdrant_url: Optional[str] = None
    qdrant_api_key: Optional[str] = None
    collection: str = DEFAULT_COLLECTION
    gcp_project: Optional[str] = None
    gcp_region: str = "europe-west4"
    embedding_model: str = DEFAULT_EMBEDDING_MODEL
    embedding_dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS
    projects_path: str = DEFAULT_PROJECTS_PATH

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            qdrant_url=os.environ.get('QDRANT_URL'),
            qdrant_api_key=os.environ.get('QDRANT_API_KEY'),
            collection=os.environ.get('QDRANT_COLLECTION', DEFAULT_COLLECTION),
            gcp_project=os.environ.get('GCP_PROJECT'),
            gcp_region=os.environ.get('GCP_REGION', 'europe-west4'),
            embedding_model=os.environ.get('EMBEDDING_MODEL', DEFAULT_EMBEDDING_MODEL),
            embedding_dimensions=_int_env('EMBEDDING_DIMENSIONS', DEFAULT_EMBEDDING_DIMENSIONS),
            projects_path=os.environ.get('AEO_PROJECTS_PATH', DEFAULT_PROJECTS_PATH),
        )

    def require_qdrant(self) -> None:
        """Raise if the vector store cannot be reached with this config."""
        if not self.qdrant_url:
            raise ValueError("Missing QDRANT_URL environment variable")
