"""
Qdrant vector store for project points.

All projects share one collection; points are partitioned by the
`projectId` payload key and typed by `type` (page_section, query).
"""

import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional, Sequence

from qdrant_client import QdrantClient, models

from ..clustering.models import PointId, ProjectPoint
from ..clustering.vectors import normalize_vector

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "answergraph_corpus"
SCROLL_PAGE_SIZE = 256
UPSERT_BATCH_SIZE = 256

# Fixed namespace so readable keys map to stable point IDs
POINT_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "aeo-guru/points")


def point_id_for(key: str) -> str:
    """
    Qdrant point ID for a readable key like "<projectId>:<url>:chunk-<n>".

    Qdrant only accepts unsigned integers and UUIDs as IDs, so the key is
    mapped to a UUID5 and kept in the payload as `pointKey`.
    """
    return str(uuid.uuid5(POINT_NAMESPACE, key))


class VectorStore:
    """Thin wrapper around QdrantClient for the project collection."""

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        collection: str = DEFAULT_COLLECTION,
        client: Optional[QdrantClient] = None
    ):
        self.url = url
        self.api_key = api_key
        self.collection = collection
        self._client = client

    @property
    def initialized(self) -> bool:
        return self._client is not None

    def initialize(self) -> "VectorStore":
        """Connect to Qdrant (no-op when a client was injected)."""
        if self._client is None:
            if not self.url:
                raise ValueError("QDRANT_URL must be set to use the vector store")
            logger.info(f"Connecting to Qdrant at {self.url} (collection={self.collection})")
            self._client = QdrantClient(url=self.url, api_key=self.api_key)
        return self

    @property
    def client(self) -> QdrantClient:
        if self._client is None:
            raise RuntimeError("VectorStore not initialized. Call initialize() first.")
        return self._client

    def ensure_collection(self, dim: int) -> bool:
        """
        Create the collection with cosine distance if it does not exist.

        Returns:
            True if the collection was created
        """
        existing = self.client.get_collections().collections or []
        if any(c.name == self.collection for c in existing):
            return False

        logger.info(f"Creating collection {self.collection} (dim={dim}, distance=cosine)")
        self.client.create_collection(
            collection_name=self.collection,
            vectors_config=models.VectorParams(size=dim, distance=models.Distance.COSINE),
        )
        return True

    def upsert_points(self, points: Sequence[ProjectPoint], batch_size: int = UPSERT_BATCH_SIZE) -> int:
        """
        Upsert points in batches.

        Raises:
            ValueError: If a point has no vector
        """
        structs = []
        for point in points:
            if point.vector is None:
                raise ValueError(f"Point {point.id} has no vector")
            structs.append(models.PointStruct(id=point.id, vector=point.vector, payload=point.payload))

        for start in range(0, len(structs), batch_size):
            batch = structs[start:start + batch_size]
            self.client.upsert(collection_name=self.collection, points=batch, wait=True)
            logger.info(f"Upserted {start + len(batch)}/{len(structs)} points")

        return len(structs)

    def _project_filter(
        self,
        project_id: str,
        types: Optional[Iterable[str]] = None,
        lang: Optional[str] = None
    ) -> models.Filter:
        must: List[Any] = [
            models.FieldCondition(key="projectId", match=models.MatchValue(value=project_id))
        ]
        if types:
            must.append(models.FieldCondition(key="type", match=models.MatchAny(any=list(types))))
        if lang:
            must.append(models.FieldCondition(key="lang", match=models.MatchValue(value=lang)))
        return models.Filter(must=must)

    def scroll_points(
        self,
        project_id: str,
        types: Optional[Iterable[str]] = ("page_section",),
        lang: Optional[str] = None,
        with_vectors: bool = True,
        limit: int = 10000
    ) -> List[ProjectPoint]:
        """
        Fetch a project's points, paging through scroll.

        Args:
            project_id: Project to read
            types: Payload `type` values to include (None = all)
            lang: Optional language filter
            with_vectors: Include vectors (normalized to flat float lists)
            limit: Maximum number of points returned

        Returns:
            Points in store order
        """
        scroll_filter = self._project_filter(project_id, types, lang)
        points: List[ProjectPoint] = []
        offset = None

        while len(points) < limit:
            records, offset = self.client.scroll(
                collection_name=self.collection,
                scroll_filter=scroll_filter,
                limit=min(SCROLL_PAGE_SIZE, limit - len(points)),
                offset=offset,
                with_payload=True,
                with_vectors=with_vectors,
            )

            for record in records:
                points.append(ProjectPoint(
                    id=record.id,
                    payload=dict(record.payload or {}),
                    vector=normalize_vector(record.vector) if with_vectors else None,
                ))

            if offset is None or not records:
                break

        logger.info(f"Fetched {len(points)} points for project {project_id}")
        return points

    def set_payload(self, payload: Dict[str, Any], point_ids: Sequence[PointId]) -> None:
        """Merge payload keys into the given points."""
        if not point_ids:
            return
        self.client.set_payload(
            collection_name=self.collection,
            payload=payload,
            points=list(point_ids),
            wait=True,
        )

    def delete_project_points(self, project_id: str, types: Optional[Iterable[str]] = None) -> None:
        """Delete a project's points (optionally only some types)."""
        types = list(types) if types else None
        logger.info(f"Deleting points for project {project_id} (types={types or 'all'})")
        self.client.delete(
            collection_name=self.collection,
            points_selector=models.FilterSelector(filter=self._project_filter(project_id, types)),
            wait=True,
        )
