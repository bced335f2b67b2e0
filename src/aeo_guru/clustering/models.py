"""
Data model for the clustering engine.

ProjectPoint is one embedded unit of content (a page section or a generated
question). Its payload stays an open dict so unknown annotation fields survive
a round trip through the store; the known fields get typed accessors.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

PointId = Union[str, int]


@dataclass
class ProjectPoint:
    """One point of a project as returned by the vector store."""
    id: PointId
    payload: Dict[str, Any] = field(default_factory=dict)
    vector: Optional[List[float]] = None

    def _get_str(self, key: str) -> Optional[str]:
        value = (self.payload or {}).get(key)
        return value if isinstance(value, str) else None

    @property
    def url(self) -> Optional[str]:
        return self._get_str('url')

    @property
    def title(self) -> Optional[str]:
        return self._get_str('title')

    @property
    def h1(self) -> Optional[str]:
        return self._get_str('h1')

    @property
    def lang(self) -> Optional[str]:
        return self._get_str('lang')

    @property
    def content(self) -> Optional[str]:
        return self._get_str('content')

    @property
    def point_type(self) -> Optional[str]:
        return self._get_str('type')

    @property
    def cluster_id(self) -> Optional[str]:
        value = self._get_str('clusterId')
        if not value or not value.strip():
            return None
        return value.strip()

    @property
    def has_vector(self) -> bool:
        return bool(self.vector)


@dataclass
class Cluster:
    """
    Result of one clustering run.

    Attributes:
        id: "cluster-<n>" for k-means, "<url>#c<n>" for the naive fallback
        point_ids: Member point ids (order not meaningful)
        centroid: Final centroid, k-means only
    """
    id: str
    point_ids: List[PointId] = field(default_factory=list)
    centroid: Optional[List[float]] = None

    @property
    def size(self) -> int:
        return len(self.point_ids)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'id': self.id, 'pointIds': list(self.point_ids)}
        if self.centroid is not None:
            data['centroid'] = list(self.centroid)
        return data
