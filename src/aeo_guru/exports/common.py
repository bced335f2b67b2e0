"""
Shared helpers for exports: cluster descriptors read back from point
payloads, canonical questions per cluster, naming and list formatting.
"""

import re
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from ..clustering.models import ProjectPoint
from ..generation.schema import ensure_string_array

__all__ = [
    "ClusterDescriptor",
    "ExportError",
    "build_cluster_descriptors",
    "ensure_string_array",
    "export_filename",
    "format_list",
    "queries_by_cluster",
    "slugify",
    "utc_timestamp",
]


class ExportError(Exception):
    """Raised when a project has nothing to export."""


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (value or "").lower()).strip("-")
    return slug or "project"


def export_filename(project_id: str, suffix: str) -> str:
    """e.g. export_filename("Acme Shop", "semantic-core.yaml") -> "acme-shop-semantic-core.yaml"."""
    return f"{slugify(project_id)}-{suffix}"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def format_list(values: Sequence[str], fallback: str) -> str:
    """Human list: "a", "a and b", "a, b and c"."""
    if not values:
        return fallback
    if len(values) == 1:
        return values[0]
    return f"{', '.join(values[:-1])} and {values[-1]}"


def _number_or_none(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


@dataclass
class ClusterDescriptor:
    """A cluster as described by the annotations stored on its points."""
    id: str
    label: str
    summary: str = ""
    intent: str = "informational"
    primary_keyword: Optional[str] = None
    secondary_keywords: List[str] = field(default_factory=list)
    representative_queries: List[str] = field(default_factory=list)
    content_gaps: List[str] = field(default_factory=list)
    recommended_schemas: List[str] = field(default_factory=list)
    urls: List[str] = field(default_factory=list)
    lang: Optional[str] = None
    primary_url: Optional[str] = None
    score: Optional[float] = None


def build_cluster_descriptors(points: Sequence[ProjectPoint]) -> List[ClusterDescriptor]:
    """
    One descriptor per distinct clusterId, in first-seen order.

    The first point of a cluster supplies its annotation; later points only
    fill a missing language or primary URL, add their URL and merge their
    representative queries.
    """
    clusters: "OrderedDict[str, ClusterDescriptor]" = OrderedDict()

    for point in points:
        payload = point.payload or {}
        cluster_id = point.cluster_id
        if not cluster_id:
            continue

        entry = clusters.get(cluster_id)
        if entry is None:
            entry = ClusterDescriptor(
                id=cluster_id,
                label=payload.get("clusterLabel") or f"Cluster {cluster_id}",
                summary=payload.get("clusterSummary") or "",
                intent=payload.get("clusterIntent") or payload.get("intent") or "informational",
                primary_keyword=payload.get("clusterPrimaryKeyword") or payload.get("primaryKeyword") or None,
                secondary_keywords=ensure_string_array(
                    payload.get("clusterSecondaryKeywords") or payload.get("secondaryKeywords")
                ),
                content_gaps=ensure_string_array(payload.get("clusterContentGaps")),
                recommended_schemas=ensure_string_array(payload.get("clusterRecommendedSchemas")),
                lang=payload.get("lang") or None,
                primary_url=payload.get("clusterPrimaryUrl") or point.url,
                score=_number_or_none(payload.get("score_opportunity")),
            )
            clusters[cluster_id] = entry

        if point.url and point.url not in entry.urls:
            entry.urls.append(point.url)
        if not entry.primary_url and point.url:
            entry.primary_url = point.url
        if not entry.lang and point.lang:
            entry.lang = point.lang
        for query in ensure_string_array(payload.get("clusterRepresentativeQueries")):
            if query not in entry.representative_queries:
                entry.representative_queries.append(query)

    return list(clusters.values())


def queries_by_cluster(query_points: Sequence[ProjectPoint]) -> Dict[str, List[str]]:
    """Canonical question texts grouped by clusterId, in store order."""
    grouped: Dict[str, List[str]] = {}
    for point in query_points:
        cluster_id = point.cluster_id
        if not cluster_id or not point.content:
            continue
        grouped.setdefault(cluster_id, []).append(point.content)
    return grouped
