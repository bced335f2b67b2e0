"""
Semantic core export: annotated clusters with their queries, gaps and
schemas, rendered as YAML.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import yaml

from ..clustering.models import ProjectPoint
from .common import (
    ExportError,
    build_cluster_descriptors,
    export_filename,
    queries_by_cluster,
    utc_timestamp,
)

logger = logging.getLogger(__name__)


def build_semantic_core(
    project_id: str,
    page_points: Sequence[ProjectPoint],
    query_points: Sequence[ProjectPoint] = (),
    limit: Optional[int] = None,
    lang: Optional[str] = None
) -> Dict[str, Any]:
    """
    Assemble the semantic core document.

    Args:
        project_id: Project to export
        page_points: page_section points (annotated by a clustering run)
        query_points: query points (canonical questions)
        limit: Maximum number of clusters
        lang: Default language for clusters without one

    Returns:
        {projectId, generatedAt, clusterCount, clusters}

    Raises:
        ExportError: If the project has no points or no annotated clusters
    """
    if not page_points:
        raise ExportError(f"No content found for project {project_id}")

    descriptors = build_cluster_descriptors(page_points)
    questions = queries_by_cluster(query_points)
    if limit is not None:
        descriptors = descriptors[:limit]

    clusters: List[Dict[str, Any]] = []
    for entry in descriptors:
        canonical = questions.get(entry.id, [])
        related = list(dict.fromkeys(entry.representative_queries + canonical))
        if not entry.primary_url and not entry.urls:
            continue
        clusters.append({
            "clusterId": entry.id,
            "label": entry.label,
            "intent": entry.intent,
            "lang": entry.lang or lang or "en",
            "primaryUrl": entry.primary_url,
            "primaryKeyword": entry.primary_keyword,
            "relatedQueries": related,
            "canonicalQuestions": canonical,
            "contentGaps": entry.content_gaps,
            "recommendedNewPages": [f"Create or expand coverage for: {gap}" for gap in entry.content_gaps],
            "recommendedSchemas": entry.recommended_schemas,
            "opportunityScore": entry.score,
            "urls": entry.urls,
            "summary": entry.summary,
        })

    if not clusters:
        raise ExportError(f"No clusters annotated for project {project_id}")

    logger.info(f"Semantic core for {project_id}: {len(clusters)} clusters")
    return {
        "projectId": project_id,
        "generatedAt": utc_timestamp(),
        "clusterCount": len(clusters),
        "clusters": clusters,
    }


def render_yaml(payload: Dict[str, Any]) -> str:
    """YAML with keys in document order."""
    return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True, width=100)


def semantic_core_filename(project_id: str) -> str:
    return export_filename(project_id, "semantic-core.yaml")
