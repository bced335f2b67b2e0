"""
GEO improvements export: per-cluster playbooks for generative-engine
optimization (AI-visibility play, static content blocks, FAQ).
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..clustering.models import ProjectPoint
from .common import (
    ClusterDescriptor,
    ExportError,
    build_cluster_descriptors,
    export_filename,
    format_list,
    queries_by_cluster,
    utc_timestamp,
)

logger = logging.getLogger(__name__)

DEFAULT_TONE = "Product-led"
MAX_FAQ = 5


def build_faq_answer(question: str, entry: ClusterDescriptor, tone: str) -> str:
    keyword = entry.primary_keyword or entry.label
    summary = entry.summary or f"Own the conversation around {keyword}."
    gap = entry.content_gaps[0] if entry.content_gaps else None
    schema = entry.recommended_schemas[0] if entry.recommended_schemas else None
    related = entry.secondary_keywords[:2]

    pieces = [
        f"{tone} guidance: {summary}",
        f'Lead with {keyword} to satisfy {entry.intent} intent when answering "{question}".',
    ]
    if gap:
        pieces.append(f'Close the documented gap "{gap}" with a definitive explainer.')
    if related:
        pieces.append(f"Reference related entities such as {format_list(related, related[0])}.")
    if schema:
        pieces.append(f"Mark this block up with {schema} schema to boost AI comprehension.")
    return " ".join(pieces)


def build_geo_module(
    entry: ClusterDescriptor,
    canonical_questions: Sequence[str],
    tone: str = DEFAULT_TONE,
    fallback_lang: Optional[str] = None
) -> Dict[str, Any]:
    """GEO playbook for one cluster."""
    tone = tone.strip() or DEFAULT_TONE
    lang = entry.lang or fallback_lang or "en"
    primary_keyword = entry.primary_keyword or entry.label
    hook = entry.content_gaps[0] if entry.content_gaps else f"Expand static coverage for {primary_keyword}"

    supporting_points = [f"Anchor the module around {primary_keyword} to win {entry.intent} intents."]
    if entry.secondary_keywords:
        related = format_list(entry.secondary_keywords[:4], entry.secondary_keywords[0])
        supporting_points.append(f"Weave in related entities like {related}.")
    if entry.content_gaps:
        plural = "s" if len(entry.content_gaps) > 1 else ""
        supporting_points.append(f"Address the gap{plural}: {'; '.join(entry.content_gaps[:3])}.")
    if entry.recommended_schemas:
        supporting_points.append(
            f"Ship structured data ({', '.join(entry.recommended_schemas)}) to signal topical depth."
        )

    seeds = list(canonical_questions or entry.representative_queries)[:MAX_FAQ]
    faq = [{"question": q, "answer": build_faq_answer(q, entry, tone)} for q in seeds]

    schemas = format_list(entry.recommended_schemas or ["FAQ"], "FAQ")
    static_blocks = [
        {
            "type": "overview",
            "heading": f"{entry.label} opportunity",
            "body": f"{entry.summary or f'Capture AI-ready demand for {primary_keyword}.'} {hook}.",
        },
        {
            "type": "ai-play",
            "heading": "AI visibility play",
            "body": (
                f"Launch a {entry.intent} landing section in a {tone.lower()} voice "
                f"that answers {primary_keyword} searches end-to-end."
            ),
        },
        {
            "type": "cta",
            "heading": "Editorial next step",
            "body": (
                "Publish the FAQ block below verbatim as static content and pair it with "
                f"{schemas} schema to maximize answer engine lift."
            ),
        },
    ]

    return {
        "clusterId": entry.id,
        "label": entry.label,
        "lang": lang,
        "intent": entry.intent,
        "primaryKeyword": primary_keyword,
        "opportunityScore": entry.score,
        "targetUrl": entry.primary_url,
        "secondaryKeywords": entry.secondary_keywords,
        "contentGaps": entry.content_gaps,
        "recommendedSchemas": entry.recommended_schemas,
        "aiSignals": {
            "representativeQueries": entry.representative_queries,
            "canonicalQuestions": seeds,
        },
        "geoPlaybook": {
            "tone": tone,
            "aiVisibilityPlay": {
                "headline": f"{entry.label} GEO improvement",
                "summary": hook,
                "supportingPoints": supporting_points,
            },
            "staticBlocks": static_blocks,
            "faq": faq,
        },
    }


def build_geo_export(
    project_id: str,
    page_points: Sequence[ProjectPoint],
    query_points: Sequence[ProjectPoint] = (),
    limit: Optional[int] = None,
    lang: Optional[str] = None,
    tone: Optional[str] = None
) -> Dict[str, Any]:
    """
    GEO improvements document.

    Raises:
        ValueError: If the tone is not 3-80 characters
        ExportError: If there is no content or no annotated cluster
    """
    tone = tone if tone is not None else DEFAULT_TONE
    if not 3 <= len(tone) <= 80:
        raise ValueError("tone must be between 3 and 80 characters")
    if not page_points:
        raise ExportError(f"No content found for project {project_id}")

    descriptors = build_cluster_descriptors(page_points)
    if not descriptors:
        raise ExportError(f"No clusters annotated for project {project_id}")

    questions = queries_by_cluster(query_points)
    if limit is not None:
        descriptors = descriptors[:limit]

    modules: List[Dict[str, Any]] = [
        build_geo_module(entry, questions.get(entry.id, []), tone, lang) for entry in descriptors
    ]
    if not modules:
        raise ExportError(f"No GEO improvements available for project {project_id}")

    logger.info(f"GEO export for {project_id}: {len(modules)} modules")
    return {
        "projectId": project_id,
        "generatedAt": utc_timestamp(),
        "tone": tone,
        "moduleCount": len(modules),
        "modules": modules,
    }


def geo_filename(project_id: str) -> str:
    return export_filename(project_id, "geo-improvements.json")
