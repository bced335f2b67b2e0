"""
Semantic core enlargement: page contexts summarized by the LLM into an
executive summary, focus topics and key pages.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..clustering.models import ProjectPoint
from ..generation.generators import generate_semantic_core_summary
from ..generation.prompt_manager import PromptManager
from ..generation.schema import SemanticCoreSummary
from ..llm import BaseLLMClient
from .common import ExportError, utc_timestamp
from .page_contexts import build_page_contexts
from .semantic_core import render_yaml

logger = logging.getLogger(__name__)

EXCERPT_CHARS = 280


@dataclass
class CoreEnlargement:
    semantic_core_yaml: str
    summary: SemanticCoreSummary
    records: List[Dict[str, Any]] = field(default_factory=list)


def enlarge_core(
    client: BaseLLMClient,
    project_id: str,
    points: Sequence[ProjectPoint],
    limit: int = 6,
    max_chars: int = 2000,
    manual_notes: Optional[str] = None,
    semantic_core_yaml: Optional[str] = None,
    prompt_manager: Optional[PromptManager] = None
) -> CoreEnlargement:
    """
    Build an enlarged semantic core from the project's pages.

    Args:
        client: LLM client (reasoning preset)
        project_id: Project to summarize
        points: The project's page_section points
        limit: Pages to include (3-12)
        max_chars: Content per page (500-5000)
        manual_notes: Editor notes passed to the model
        semantic_core_yaml: Current semantic core passed to the model

    Raises:
        ValueError: If limit or max_chars is out of range
        ExportError: If the project has no usable content
    """
    if not 3 <= limit <= 12:
        raise ValueError(f"limit must be between 3 and 12, got {limit}")
    if not 500 <= max_chars <= 5000:
        raise ValueError(f"max_chars must be between 500 and 5000, got {max_chars}")
    if not points:
        raise ExportError(f"No crawl insights available for project {project_id}")

    contexts = build_page_contexts(points, limit=limit, max_chars=max_chars)
    if not contexts:
        raise ExportError(f"No usable contexts detected for project {project_id}")

    summary = generate_semantic_core_summary(
        client,
        project_id,
        [ctx.to_dict() for ctx in contexts],
        manual_notes=manual_notes,
        semantic_core_yaml=semantic_core_yaml,
        prompt_manager=prompt_manager,
    )

    yaml_text = render_yaml({
        "projectId": project_id,
        "generatedAt": utc_timestamp(),
        "executiveSummary": summary.executive_summary,
        "focusTopics": summary.focus_topics,
        "keyPages": summary.key_pages,
    })

    records = [
        {
            "url": ctx.url,
            "title": ctx.title or ctx.h1 or None,
            "clusterLabel": ctx.cluster_label,
            "intent": ctx.cluster_intent,
            "primaryKeyword": ctx.primary_keyword,
            "lang": ctx.lang,
            "recommendedSchemas": list(ctx.recommended_schemas),
            "excerpt": ctx.content[:EXCERPT_CHARS],
        }
        for ctx in contexts
    ]

    logger.info(f"Enlarged semantic core for {project_id}: {len(summary.focus_topics)} focus topics")
    return CoreEnlargement(semantic_core_yaml=yaml_text, summary=summary, records=records)
