"""
JSON-LD export: intent-driven page schema plus an FAQPage per page.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..clustering.models import ProjectPoint
from ..generation.generators import generate_faq_jsonld, generate_intent_jsonld
from ..generation.prompt_manager import PromptManager
from ..llm import BaseLLMClient
from .common import ExportError, export_filename, utc_timestamp
from .page_contexts import build_page_contexts

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 4
MAX_PAGE_LIMIT = 10
CONTEXT_MAX_CHARS = 2000

INTENT_SCHEMA_FALLBACK = {
    "informational": "Article",
    "transactional": "Product",
    "navigational": "Article",
    "local": "LocalBusiness",
    "mixed": "Article",
}


def preferred_schema_type(recommended: Sequence[str], intent: Optional[str]) -> Optional[str]:
    """First recommended schema, else the intent's fallback type."""
    if recommended:
        return recommended[0]
    return INTENT_SCHEMA_FALLBACK.get(intent or "")


def build_jsonld_export(
    client: BaseLLMClient,
    project_id: str,
    points: Sequence[ProjectPoint],
    limit: int = DEFAULT_PAGE_LIMIT,
    prompt_manager: Optional[PromptManager] = None
) -> Dict[str, Any]:
    """
    JSON-LD for the project's richest pages.

    Args:
        client: LLM client (structured preset)
        project_id: Project to export
        points: The project's page_section points
        limit: Number of pages (1-10)

    Returns:
        {projectId, generatedAt, pages: [{url, title, intent, schema, faq}]}

    Raises:
        ValueError: If limit is out of range or the model output is invalid
        ExportError: If the project has no usable content
    """
    if not 1 <= limit <= MAX_PAGE_LIMIT:
        raise ValueError(f"limit must be between 1 and {MAX_PAGE_LIMIT}, got {limit}")
    if not points:
        raise ExportError(f"No content found for project {project_id}")

    contexts = build_page_contexts(points, limit=limit, max_chars=CONTEXT_MAX_CHARS)
    if not contexts:
        raise ExportError(f"Project {project_id} does not have usable content")

    pages: List[Dict[str, Any]] = []
    for ctx in contexts:
        summary = " | ".join(part for part in (ctx.title, ctx.h1, ctx.content) if part)
        schema = generate_intent_jsonld(
            client,
            url=ctx.url,
            title=ctx.title or ctx.h1,
            summary=summary,
            project_id=project_id,
            preferred_type=preferred_schema_type(ctx.recommended_schemas, ctx.cluster_intent),
            intent=ctx.cluster_intent,
            lang=ctx.lang,
            keywords=[ctx.primary_keyword] if ctx.primary_keyword else None,
            prompt_manager=prompt_manager,
        )
        faq = generate_faq_jsonld(client, ctx.url, summary, prompt_manager=prompt_manager)
        pages.append({
            "url": ctx.url,
            "title": ctx.title or ctx.h1 or None,
            "intent": ctx.cluster_intent,
            "schema": schema,
            "faq": faq,
        })
        logger.info(f"Generated JSON-LD for {ctx.url} ({schema.get('@type')})")

    return {"projectId": project_id, "generatedAt": utc_timestamp(), "pages": pages}


def jsonld_filename(project_id: str) -> str:
    return export_filename(project_id, "jsonld.json")
