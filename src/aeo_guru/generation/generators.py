"""
LLM generators for export documents: FAQ and page JSON-LD, robots.txt,
semantic-core summaries.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from ..llm import BaseLLMClient, GenerationConfig
from .prompt_manager import (
    FAQ_JSONLD,
    INTENT_JSONLD,
    ROBOTS_TXT,
    SEMANTIC_CORE_SUMMARY,
    PromptManager,
)
from .schema import (
    SemanticCoreSummary,
    validate_faq_jsonld,
    validate_page_jsonld,
    validate_semantic_core_summary,
)

logger = logging.getLogger(__name__)

_default_prompts: Optional[PromptManager] = None


def _prompts(prompt_manager: Optional[PromptManager]) -> PromptManager:
    global _default_prompts
    if prompt_manager is not None:
        return prompt_manager
    if _default_prompts is None:
        _default_prompts = PromptManager()
    return _default_prompts


def generate_faq_jsonld(
    client: BaseLLMClient,
    url: str,
    summary: str,
    prompt_manager: Optional[PromptManager] = None
) -> Dict[str, Any]:
    """
    FAQPage JSON-LD with 3-6 Q&A pairs for a page.

    Raises:
        ValueError: If the model returns no usable FAQ pairs
    """
    prompt = _prompts(prompt_manager).format_prompt(FAQ_JSONLD, url=url, summary=summary)
    data = client.generate_json(prompt, GenerationConfig(temperature=0.4, max_output_tokens=1536))

    faqs = [
        f for f in data.get("faqs") or []
        if isinstance(f, dict) and str(f.get("question") or "").strip() and str(f.get("answer") or "").strip()
    ]
    if not faqs:
        raise ValueError(f"No FAQ pairs generated for {url}")

    return validate_faq_jsonld({
        "@context": "https://schema.org",
        "@type": "FAQPage",
        "mainEntity": [
            {
                "@type": "Question",
                "name": str(f["question"]).strip(),
                "acceptedAnswer": {"@type": "Answer", "text": str(f["answer"]).strip()},
            }
            for f in faqs
        ],
        "url": url,
    })


def generate_intent_jsonld(
    client: BaseLLMClient,
    url: str,
    title: Optional[str],
    summary: str,
    project_id: str,
    preferred_type: Optional[str] = None,
    intent: Optional[str] = None,
    lang: Optional[str] = None,
    keywords: Optional[Sequence[str]] = None,
    prompt_manager: Optional[PromptManager] = None
) -> Dict[str, Any]:
    """
    Intent-driven schema.org JSON-LD for a page.

    The page URL, language and keywords are enforced on the result.

    Raises:
        ValueError: If the result is not valid schema.org JSON-LD
    """
    prompt = _prompts(prompt_manager).format_prompt(
        INTENT_JSONLD,
        project_id=project_id,
        preferred_type=preferred_type or "WebPage",
        url=url,
        title=title or "",
        intent=intent or "informational",
        lang=lang or "en",
        keywords=", ".join(keywords or []) or "none",
        summary=summary,
    )
    data = client.generate_json(prompt, GenerationConfig(temperature=0.2, max_output_tokens=2048))

    data["@context"] = "https://schema.org"
    data["url"] = url
    if not data.get("@type"):
        data["@type"] = preferred_type or "WebPage"
    if not data.get("name") and title:
        data["name"] = title
    if lang and not data.get("inLanguage"):
        data["inLanguage"] = lang
    if keywords and not data.get("keywords"):
        data["keywords"] = list(keywords)

    return validate_page_jsonld(data)


def generate_robots_txt(
    client: BaseLLMClient,
    summary: Dict[str, Any],
    prompt_manager: Optional[PromptManager] = None
) -> str:
    """robots.txt text for a pattern summary (see exports.robots)."""
    prompt = _prompts(prompt_manager).format_prompt(
        ROBOTS_TXT, summary_json=json.dumps(summary, indent=2, ensure_ascii=False)
    )
    text = client.generate_text(prompt, GenerationConfig(temperature=0.0, max_output_tokens=1024))
    # Models sometimes fence plain text too
    if text.startswith("```"):
        text = "\n".join(line for line in text.splitlines() if not line.startswith("```"))
    return text.strip()


def _format_contexts(contexts: Sequence[Dict[str, Any]]) -> str:
    blocks: List[str] = []
    for ctx in contexts:
        header = [f"URL: {ctx.get('url')}"]
        for label, key in (
            ("Title", "title"),
            ("Cluster", "clusterLabel"),
            ("Intent", "clusterIntent"),
            ("Primary keyword", "primaryKeyword"),
            ("Language", "lang"),
        ):
            if ctx.get(key):
                header.append(f"{label}: {ctx[key]}")
        blocks.append("\n".join(header) + "\n" + (ctx.get("content") or ""))
    return "\n\n---\n\n".join(blocks)


def generate_semantic_core_summary(
    client: BaseLLMClient,
    project_id: str,
    contexts: Sequence[Dict[str, Any]],
    manual_notes: Optional[str] = None,
    semantic_core_yaml: Optional[str] = None,
    prompt_manager: Optional[PromptManager] = None
) -> SemanticCoreSummary:
    """
    Consolidated semantic-core summary for a project.

    Args:
        contexts: Page contexts (see exports.page_contexts)
        manual_notes: Editor notes to honor
        semantic_core_yaml: Current semantic core, if any

    Raises:
        ValueError: If the response is malformed
    """
    prompt = _prompts(prompt_manager).format_prompt(
        SEMANTIC_CORE_SUMMARY,
        project_id=project_id,
        manual_notes=manual_notes or "(none)",
        semantic_core_yaml=semantic_core_yaml or "(none)",
        contexts=_format_contexts(contexts),
    )
    logger.info(f"Generating semantic core summary for {project_id} from {len(contexts)} pages")
    response = client.generate_json(prompt, GenerationConfig(temperature=0.3, max_output_tokens=4096))
    return validate_semantic_core_summary(response)
