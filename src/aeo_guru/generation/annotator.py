"""
Cluster annotation.

Turns the pages of a cluster into a fixed-schema ClusterAnnotation
(label, intent, keywords, gaps, opportunity score) via the LLM layer.
"""

import logging
from collections import Counter, OrderedDict
from typing import Dict, List, Optional, Sequence

from ..clustering.models import Cluster, ProjectPoint
from ..llm import BaseLLMClient, GenerationConfig
from .prompt_manager import CLUSTER_ANNOTATION, PromptManager
from .schema import ClusterAnnotation, validate_annotation_response

logger = logging.getLogger(__name__)

MAX_URLS = 8
MAX_CHARS = 4000


def cluster_members(cluster: Cluster, points: Sequence[ProjectPoint]) -> List[ProjectPoint]:
    """Points of a cluster in cluster order."""
    by_id: Dict[str, ProjectPoint] = {str(p.id): p for p in points}
    return [by_id[str(pid)] for pid in cluster.point_ids if str(pid) in by_id]


def primary_url(members: Sequence[ProjectPoint]) -> Optional[str]:
    """URL with the most points in the cluster (first seen wins ties)."""
    counts = Counter(p.url for p in members if p.url)
    if not counts:
        return None
    return counts.most_common(1)[0][0]


def dominant_language(members: Sequence[ProjectPoint], fallback: str = "en") -> str:
    counts = Counter(p.lang for p in members if p.lang)
    if not counts:
        return fallback
    return counts.most_common(1)[0][0]


def build_representative_text(
    members: Sequence[ProjectPoint],
    max_urls: int = MAX_URLS,
    max_chars: int = MAX_CHARS
) -> str:
    """
    Title, H1 and content of up to max_urls pages, capped at max_chars.
    """
    pages: "OrderedDict[str, List[ProjectPoint]]" = OrderedDict()
    for point in members:
        key = point.url or f"point:{point.id}"
        if key not in pages and len(pages) >= max_urls:
            continue
        pages.setdefault(key, []).append(point)

    sections = []
    for url, page_points in pages.items():
        lines = [f"URL: {url}"]
        title = next((p.title for p in page_points if p.title), "")
        h1 = next((p.h1 for p in page_points if p.h1), "")
        if title:
            lines.append(f"Title: {title}")
        if h1 and h1 != title:
            lines.append(f"H1: {h1}")
        content = " ".join(p.content for p in page_points if p.content)
        if content:
            lines.append(content)
        sections.append("\n".join(lines))

    return "\n\n---\n\n".join(sections)[:max_chars]


class ClusterAnnotator:
    """Annotates clusters with an LLM (reasoning preset by default)."""

    def __init__(
        self,
        client: BaseLLMClient,
        prompt_manager: Optional[PromptManager] = None,
        max_urls: int = MAX_URLS,
        max_chars: int = MAX_CHARS,
        config: Optional[GenerationConfig] = None
    ):
        self.client = client
        self.prompt_manager = prompt_manager or PromptManager()
        self.max_urls = max_urls
        self.max_chars = max_chars
        self.config = config or GenerationConfig(temperature=0.3, max_output_tokens=2048)

    def annotate(
        self,
        cluster: Cluster,
        points: Sequence[ProjectPoint],
        project_id: str = ""
    ) -> ClusterAnnotation:
        """
        Annotate one cluster.

        Args:
            cluster: Cluster to describe
            points: Points of the run (members are looked up by ID)
            project_id: Project name used in the prompt

        Returns:
            Validated ClusterAnnotation

        Raises:
            ValueError: If the cluster has no text or the response is malformed
        """
        members = cluster_members(cluster, points)
        text = build_representative_text(members, self.max_urls, self.max_chars)
        if not text.strip():
            raise ValueError(f"Cluster {cluster.id} has no content to annotate")

        prompt = self.prompt_manager.format_prompt(
            CLUSTER_ANNOTATION,
            project_id=project_id,
            lang=dominant_language(members),
            cluster_text=text,
        )

        logger.debug(f"Annotating {cluster.id} ({cluster.size} points) using {self.client.model_id}")
        response = self.client.generate_json(prompt, self.config)
        annotation = validate_annotation_response(response)

        logger.info(
            f"Annotated {cluster.id}: '{annotation.label}' "
            f"[intent={annotation.intent}, score={annotation.opportunity_score}]"
        )
        return annotation
