"""Page contexts: a project's sections regrouped into pages for LLM prompts."""

import re
from collections import Counter, OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..clustering.models import ProjectPoint
from .common import ensure_string_array

DEFAULT_LIMIT = 6
DEFAULT_MAX_CHARS = 1800


@dataclass
class PageContext:
    url: str
    content: str
    title: Optional[str] = None
    h1: Optional[str] = None
    lang: Optional[str] = None
    cluster_id: Optional[str] = None
    cluster_label: Optional[str] = None
    cluster_intent: Optional[str] = None
    primary_keyword: Optional[str] = None
    recommended_schemas: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "h1": self.h1,
            "lang": self.lang,
            "clusterId": self.cluster_id,
            "clusterLabel": self.cluster_label,
            "clusterIntent": self.cluster_intent,
            "primaryKeyword": self.primary_keyword,
            "recommendedSchemas": list(self.recommended_schemas),
            "content": self.content,
        }


@dataclass
class _PageEntry:
    url: str
    title: Optional[str] = None
    h1: Optional[str] = None
    cluster_id: Optional[str] = None
    cluster_label: Optional[str] = None
    cluster_intent: Optional[str] = None
    primary_keyword: Optional[str] = None
    recommended_schemas: List[str] = field(default_factory=list)
    langs: List[str] = field(default_factory=list)
    content: List[str] = field(default_factory=list)


def build_page_contexts(
    points: Sequence[ProjectPoint],
    limit: int = DEFAULT_LIMIT,
    max_chars: int = DEFAULT_MAX_CHARS
) -> List[PageContext]:
    """
    Group points by URL into page contexts.

    For each page the first non-empty title, H1 and cluster fields win, the
    language is the most frequent one, and section contents are joined with
    whitespace collapsed. Pages without content are dropped; the longest
    `limit` pages are returned with content cut to `max_chars`.
    """
    pages: "OrderedDict[str, _PageEntry]" = OrderedDict()

    for point in points:
        url = point.url
        if not url:
            continue
        payload = point.payload or {}
        entry = pages.setdefault(url, _PageEntry(url=url))

        entry.title = entry.title or point.title or None
        entry.h1 = entry.h1 or point.h1 or None
        entry.cluster_id = entry.cluster_id or point.cluster_id
        entry.cluster_label = entry.cluster_label or payload.get("clusterLabel") or None
        entry.cluster_intent = (
            entry.cluster_intent or payload.get("clusterIntent") or payload.get("intent") or None
        )
        entry.primary_keyword = (
            entry.primary_keyword
            or payload.get("primaryKeyword")
            or payload.get("clusterPrimaryKeyword")
            or None
        )
        if not entry.recommended_schemas:
            entry.recommended_schemas = ensure_string_array(payload.get("clusterRecommendedSchemas"))
        if point.lang:
            entry.langs.append(point.lang)
        if point.content:
            entry.content.append(point.content)

    contexts = []
    for entry in pages.values():
        content = re.sub(r"\s+", " ", "\n".join(entry.content)).strip()
        if not content:
            continue
        lang = Counter(entry.langs).most_common(1)[0][0] if entry.langs else None
        contexts.append(PageContext(
            url=entry.url,
            content=content,
            title=entry.title,
            h1=entry.h1,
            lang=lang,
            cluster_id=entry.cluster_id,
            cluster_label=entry.cluster_label,
            cluster_intent=entry.cluster_intent,
            primary_keyword=entry.primary_keyword,
            recommended_schemas=entry.recommended_schemas,
        ))

    contexts.sort(key=lambda ctx: len(ctx.content), reverse=True)
    contexts = contexts[:limit]
    for ctx in contexts:
        ctx.content = ctx.content[:max_chars]
    return contexts
