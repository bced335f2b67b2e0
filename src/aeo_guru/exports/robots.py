"""
robots.txt export.

Crawled URLs are scanned for low-value patterns (internal search, tag and
category archives, query parameters, crowded path prefixes); the summary is
turned into robots.txt by an LLM or by a deterministic renderer.
"""

import logging
import re
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import parse_qsl, urlparse

from ..clustering.models import ProjectPoint
from ..generation.generators import generate_robots_txt
from ..llm import BaseLLMClient
from .common import ExportError

logger = logging.getLogger(__name__)

POPULAR_CRAWLERS = (
    "Googlebot",
    "Googlebot-Image",
    "Bingbot",
    "Bingbot-Mobile",
    "Slurp",
    "DuckDuckBot",
    "Baiduspider",
    "YandexBot",
)

DUPLICATE_BUCKET_MIN = 4
MAX_AGENTS = 16
MAX_SITEMAPS = 10

_SEARCH_RE = re.compile(r"/search", re.IGNORECASE)
_ARCHIVE_RE = re.compile(r"/(tag|category|topics)/", re.IGNORECASE)


def collect_patterns(urls: Sequence[str]) -> Dict[str, List[str]]:
    """
    Disallow candidates, duplicate-looking path prefixes and rationale.

    Returns:
        {"disallow": [...], "duplicatePatterns": [...], "rationale": [...]}
    """
    disallow: List[str] = []
    rationale: List[str] = []
    param_keys: List[str] = []
    buckets: Counter = Counter()

    def add(items: List[str], value: str) -> None:
        if value not in items:
            items.append(value)

    for url in urls:
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            continue
        path = parsed.path or "/"

        for key, _value in parse_qsl(parsed.query, keep_blank_values=True):
            add(param_keys, key)

        if _SEARCH_RE.search(path):
            prefix = _SEARCH_RE.split(path, maxsplit=1)[0]
            add(disallow, f"{prefix}/search/")
            add(rationale, "Search result listings add little value")

        if _ARCHIVE_RE.search(path):
            parts = [part for part in path.split("/") if part]
            if len(parts) >= 2:
                add(disallow, f"/{parts[0]}/{parts[1]}/")
                add(rationale, "Tag/category archive detected")

        bucket = "/".join([part for part in path.split("/") if part][:2])
        if bucket:
            buckets[bucket] += 1

    for key in param_keys:
        add(disallow, f"/*?{key}=")
        add(rationale, f"Parameter ?{key} detected across pages")

    duplicate_patterns = []
    for bucket, count in buckets.items():
        if count >= DUPLICATE_BUCKET_MIN:
            duplicate_patterns.append(f"/{bucket}/")
            rationale.append(f"High volume of URLs under /{bucket}/ looks duplicative ({count})")

    return {"disallow": disallow, "duplicatePatterns": duplicate_patterns, "rationale": rationale}


def build_robots_summary(
    root_url: str,
    points: Sequence[ProjectPoint],
    agents: Optional[Sequence[str]] = None,
    crawl_delay: Optional[int] = None,
    sitemap_urls: Optional[Sequence[str]] = None
) -> Dict[str, Any]:
    """
    Pattern summary for a project.

    Raises:
        ExportError: If the project has no points
        ValueError: If crawl_delay, agents or sitemaps are out of range
    """
    if not points:
        raise ExportError("No content")
    if crawl_delay is not None and not 1 <= crawl_delay <= 60:
        raise ValueError(f"crawl_delay must be between 1 and 60, got {crawl_delay}")
    if agents and len(agents) > MAX_AGENTS:
        raise ValueError(f"At most {MAX_AGENTS} agents are supported")
    if sitemap_urls and len(sitemap_urls) > MAX_SITEMAPS:
        raise ValueError(f"At most {MAX_SITEMAPS} sitemap URLs are supported")

    urls = list(dict.fromkeys(p.url for p in points if p.url))
    patterns = collect_patterns(urls)

    requested = [a.strip() for a in (agents or POPULAR_CRAWLERS) if a and a.strip()]
    requested = list(dict.fromkeys(requested)) or list(POPULAR_CRAWLERS)

    return {
        "rootUrl": root_url,
        "disallowCandidates": patterns["disallow"],
        "duplicatePatterns": patterns["duplicatePatterns"],
        "rationale": patterns["rationale"],
        "crawlDelay": crawl_delay,
        "sitemapUrls": list(sitemap_urls or []),
        "requestedAgents": requested,
    }


def render_robots_txt(summary: Dict[str, Any]) -> str:
    """Deterministic robots.txt for a pattern summary."""
    lines: List[str] = [f"# robots.txt for {summary.get('rootUrl', '')}"]
    for reason in summary.get("rationale") or []:
        lines.append(f"# {reason}")
    lines.append("")

    disallow = summary.get("disallowCandidates") or []
    crawl_delay = summary.get("crawlDelay")

    for agent in list(summary.get("requestedAgents") or []) + ["*"]:
        lines.append(f"User-agent: {agent}")
        if disallow:
            lines.extend(f"Disallow: {pattern}" for pattern in disallow)
        else:
            lines.append("Disallow:")
        if crawl_delay:
            lines.append(f"Crawl-delay: {crawl_delay}")
        lines.append("")

    for pattern in summary.get("duplicatePatterns") or []:
        lines.append(f"# Review for duplicate content: {pattern}")

    for sitemap in summary.get("sitemapUrls") or []:
        lines.append(f"Sitemap: {sitemap}")

    return "\n".join(lines).strip() + "\n"


def export_robots_txt(
    root_url: str,
    points: Sequence[ProjectPoint],
    client: Optional[BaseLLMClient] = None,
    agents: Optional[Sequence[str]] = None,
    crawl_delay: Optional[int] = None,
    sitemap_urls: Optional[Sequence[str]] = None
) -> str:
    """robots.txt text; generated by the LLM when a client is given."""
    summary = build_robots_summary(root_url, points, agents, crawl_delay, sitemap_urls)
    logger.info(
        f"robots.txt summary: {len(summary['disallowCandidates'])} disallow candidates, "
        f"{len(summary['duplicatePatterns'])} duplicate patterns"
    )
    if client is None:
        return render_robots_txt(summary)
    return generate_robots_txt(client, summary) + "\n"
