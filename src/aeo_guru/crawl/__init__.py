"""Crawling and content extraction."""

from .crawler import (
    ExtractedPage,
    collect_sitemap_urls,
    crawl_site,
    extract_page,
    extract_text_from_url,
    fetch_html,
    normalize_url,
)
from .language import detect_language

__all__ = [
    "ExtractedPage",
    "collect_sitemap_urls",
    "crawl_site",
    "detect_language",
    "extract_page",
    "extract_text_from_url",
    "fetch_html",
    "normalize_url",
]
