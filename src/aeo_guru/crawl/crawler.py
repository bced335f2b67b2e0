"""
Site crawler: fetch pages, extract readable content, follow links and sitemaps.

- fetch_html: GET with redirects, raises requests.HTTPError on non-2xx
- extract_page: title, first H1, body text (paragraph breaks kept), links, language
- collect_sitemap_urls: <loc> entries, nested sitemap indexes followed
- crawl_site: breadth-first, same-origin, politeness delay between fetches
"""

import logging
import re
import time
from collections import deque
from dataclasses import dataclass, field
from typing import List, Optional, Set
from urllib.parse import urldefrag, urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from .language import SUPPORTED_LANGUAGES, detect_language

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 20
USER_AGENT = "aeo-guru-crawler/0.3"
DEFAULT_DELAY = 0.25

STRIP_TAGS = ["script", "style", "noscript", "nav", "header", "footer", "aside", "iframe", "svg"]


@dataclass
class ExtractedPage:
    """Readable content of one HTML page."""
    url: str
    title: str = ""
    h1: str = ""
    content: str = ""
    links: List[str] = field(default_factory=list)
    lang: str = "en"


def _get(url: str, session: Optional[requests.Session] = None) -> requests.Response:
    client = session or requests
    response = client.get(
        url,
        timeout=REQUEST_TIMEOUT,
        allow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    )
    response.raise_for_status()
    return response


def fetch_html(url: str, session: Optional[requests.Session] = None) -> str:
    """
    Fetch a page.

    Raises:
        requests.HTTPError: On a non-2xx response
        requests.RequestException: On connection problems
    """
    return _get(url, session).text


def normalize_url(url: str) -> str:
    """Strip the fragment from a URL."""
    return urldefrag(url.strip())[0]


def _page_text(root) -> str:
    lines = []
    for line in root.get_text(separator="\n").splitlines():
        line = re.sub(r"\s+", " ", line).strip()
        if line:
            lines.append(line)
    return "\n\n".join(lines)


def _page_links(base_url: str, soup: BeautifulSoup) -> List[str]:
    links: List[str] = []
    seen: Set[str] = set()
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if not href or href.startswith(("mailto:", "tel:", "javascript:")):
            continue
        absolute = normalize_url(urljoin(base_url, href))
        if urlparse(absolute).scheme not in ("http", "https"):
            continue
        if absolute not in seen:
            seen.add(absolute)
            links.append(absolute)
    return links


def extract_page(url: str, html: str) -> ExtractedPage:
    """
    Extract title, H1, body text, links and language from HTML.

    Body text keeps one paragraph per text block (separated by a blank line)
    so the chunker can split on paragraph boundaries.
    """
    soup = BeautifulSoup(html, "html.parser")

    # Links are collected before nav/header/footer are stripped
    links = _page_links(url, soup)

    for element in soup.find_all(STRIP_TAGS):
        element.decompose()

    title = soup.title.get_text(strip=True) if soup.title else ""
    h1_tag = soup.find("h1")
    h1 = h1_tag.get_text(" ", strip=True) if h1_tag else ""
    content = _page_text(soup.body or soup)

    lang = ""
    html_tag = soup.find("html")
    if html_tag and html_tag.get("lang"):
        lang = html_tag["lang"].split("-")[0].strip().lower()
    if lang not in SUPPORTED_LANGUAGES:
        lang = detect_language(content)

    return ExtractedPage(url=url, title=title, h1=h1, content=content, links=links, lang=lang)


def extract_text_from_url(url: str, session: Optional[requests.Session] = None) -> ExtractedPage:
    """Fetch a page and extract its content."""
    return extract_page(url, fetch_html(url, session))


def collect_sitemap_urls(
    sitemap_url: str,
    limit: int = 50,
    session: Optional[requests.Session] = None
) -> List[str]:
    """
    Collect page URLs from a sitemap, following nested sitemap indexes.

    Args:
        sitemap_url: sitemap.xml or sitemap index URL
        limit: Maximum number of page URLs returned

    Returns:
        Deduplicated page URLs in document order
    """
    urls: List[str] = []
    seen: Set[str] = set()
    visited_sitemaps: Set[str] = set()
    pending = deque([sitemap_url])

    while pending and len(urls) < limit:
        current = pending.popleft()
        if current in visited_sitemaps:
            continue
        visited_sitemaps.add(current)

        try:
            xml = fetch_html(current, session)
        except requests.RequestException as e:
            logger.warning(f"Failed to fetch sitemap {current}: {e}")
            continue

        soup = BeautifulSoup(xml, "html.parser")

        if soup.find("sitemapindex"):
            for entry in soup.find_all("sitemap"):
                loc = entry.find("loc")
                if loc and loc.get_text(strip=True):
                    pending.append(loc.get_text(strip=True))
            continue

        for loc in soup.find_all("loc"):
            url = normalize_url(loc.get_text(strip=True))
            if not url or url in seen:
                continue
            seen.add(url)
            urls.append(url)
            if len(urls) >= limit:
                break

    logger.info(f"Collected {len(urls)} URLs from sitemap {sitemap_url}")
    return urls


def _same_origin(url: str, origin: str) -> bool:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}" == origin


def crawl_site(
    root_url: str,
    limit: int = 20,
    delay: float = DEFAULT_DELAY,
    session: Optional[requests.Session] = None
) -> List[ExtractedPage]:
    """
    Breadth-first crawl of one site.

    Only links on the root URL's origin are followed. Pages that fail to
    fetch are logged and skipped.

    Args:
        root_url: Start page
        limit: Maximum number of pages returned
        delay: Seconds to wait between fetches

    Returns:
        Extracted pages in crawl order
    """
    root_url = normalize_url(root_url)
    parsed = urlparse(root_url)
    origin = f"{parsed.scheme}://{parsed.netloc}"

    pages: List[ExtractedPage] = []
    queued: Set[str] = {root_url}
    queue = deque([root_url])
    first = True

    while queue and len(pages) < limit:
        url = queue.popleft()

        if not first and delay > 0:
            time.sleep(delay)
        first = False

        try:
            page = extract_text_from_url(url, session)
        except requests.RequestException as e:
            logger.warning(f"Skipping {url}: {e}")
            continue

        pages.append(page)
        logger.info(f"Crawled {url} ({len(pages)}/{limit})")

        for link in page.links:
            if link not in queued and _same_origin(link, origin):
                queued.add(link)
                queue.append(link)

    logger.info(f"Crawl of {root_url} finished: {len(pages)} pages")
    return pages
