"""
Ingest pipeline: crawl a site (root URL, sitemap, explicit URLs), chunk the
pages, embed the sections and upsert them as page_section points.
"""

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import List, Optional, Sequence

import requests

from ..clustering.models import ProjectPoint
from ..crawl.crawler import (
    DEFAULT_DELAY,
    ExtractedPage,
    collect_sitemap_urls,
    crawl_site,
    extract_text_from_url,
    normalize_url,
)
from ..embed.chunker import chunk_text
from ..embed.embeddings import EmbeddingClient
from ..store.vector_store import VectorStore, point_id_for

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
MAX_LIMIT = 60


class IngestError(Exception):
    """Raised when no content could be extracted for a project."""


@dataclass
class IngestResult:
    pages_ingested: int
    sections_embedded: int

    def to_dict(self):
        return {"pagesIngested": self.pages_ingested, "sectionsEmbedded": self.sections_embedded}


def build_section_points(project_id: str, pages: Sequence[ExtractedPage]) -> List[ProjectPoint]:
    """Chunk pages into page_section points (without vectors)."""
    points: List[ProjectPoint] = []
    for page in pages:
        for idx, chunk in enumerate(chunk_text(page.content)):
            key = f"{project_id}:{page.url}:chunk-{idx}"
            points.append(ProjectPoint(
                id=point_id_for(key),
                payload={
                    "projectId": project_id,
                    "type": "page_section",
                    "source": "site",
                    "pointKey": key,
                    "url": page.url,
                    "title": page.title,
                    "h1": page.h1,
                    "lang": page.lang,
                    "content": chunk.text,
                    "chunkIndex": idx,
                    "chunkParagraphStart": chunk.start_paragraph,
                    "chunkParagraphEnd": chunk.end_paragraph,
                    "clusterId": None,
                    "intent": None,
                    "primaryKeyword": None,
                    "secondaryKeywords": [],
                    "score_opportunity": None,
                },
            ))
    return points


def collect_pages(
    root_url: Optional[str] = None,
    sitemap_url: Optional[str] = None,
    urls: Sequence[str] = (),
    limit: int = DEFAULT_LIMIT,
    delay: float = DEFAULT_DELAY,
    session: Optional[requests.Session] = None
) -> List[ExtractedPage]:
    """
    Crawl from the root URL, then fetch sitemap and explicit URLs not yet seen.

    At most 2 * limit pages are returned.
    """
    pages: "OrderedDict[str, ExtractedPage]" = OrderedDict()

    if root_url:
        for page in crawl_site(root_url, limit=limit, delay=delay, session=session):
            pages[page.url] = page

    sitemap_urls = collect_sitemap_urls(sitemap_url, limit * 2, session=session) if sitemap_url else []
    targets = [
        url for url in OrderedDict.fromkeys(
            normalize_url(u) for u in list(sitemap_urls) + list(urls)
        )
        if url not in pages
    ]

    for url in targets:
        if len(pages) >= limit * 2:
            break
        try:
            pages[url] = extract_text_from_url(url, session)
        except requests.RequestException as e:
            logger.warning(f"Failed to extract {url}: {e}")
            continue
        if delay > 0:
            time.sleep(delay)

    return list(pages.values())


def ingest_project(
    project_id: str,
    store: VectorStore,
    embedder: EmbeddingClient,
    root_url: Optional[str] = None,
    sitemap_url: Optional[str] = None,
    urls: Sequence[str] = (),
    limit: int = DEFAULT_LIMIT,
    delay: float = DEFAULT_DELAY,
    session: Optional[requests.Session] = None
) -> IngestResult:
    """
    Crawl, chunk, embed and store a project's pages.

    Args:
        project_id: Project the points belong to
        store: Initialized vector store
        embedder: Initialized embedding client
        root_url: Site to crawl breadth-first
        sitemap_url: Sitemap to read page URLs from
        urls: Explicit page URLs
        limit: Crawl limit (1-60); up to 2 * limit pages are ingested

    Returns:
        IngestResult with page and section counts

    Raises:
        ValueError: If no source is given or limit is out of range
        IngestError: If no page could be extracted
        EmbeddingError: If embedding fails after retries
    """
    if not root_url and not sitemap_url and not urls:
        raise ValueError("Provide a root URL, a sitemap URL or page URLs")
    if not 1 <= limit <= MAX_LIMIT:
        raise ValueError(f"limit must be between 1 and {MAX_LIMIT}, got {limit}")

    logger.info("=" * 60)
    logger.info(f"INGEST {project_id} - START")
    logger.info("=" * 60)
    start_time = time.time()

    logger.info("\n[Step 1/3] Collecting pages...")
    pages = collect_pages(root_url, sitemap_url, urls, limit, delay, session)
    if not pages:
        raise IngestError(f"No pages extracted for project {project_id}")
    logger.info(f"Extracted {len(pages)} pages")

    logger.info("\n[Step 2/3] Chunking and embedding...")
    points = build_section_points(project_id, pages)
    if not points:
        raise IngestError(f"No text extracted from {len(pages)} pages of project {project_id}")

    vectors = embedder.embed_texts([p.payload["content"] for p in points])
    for point, vector in zip(points, vectors):
        point.vector = vector

    logger.info(f"\n[Step 3/3] Upserting {len(points)} sections...")
    store.ensure_collection(len(vectors[0]))
    store.upsert_points(points)

    elapsed = time.time() - start_time
    logger.info("\n" + "=" * 60)
    logger.info(f"INGEST {project_id} - COMPLETE")
    logger.info("=" * 60)
    logger.info(f"Pages ingested: {len(pages)}")
    logger.info(f"Sections embedded: {len(points)}")
    logger.info(f"Total time: {elapsed:.2f} seconds")

    return IngestResult(pages_ingested=len(pages), sections_embedded=len(points))
