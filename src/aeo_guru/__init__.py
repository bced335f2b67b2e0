"""
AEO Guru - crawl a site, embed it, cluster it, export SEO/AEO artifacts.

Subpackages:
    clustering: k-means over cosine distance with a URL-grouping fallback
    crawl: HTML fetching, extraction, sitemap and same-origin crawling
    embed: paragraph chunking and Gemini embeddings
    store: Qdrant vector store wrapper and the flat-file project store
    llm: Gemini/Claude provider abstraction
    generation: LLM prompts for cluster annotation, questions, JSON-LD, robots.txt
    exports: semantic core YAML, JSON-LD, robots.txt, GEO briefs
    pipeline: ingest and clustering runs
"""

__version__ = "0.3.0"
