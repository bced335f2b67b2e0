"""Project exports: semantic core, JSON-LD, robots.txt, GEO improvements."""

from .common import ExportError, build_cluster_descriptors, slugify
from .core import CoreEnlargement, enlarge_core
from .geo import DEFAULT_TONE, build_geo_export, build_geo_module, geo_filename
from .jsonld import build_jsonld_export, jsonld_filename
from .page_contexts import PageContext, build_page_contexts
from .robots import POPULAR_CRAWLERS, collect_patterns, export_robots_txt, render_robots_txt
from .semantic_core import build_semantic_core, render_yaml, semantic_core_filename
from .vectors_summary import cluster_status, summarize_vectors

__all__ = [
    "CoreEnlargement",
    "DEFAULT_TONE",
    "ExportError",
    "POPULAR_CRAWLERS",
    "PageContext",
    "build_cluster_descriptors",
    "build_geo_export",
    "build_geo_module",
    "build_jsonld_export",
    "build_page_contexts",
    "build_semantic_core",
    "cluster_status",
    "collect_patterns",
    "enlarge_core",
    "export_robots_txt",
    "geo_filename",
    "jsonld_filename",
    "render_robots_txt",
    "render_yaml",
    "semantic_core_filename",
    "slugify",
    "summarize_vectors",
]
