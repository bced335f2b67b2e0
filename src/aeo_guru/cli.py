"""
aeo-guru command line.

Usage:
    aeo-guru projects list
    aeo-guru projects add acme https://acme.example --sitemap https://acme.example/sitemap.xml
    aeo-guru ingest acme --limit 30
    aeo-guru cluster acme [--dry-run] [--no-questions]
    aeo-guru status acme
    aeo-guru vectors acme
    aeo-guru export semantic-core acme --output acme.yaml
    aeo-guru export robots acme --agent Googlebot --crawl-delay 5
    aeo-guru core enlarge acme --save
"""

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from dotenv import load_dotenv

from . import __version__
from .config import Settings
from .embed.embeddings import EmbeddingClient
from .exports import (
    build_geo_export,
    build_jsonld_export,
    build_semantic_core,
    cluster_status,
    enlarge_core,
    export_robots_txt,
    render_yaml,
    summarize_vectors,
)
from .generation import AnswerGraphBuilder, ClusterAnnotator
from .llm import BaseLLMClient, get_client
from .pipeline import ClusteringRun, ingest_project
from .store import ProjectNotFoundError, ProjectStore, VectorStore

logger = logging.getLogger(__name__)


def _emit(text: str, output: Optional[str]) -> None:
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
        logger.info(f"Wrote {output}")
    else:
        sys.stdout.write(text if text.endswith("\n") else text + "\n")


def _emit_json(data: Any, output: Optional[str] = None) -> None:
    _emit(json.dumps(data, indent=2, ensure_ascii=False), output)


def _vector_store(settings: Settings) -> VectorStore:
    settings.require_qdrant()
    return VectorStore(settings.qdrant_url, settings.qdrant_api_key, settings.collection).initialize()


def _embedder(settings: Settings) -> EmbeddingClient:
    return EmbeddingClient(
        model_name=settings.embedding_model,
        dimensions=settings.embedding_dimensions,
        project_id=settings.gcp_project,
        region=settings.gcp_region,
    ).initialize()


def _llm(args: argparse.Namespace, preset: str) -> BaseLLMClient:
    return get_client(model=getattr(args, "model", None), preset=preset).initialize()


# ---------------------------------------------------------------- projects

def cmd_projects(args: argparse.Namespace, settings: Settings) -> None:
    projects = ProjectStore(settings.projects_path)

    if args.projects_command == "list":
        _emit_json([p.to_dict() for p in projects.list_projects()])
    elif args.projects_command == "add":
        project = projects.add_project(args.project_id, args.root_url, name=args.name, sitemap_url=args.sitemap)
        _emit_json(project.to_dict())
    elif args.projects_command == "show":
        project = projects.get_project(args.project_id)
        core = projects.get_core(args.project_id)
        _emit_json({**project.to_dict(), "hasCore": core is not None})
    elif args.projects_command == "delete":
        projects.delete_project(args.project_id)
        if args.purge:
            _vector_store(settings).delete_project_points(args.project_id)
        _emit_json({"deleted": args.project_id, "purged": bool(args.purge)})


# ---------------------------------------------------------------- pipelines

def cmd_ingest(args: argparse.Namespace, settings: Settings) -> None:
    root_url, sitemap_url = args.root_url, args.sitemap
    if not (root_url or sitemap_url or args.url):
        try:
            project = ProjectStore(settings.projects_path).get_project(args.project_id)
        except ProjectNotFoundError:
            raise ValueError(
                f"Project {args.project_id} is not registered; pass --root-url, --sitemap or --url"
            )
        root_url, sitemap_url = project.root_url, project.sitemap_url

    result = ingest_project(
        args.project_id,
        store=_vector_store(settings),
        embedder=_embedder(settings),
        root_url=root_url,
        sitemap_url=sitemap_url,
        urls=args.url or (),
        limit=args.limit,
    )
    _emit_json(result.to_dict())


def cmd_cluster(args: argparse.Namespace, settings: Settings) -> None:
    store = _vector_store(settings)

    annotator = None
    if not args.no_annotate:
        annotator = ClusterAnnotator(_llm(args, "reasoning"))

    answer_graph = None
    if annotator is not None and not args.no_questions:
        answer_graph = AnswerGraphBuilder(_llm(args, "fast"), _embedder(settings), store)

    run = ClusteringRun(store, annotator=annotator, answer_graph=answer_graph, dry_run=args.dry_run)
    result = run.run(args.project_id, lang=args.lang)
    _emit_json(result.to_dict())


def cmd_status(args: argparse.Namespace, settings: Settings) -> None:
    points = _vector_store(settings).scroll_points(args.project_id, types=None, with_vectors=False, limit=5000)
    _emit_json({"projectId": args.project_id, "points": len(points), "clusterCount": cluster_status(points)})


def cmd_vectors(args: argparse.Namespace, settings: Settings) -> None:
    points = _vector_store(settings).scroll_points(
        args.project_id, types=None, lang=args.lang, with_vectors=True, limit=2000
    )
    _emit_json({"projectId": args.project_id, "summary": summarize_vectors(points)})


# ---------------------------------------------------------------- exports

def cmd_export(args: argparse.Namespace, settings: Settings) -> None:
    store = _vector_store(settings)
    page_points = store.scroll_points(args.project_id, lang=args.lang, with_vectors=False)

    if args.export_command == "semantic-core":
        query_points = store.scroll_points(args.project_id, types=("query",), lang=args.lang, with_vectors=False)
        payload = build_semantic_core(args.project_id, page_points, query_points, limit=args.limit, lang=args.lang)
        _emit(render_yaml(payload), args.output)

    elif args.export_command == "jsonld":
        payload = build_jsonld_export(_llm(args, "structured"), args.project_id, page_points, limit=args.limit or 4)
        _emit_json(payload, args.output)

    elif args.export_command == "robots":
        root_url = args.root_url
        if not root_url:
            root_url = ProjectStore(settings.projects_path).get_project(args.project_id).root_url
        client = _llm(args, "fast") if args.llm else None
        text = export_robots_txt(
            root_url,
            page_points,
            client=client,
            agents=args.agent,
            crawl_delay=args.crawl_delay,
            sitemap_urls=args.sitemap_url,
        )
        _emit(text, args.output)

    elif args.export_command == "geo":
        query_points = store.scroll_points(
            args.project_id, types=("query",), lang=args.lang, with_vectors=False, limit=5000
        )
        payload = build_geo_export(
            args.project_id, page_points, query_points, limit=args.limit, lang=args.lang, tone=args.tone
        )
        _emit_json(payload, args.output)


# ---------------------------------------------------------------- core

def cmd_core(args: argparse.Namespace, settings: Settings) -> None:
    projects = ProjectStore(settings.projects_path)

    if args.core_command == "show":
        core = projects.get_core(args.project_id)
        _emit_json(core.to_dict() if core else {"projectId": args.project_id, "semanticCoreYaml": ""})
        return

    existing = projects.get_core(args.project_id)
    manual_notes = args.notes if args.notes is not None else (existing.manual_notes if existing else None)
    current_yaml = existing.semantic_core_yaml if existing else None

    points = _vector_store(settings).scroll_points(args.project_id, with_vectors=False)
    enlargement = enlarge_core(
        _llm(args, "reasoning"),
        args.project_id,
        points,
        limit=args.limit,
        max_chars=args.max_chars,
        manual_notes=manual_notes,
        semantic_core_yaml=current_yaml,
    )
    if args.save:
        projects.upsert_core(
            args.project_id,
            semantic_core_yaml=enlargement.semantic_core_yaml,
            manual_notes=manual_notes,
            cluster_notes=existing.cluster_notes if existing else None,
        )
    _emit_json({
        "semanticCoreYaml": enlargement.semantic_core_yaml,
        "summary": enlargement.summary.to_dict(),
        "records": enlargement.records,
        "saved": bool(args.save),
    }, args.output)


# ---------------------------------------------------------------- parser

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aeo-guru",
        description="Crawl, embed and cluster a site; export semantic core, JSON-LD, robots.txt and GEO briefs"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    # projects
    projects = sub.add_parser("projects", help="Manage registered projects")
    projects_sub = projects.add_subparsers(dest="projects_command", required=True)
    projects_sub.add_parser("list", help="List projects")
    add = projects_sub.add_parser("add", help="Register a project")
    add.add_argument("project_id")
    add.add_argument("root_url")
    add.add_argument("--name")
    add.add_argument("--sitemap", help="Sitemap URL")
    show = projects_sub.add_parser("show", help="Show a project")
    show.add_argument("project_id")
    delete = projects_sub.add_parser("delete", help="Delete a project")
    delete.add_argument("project_id")
    delete.add_argument("--purge", action="store_true", help="Also delete the project's vectors")
    projects.set_defaults(func=cmd_projects)

    # ingest
    ingest = sub.add_parser("ingest", help="Crawl, embed and store a site")
    ingest.add_argument("project_id")
    ingest.add_argument("--root-url", help="Defaults to the registered project's root URL")
    ingest.add_argument("--sitemap", help="Sitemap URL")
    ingest.add_argument("--url", action="append", help="Page URL (repeatable)")
    ingest.add_argument("--limit", type=int, default=20, help="Crawl limit, 1-60 (default: 20)")
    ingest.set_defaults(func=cmd_ingest)

    # cluster
    cluster = sub.add_parser("cluster", help="Cluster and annotate a project")
    cluster.add_argument("project_id")
    cluster.add_argument("--dry-run", action="store_true", help="Write nothing to the vector store")
    cluster.add_argument("--no-questions", action="store_true", help="Skip canonical question generation")
    cluster.add_argument("--no-annotate", action="store_true", help="Only assign cluster IDs")
    cluster.add_argument("--lang", help="Only cluster sections in this language")
    cluster.add_argument("--model", help="LLM model or alias (overrides presets)")
    cluster.set_defaults(func=cmd_cluster)

    # status / vectors
    status = sub.add_parser("status", help="Number of clusters assigned")
    status.add_argument("project_id")
    status.set_defaults(func=cmd_status)
    vectors = sub.add_parser("vectors", help="Vector summary")
    vectors.add_argument("project_id")
    vectors.add_argument("--lang")
    vectors.set_defaults(func=cmd_vectors)

    # export
    export = sub.add_parser("export", help="Export project artifacts")
    export_sub = export.add_subparsers(dest="export_command", required=True)
    for name in ("semantic-core", "jsonld", "robots", "geo"):
        command = export_sub.add_parser(name)
        command.add_argument("project_id")
        command.add_argument("--output", "-o", help="Output file (default: stdout)")
        command.add_argument("--lang")
        command.add_argument("--model", help="LLM model or alias")
        if name != "robots":
            command.add_argument("--limit", type=int)
        if name == "geo":
            command.add_argument("--tone")
        if name == "robots":
            command.add_argument("--root-url", help="Defaults to the registered project's root URL")
            command.add_argument("--agent", action="append", help="User agent (repeatable)")
            command.add_argument("--crawl-delay", type=int)
            command.add_argument("--sitemap-url", action="append", help="Sitemap URL (repeatable)")
            command.add_argument("--llm", action="store_true", help="Let the LLM write the file")
    export.set_defaults(func=cmd_export)

    # core
    core = sub.add_parser("core", help="Semantic core notes")
    core_sub = core.add_subparsers(dest="core_command", required=True)
    core_show = core_sub.add_parser("show")
    core_show.add_argument("project_id")
    enlarge = core_sub.add_parser("enlarge")
    enlarge.add_argument("project_id")
    enlarge.add_argument("--limit", type=int, default=6, help="Pages, 3-12 (default: 6)")
    enlarge.add_argument("--max-chars", type=int, default=2000, help="Characters per page, 500-5000")
    enlarge.add_argument("--notes", help="Manual notes (default: stored notes)")
    enlarge.add_argument("--save", action="store_true", help="Store the enlarged core")
    enlarge.add_argument("--output", "-o")
    enlarge.add_argument("--model", help="LLM model or alias")
    core.set_defaults(func=cmd_core)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )

    settings = Settings.from_env()

    try:
        args.func(args, settings)
    except Exception as e:
        logger.error(f"{args.command} failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
