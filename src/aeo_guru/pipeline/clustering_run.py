"""
Clustering run: cluster a project's sections, annotate the clusters and
write the annotations back onto the points.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..clustering import Cluster, compute_quality_metrics, config_for, kmeans_cluster
from ..generation.annotator import ClusterAnnotator, cluster_members, dominant_language, primary_url
from ..generation.answer_graph import AnswerGraphBuilder
from ..generation.schema import ClusterAnnotation
from ..store.vector_store import VectorStore

logger = logging.getLogger(__name__)


@dataclass
class ClusterRunResult:
    project_id: str
    points: int = 0
    clusters: List[Cluster] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)
    annotations: Dict[str, ClusterAnnotation] = field(default_factory=dict)
    questions: Dict[str, int] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projectId": self.project_id,
            "points": self.points,
            "clusterCount": len(self.clusters),
            "metrics": self.metrics,
            "clusters": [
                {
                    **cluster.to_dict(),
                    "label": self.annotations[cluster.id].label if cluster.id in self.annotations else None,
                    "questions": self.questions.get(cluster.id, 0),
                }
                for cluster in self.clusters
            ],
            "failures": self.failures,
        }


class ClusteringRun:
    """
    One clustering pass over a project.

    Args:
        store: Initialized vector store
        annotator: Cluster annotator; without one only clusterId is written
        answer_graph: Optional canonical-question builder
        dry_run: Compute and annotate, but write nothing
        max_iterations: K-means iteration cap
    """

    def __init__(
        self,
        store: VectorStore,
        annotator: Optional[ClusterAnnotator] = None,
        answer_graph: Optional[AnswerGraphBuilder] = None,
        dry_run: bool = False,
        max_iterations: int = 30
    ):
        self.store = store
        self.annotator = annotator
        self.answer_graph = answer_graph
        self.dry_run = dry_run
        self.max_iterations = max_iterations

    def run(self, project_id: str, lang: Optional[str] = None) -> ClusterRunResult:
        """
        Cluster, annotate and write back.

        A failed annotation or question generation for one cluster is logged
        and recorded in the result; the other clusters are still processed.
        """
        logger.info("=" * 60)
        logger.info(f"CLUSTERING {project_id} - START")
        logger.info("=" * 60)
        if self.dry_run:
            logger.warning("DRY RUN MODE - No writes will be performed")
        start_time = time.time()

        result = ClusterRunResult(project_id=project_id)

        # Step 1: Load points
        logger.info("\n[Step 1/4] Loading page sections with vectors...")
        points = self.store.scroll_points(project_id, types=("page_section",), lang=lang, with_vectors=True)
        result.points = len(points)
        if not points:
            logger.warning(f"No points found for project {project_id}")
            return result

        # Step 2: Cluster
        config = config_for(len(points), max_iterations=self.max_iterations)
        logger.info(
            f"\n[Step 2/4] Clustering {len(points)} points "
            f"(desired size={config.desired_cluster_size}, max clusters={config.max_clusters})..."
        )
        result.clusters = kmeans_cluster(points, config)
        result.metrics = compute_quality_metrics(points, result.clusters)
        logger.info(f"Cluster metrics: {result.metrics}")

        # Step 3: Annotate and write back
        logger.info(f"\n[Step 3/4] Annotating {len(result.clusters)} clusters...")
        for cluster in result.clusters:
            members = cluster_members(cluster, points)
            if self.annotator is None:
                self._write_payload({"clusterId": cluster.id}, cluster)
                continue
            try:
                annotation = self.annotator.annotate(cluster, points, project_id=project_id)
            except Exception as e:
                logger.error(f"Annotation failed for {cluster.id}: {e}")
                result.failures[cluster.id] = f"annotation: {e}"
                self._write_payload({"clusterId": cluster.id}, cluster)
                continue

            result.annotations[cluster.id] = annotation
            self._write_payload(annotation.to_payload(cluster.id, primary_url(members)), cluster)

        # Step 4: Answer graph
        if self.answer_graph is not None and result.annotations:
            logger.info("\n[Step 4/4] Building answer graph...")
            if not self.dry_run:
                self.store.delete_project_points(project_id, types=("query",))
            for cluster in result.clusters:
                annotation = result.annotations.get(cluster.id)
                if annotation is None:
                    continue
                members = cluster_members(cluster, points)
                try:
                    questions = self.answer_graph.build(
                        project_id,
                        cluster.id,
                        annotation,
                        lang=dominant_language(members, fallback=lang or "en"),
                        primary_url=primary_url(members),
                        dry_run=self.dry_run,
                    )
                except Exception as e:
                    logger.error(f"Question generation failed for {cluster.id}: {e}")
                    result.failures[cluster.id] = f"questions: {e}"
                    continue
                result.questions[cluster.id] = len(questions)
        else:
            logger.info("\n[Step 4/4] Answer graph skipped")

        elapsed = time.time() - start_time
        logger.info("\n" + "=" * 60)
        logger.info(f"CLUSTERING {project_id} - COMPLETE")
        logger.info("=" * 60)
        logger.info(f"Total time: {elapsed:.2f} seconds")
        logger.info(f"Points clustered: {len(points)}")
        logger.info(f"Clusters: {len(result.clusters)} ({len(result.annotations)} annotated)")
        logger.info(f"Silhouette score: {result.metrics.get('silhouette_score', 'N/A')}")
        if result.failures:
            logger.warning(f"Failures: {len(result.failures)}")
        logger.info("=" * 60)

        return result

    def _write_payload(self, payload: Dict[str, Any], cluster: Cluster) -> None:
        if self.dry_run:
            logger.info(f"[DRY RUN] Would write {len(payload)} keys to {cluster.size} points of {cluster.id}")
            return
        self.store.set_payload(payload, cluster.point_ids)
