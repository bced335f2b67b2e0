"""
Tests for the clustering run orchestration.

The vector store, annotator and answer graph are Mocks; k-means runs for real.
"""

import unittest
from unittest.mock import Mock

from aeo_guru.clustering import ProjectPoint
from aeo_guru.generation import validate_annotation_response
from aeo_guru.pipeline import ClusteringRun

ANNOTATION = validate_annotation_response({
    "label": "Widgets",
    "summary": "All about widgets.",
    "intent": "informational",
    "primaryKeyword": "widgets",
    "opportunityScore": 0.5,
})


def make_points():
    points = []
    for i in range(10):
        vector = [1.0, 0.01 * i] if i < 5 else [0.01 * i, 1.0]
        url = "https://acme.test/a" if i < 5 else "https://acme.test/b"
        points.append(ProjectPoint(
            id=f"p{i}",
            payload={"url": url, "content": f"Section {i}", "lang": "en"},
            vector=vector,
        ))
    return points


class TestClusteringRun(unittest.TestCase):

    def setUp(self):
        self.store = Mock()
        self.store.scroll_points.return_value = make_points()
        self.annotator = Mock()
        self.annotator.annotate.return_value = ANNOTATION
        self.answer_graph = Mock()
        self.answer_graph.build.return_value = ["q1", "q2", "q3"]

    def test_no_points(self):
        self.store.scroll_points.return_value = []
        result = ClusteringRun(self.store).run("acme")
        self.assertEqual(result.points, 0)
        self.assertEqual(result.clusters, [])
        self.store.set_payload.assert_not_called()

    def test_cluster_ids_only_without_annotator(self):
        result = ClusteringRun(self.store).run("acme")

        self.assertEqual(result.points, 10)
        self.assertEqual(len(result.clusters), 1)
        payload, point_ids = self.store.set_payload.call_args.args
        self.assertEqual(payload, {"clusterId": "cluster-1"})
        self.assertEqual(len(point_ids), 10)

    def test_annotates_and_builds_questions(self):
        run = ClusteringRun(self.store, annotator=self.annotator, answer_graph=self.answer_graph)

        result = run.run("acme", lang="en")

        self.store.scroll_points.assert_called_once_with(
            "acme", types=("page_section",), lang="en", with_vectors=True
        )
        payload = self.store.set_payload.call_args.args[0]
        self.assertEqual(payload["clusterLabel"], "Widgets")
        self.assertIn(payload["clusterPrimaryUrl"], ("https://acme.test/a", "https://acme.test/b"))
        self.store.delete_project_points.assert_called_once_with("acme", types=("query",))
        self.assertEqual(result.questions, {"cluster-1": 3})
        self.assertEqual(result.to_dict()["clusters"][0]["label"], "Widgets")

    def test_annotation_failure_is_recorded(self):
        self.annotator.annotate.side_effect = ValueError("bad json")
        run = ClusteringRun(self.store, annotator=self.annotator, answer_graph=self.answer_graph)

        result = run.run("acme")

        self.assertEqual(result.failures, {"cluster-1": "annotation: bad json"})
        self.store.set_payload.assert_called_once()
        self.assertEqual(self.store.set_payload.call_args.args[0], {"clusterId": "cluster-1"})
        self.answer_graph.build.assert_not_called()

    def test_question_failure_is_recorded(self):
        self.answer_graph.build.side_effect = ValueError("too few questions")
        run = ClusteringRun(self.store, annotator=self.annotator, answer_graph=self.answer_graph)

        result = run.run("acme")

        self.assertEqual(result.failures, {"cluster-1": "questions: too few questions"})
        self.assertEqual(result.questions, {})

    def test_dry_run_writes_nothing(self):
        run = ClusteringRun(self.store, annotator=self.annotator, answer_graph=self.answer_graph, dry_run=True)

        result = run.run("acme")

        self.assertEqual(len(result.annotations), 1)
        self.store.set_payload.assert_not_called()
        self.store.delete_project_points.assert_not_called()
        self.assertTrue(self.answer_graph.build.call_args.kwargs["dry_run"])


if __name__ == '__main__':
    unittest.main()
