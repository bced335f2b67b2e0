"""
Unit tests for the clustering core.

Tests vector normalization, cosine distance, k-means partitioning, the
naive URL fallback and folding of vector-less points.
"""

import unittest

import numpy as np

from aeo_guru.clustering import (
    KMeansConfig,
    ProjectPoint,
    cosine_distance,
    kmeans_cluster,
    naive_cluster,
    normalize_vector,
)


def point(pid, vector=None, url=None, **payload):
    if url is not None:
        payload['url'] = url
    return ProjectPoint(id=pid, payload=payload, vector=vector)


class TestNormalizeVector(unittest.TestCase):
    """Test extraction of a flat vector from raw store values."""

    def test_flat_list(self):
        self.assertEqual(normalize_vector([0.1, 0.2, 0.3]), [0.1, 0.2, 0.3])

    def test_nested_list_takes_first(self):
        self.assertEqual(normalize_vector([[1.0, 2.0], [3.0, 4.0]]), [1.0, 2.0])

    def test_named_vectors_take_first_valid(self):
        raw = {'empty': [], 'text': [0.5, 0.5]}
        self.assertEqual(normalize_vector(raw), [0.5, 0.5])

    def test_sparse_vector_is_none(self):
        self.assertIsNone(normalize_vector({'indices': [1, 4], 'values': [0.2, 0.8]}))

    def test_numpy_array(self):
        self.assertEqual(normalize_vector(np.array([1.0, 0.0])), [1.0, 0.0])

    def test_unparseable_values(self):
        self.assertIsNone(normalize_vector(None))
        self.assertIsNone(normalize_vector([]))
        self.assertIsNone(normalize_vector("0.1,0.2"))
        self.assertIsNone(normalize_vector(["a", "b"]))
        self.assertIsNone(normalize_vector([True, False]))

    def test_mixed_and_non_finite_elements(self):
        self.assertIsNone(normalize_vector([1.0, "x"]))
        self.assertIsNone(normalize_vector([float('nan'), 1.0]))
        self.assertIsNone(normalize_vector([1.0, float('inf')]))
        self.assertIsNone(normalize_vector([[1.0, None], [0.0, 1.0]]))
        self.assertEqual(normalize_vector({'bad': [float('nan')], 'text': [0.5, 0.5]}), [0.5, 0.5])


class TestCosineDistance(unittest.TestCase):

    def test_identical(self):
        self.assertAlmostEqual(cosine_distance([1.0, 2.0], [2.0, 4.0]), 0.0)

    def test_orthogonal(self):
        self.assertAlmostEqual(cosine_distance([1.0, 0.0], [0.0, 1.0]), 1.0)

    def test_opposite(self):
        self.assertAlmostEqual(cosine_distance([1.0, 0.0], [-1.0, 0.0]), 2.0)

    def test_zero_vector(self):
        self.assertEqual(cosine_distance([0.0, 0.0], [1.0, 0.0]), 1.0)


class TestNaiveCluster(unittest.TestCase):

    def test_groups_by_url_in_creation_order(self):
        points = [
            point('a', url='https://x.test/one'),
            point('b', url='https://x.test/two'),
            point('c', url='https://x.test/one'),
        ]
        clusters = naive_cluster(points)

        self.assertEqual([c.id for c in clusters], ['https://x.test/one#c0', 'https://x.test/two#c1'])
        self.assertEqual(clusters[0].point_ids, ['a', 'c'])
        self.assertEqual(clusters[1].point_ids, ['b'])
        self.assertIsNone(clusters[0].centroid)

    def test_points_without_url_share_a_group(self):
        clusters = naive_cluster([point('a'), point('b')])
        self.assertEqual(len(clusters), 1)
        self.assertEqual(clusters[0].id, '#c0')


class TestKMeansCluster(unittest.TestCase):
    """Test k-means over cosine distance."""

    def setUp(self):
        self.points = [
            point('p1', [0.1, 1.0], url='https://x.test/a'),
            point('p2', [0.0, 1.0], url='https://x.test/a'),
            point('p3', [-0.1, 1.0], url='https://x.test/a'),
            point('p4', [1.0, 0.1], url='https://x.test/b'),
            point('p5', [1.0, 0.0], url='https://x.test/b'),
            point('p6', [1.0, -0.1], url='https://x.test/b'),
        ]
        self.config = KMeansConfig(desired_cluster_size=3, max_iterations=30, max_clusters=2)

    def test_separates_two_groups(self):
        clusters = kmeans_cluster(self.points, self.config)

        self.assertEqual([c.id for c in clusters], ['cluster-1', 'cluster-2'])
        self.assertEqual(sorted(clusters[0].point_ids), ['p4', 'p5', 'p6'])
        self.assertEqual(sorted(clusters[1].point_ids), ['p1', 'p2', 'p3'])
        np.testing.assert_allclose(clusters[0].centroid, [1.0, 0.0], atol=1e-9)
        np.testing.assert_allclose(clusters[1].centroid, [0.0, 1.0], atol=1e-9)

    def test_deterministic(self):
        first = kmeans_cluster(self.points, self.config)
        second = kmeans_cluster(self.points, self.config)
        self.assertEqual([c.to_dict() for c in first], [c.to_dict() for c in second])

    def test_every_point_assigned_once(self):
        clusters = kmeans_cluster(self.points, self.config)
        assigned = [pid for c in clusters for pid in c.point_ids]
        self.assertEqual(sorted(assigned), ['p1', 'p2', 'p3', 'p4', 'p5', 'p6'])

    def test_k_limited_by_max_clusters(self):
        config = KMeansConfig(desired_cluster_size=1, max_iterations=30, max_clusters=1)
        clusters = kmeans_cluster(self.points, config)
        self.assertEqual(len(clusters), 1)
        self.assertEqual(clusters[0].size, 6)

    def test_empty_clusters_are_dropped(self):
        points = [
            point('p1', [1.0, 0.0]),
            point('p2', [1.0, 0.0]),
            point('p3', [0.0, 1.0]),
        ]
        config = KMeansConfig(desired_cluster_size=1, max_iterations=10, max_clusters=3)
        clusters = kmeans_cluster(points, config)

        self.assertEqual([c.id for c in clusters], ['cluster-1', 'cluster-3'])
        self.assertEqual(clusters[0].point_ids, ['p1', 'p2'])
        self.assertEqual(clusters[1].point_ids, ['p3'])

    def test_vectorless_point_follows_its_url(self):
        points = self.points + [point('q1', None, url='https://x.test/a')]
        clusters = kmeans_cluster(points, self.config)
        by_id = {c.id: c for c in clusters}
        self.assertIn('q1', by_id['cluster-2'].point_ids)

    def test_vectorless_point_without_url_goes_to_smallest(self):
        # Three A points and a single B point
        points = self.points[:4] + [point('q1', None)]
        config = KMeansConfig(desired_cluster_size=2, max_iterations=30, max_clusters=2)
        clusters = kmeans_cluster(points, config)

        self.assertEqual(clusters[0].point_ids, ['p4', 'q1'])
        self.assertEqual(clusters[1].point_ids, ['p1', 'p2', 'p3'])

    def test_falls_back_to_naive_with_one_vector(self):
        points = [
            point('a', [1.0, 0.0], url='https://x.test/a'),
            point('b', None, url='https://x.test/b'),
        ]
        clusters = kmeans_cluster(points, self.config)
        self.assertEqual([c.id for c in clusters], ['https://x.test/a#c0', 'https://x.test/b#c1'])

    def test_mismatched_dimensions_treated_as_vectorless(self):
        points = self.points + [point('odd', [1.0, 0.0, 0.0], url='https://x.test/b')]
        clusters = kmeans_cluster(points, self.config)
        by_id = {c.id: c for c in clusters}
        self.assertIn('odd', by_id['cluster-1'].point_ids)
        self.assertEqual(len(by_id['cluster-1'].centroid), 2)

    def test_malformed_vectors_treated_as_vectorless(self):
        for bad in ([1.0, "x"], [float('nan'), 1.0]):
            points = self.points + [point('bad', bad, url='https://x.test/b')]
            clusters = kmeans_cluster(points, self.config)
            by_id = {c.id: c for c in clusters}
            self.assertEqual(sorted(by_id['cluster-1'].point_ids), ['bad', 'p4', 'p5', 'p6'])
            np.testing.assert_allclose(by_id['cluster-1'].centroid, [1.0, 0.0], atol=1e-9)

    def test_malformed_vector_does_not_raise(self):
        points = [
            point('a', [1.0, 0.0], url='https://x.test/a'),
            point('b', [0.0, 1.0], url='https://x.test/b'),
            point('c', [float('nan'), 1.0], url='https://x.test/c'),
        ]
        config = KMeansConfig(desired_cluster_size=1, max_iterations=30, max_clusters=2)
        clusters = kmeans_cluster(points, config)
        assigned = sorted(pid for c in clusters for pid in c.point_ids)
        self.assertEqual(assigned, ['a', 'b', 'c'])

    def test_matches_naive_without_vectors(self):
        points = [
            point('a', None, url='https://x.test/a'),
            point('b', None, url='https://x.test/b'),
            point('c', None, url='https://x.test/a'),
        ]
        self.assert_same_as_naive(points)

    def test_matches_naive_with_one_vector(self):
        points = [
            point('a', [1.0, 0.0], url='https://x.test/a'),
            point('b', None, url='https://x.test/b'),
            point('c', None),
        ]
        self.assert_same_as_naive(points)

    def test_matches_naive_when_dimension_mismatch_leaves_one_vector(self):
        points = [
            point('a', [1.0, 0.0], url='https://x.test/a'),
            point('b', [1.0, 0.0, 0.0], url='https://x.test/b'),
            point('c', None, url='https://x.test/a'),
        ]
        self.assert_same_as_naive(points)

    def assert_same_as_naive(self, points):
        clusters = kmeans_cluster(points, self.config)
        self.assertEqual(
            [c.to_dict() for c in clusters],
            [c.to_dict() for c in naive_cluster(points)]
        )

    def test_named_vectors_are_normalized(self):
        points = [point(p.id, {'text': p.vector}, url=p.url) for p in self.points]
        clusters = kmeans_cluster(points, self.config)
        self.assertEqual(sorted(clusters[0].point_ids), ['p4', 'p5', 'p6'])


if __name__ == '__main__':
    unittest.main()
