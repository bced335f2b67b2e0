"""Tests for the cluster sizing policy and quality metrics."""

import pytest

from aeo_guru.clustering import Cluster, ProjectPoint, cluster_sizing, compute_quality_metrics, config_for
from aeo_guru.clustering.kmeans import round_half_up


class TestClusterSizing:

    @pytest.mark.parametrize("total,expected", [
        (10, (8, 1)),
        (100, (22, 5)),
        (1000, (40, 25)),
        (10000, (40, 32)),
    ])
    def test_known_sizes(self, total, expected):
        assert cluster_sizing(total) == expected

    def test_desired_size_stays_in_bounds(self):
        for total in (1, 2, 5, 50, 500, 5000, 50000):
            desired, max_clusters = cluster_sizing(total)
            assert 8 <= desired <= 40
            assert 1 <= max_clusters <= 32

    def test_desired_size_never_decreases(self):
        previous = 0
        for total in range(1, 3001):
            desired, _ = cluster_sizing(total)
            assert desired >= previous, f"desired size dropped at total={total}"
            previous = desired

    def test_max_clusters_can_dip_when_desired_size_grows(self):
        # desired rounds up from 20 to 21, so 94 / 21 rounds down to 4
        assert cluster_sizing(93) == (20, 5)
        assert cluster_sizing(94) == (21, 4)

    def test_empty_input(self):
        assert cluster_sizing(0) == (8, 1)

    def test_config_for(self):
        config = config_for(100, max_iterations=12)
        assert config.desired_cluster_size == 22
        assert config.max_clusters == 5
        assert config.max_iterations == 12

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.49) == 2


class TestQualityMetrics:

    def test_silhouette_for_separated_clusters(self):
        points = [
            ProjectPoint(id='a1', vector=[1.0, 0.0]),
            ProjectPoint(id='a2', vector=[0.9, 0.1]),
            ProjectPoint(id='b1', vector=[0.0, 1.0]),
            ProjectPoint(id='b2', vector=[0.1, 0.9]),
        ]
        clusters = [Cluster(id='cluster-1', point_ids=['a1', 'a2']), Cluster(id='cluster-2', point_ids=['b1', 'b2'])]

        metrics = compute_quality_metrics(points, clusters)

        assert metrics['n_clusters'] == 2
        assert metrics['min_cluster_size'] == 2
        assert metrics['max_cluster_size'] == 2
        assert metrics['silhouette_score'] > 0.5

    def test_single_cluster_has_no_silhouette(self):
        points = [ProjectPoint(id='a', vector=[1.0, 0.0]), ProjectPoint(id='b', vector=[0.0, 1.0])]
        metrics = compute_quality_metrics(points, [Cluster(id='cluster-1', point_ids=['a', 'b'])])
        assert metrics['silhouette_score'] is None
