"""
Tests for a single K-Means run.
"""

import random

import pytest

from clusterbox.clustering.kmeans import (
    assign_clusters,
    centroid_shift,
    compute_centroids,
    run_kmeans,
    sum_of_distance,
)
from clusterbox.clustering.seeding import seed_centroids
from clusterbox.clustering.vector_algebra import vector_distance


def two_topic_corpus():
    return [{"a": 5.0}, {"a": 5.0}, {"a": 5.0}, {"b": 5.0}, {"b": 5.0}, {"b": 5.0}]


def mixed_corpus(seed: int, size: int = 25, vocabulary: int = 12):
    rng = random.Random(seed)
    terms = [f"t{i}" for i in range(vocabulary)]
    return [
        {term: float(rng.randint(1, 4)) for term in rng.sample(terms, rng.randint(1, 4))}
        for _ in range(size)
    ]


class TestSteps:
    def test_assign_to_nearest(self):
        corpus = [{"a": 1.0}, {"b": 1.0}, {"a": 1.0, "b": 3.0}]
        assert assign_clusters(corpus, [{"a": 2.0}, {"b": 2.0}]) == [0, 1, 1]

    def test_centroid_is_mean_of_members(self):
        corpus = [{"a": 1.0}, {"a": 3.0, "b": 2.0}, {"c": 1.0}]
        centroids = compute_centroids(corpus, [0, 0, 1], [{}, {}])
        assert centroids[0] == {"a": pytest.approx(2.0), "b": pytest.approx(1.0)}
        assert centroids[1] == {"c": pytest.approx(1.0)}

    def test_empty_cluster_keeps_previous_centroid(self):
        corpus = [{"a": 1.0}, {"a": 3.0}]
        previous = [{"x": 1.0}, {"y": 2.0}]
        centroids = compute_centroids(corpus, [0, 0], previous)
        assert centroids == [{"a": 2.0}, {"y": 2.0}]

    def test_centroid_shift_is_mean_distance(self):
        old = [{"a": 1.0}, {"b": 1.0}]
        new = [{"a": 2.0}, {"c": 1.0}]
        expected = (vector_distance({"a": 2.0}, {"a": 1.0}) + vector_distance({"c": 1.0}, {"b": 1.0})) / 2
        assert centroid_shift(old, new) == pytest.approx(expected)

    def test_sum_of_distance(self):
        corpus = [{"a": 2.0}, {"b": 1.0}]
        centroids = [{"a": 1.0}, {"b": 4.0}]
        expected = 1000 / 2.0001 + 1000 / 4.0001
        assert sum_of_distance(corpus, centroids, [0, 1]) == pytest.approx(expected)


class TestRunKMeans:
    def test_separates_two_topics(self):
        corpus = two_topic_corpus()
        run = run_kmeans(corpus, 2, random.Random(8))

        assert len(set(run.assignments[:3])) == 1
        assert len(set(run.assignments[3:])) == 1
        assert run.assignments[0] != run.assignments[3]
        assert run.sum_of_distance == pytest.approx(6 * 1000 / 25.0001)

    @pytest.mark.parametrize("max_iterations", [1, 2, 3, 5])
    def test_terminates_within_cap(self, max_iterations):
        for seed in range(5):
            corpus = mixed_corpus(seed)
            run = run_kmeans(corpus, 4, random.Random(seed), max_iterations=max_iterations)
            assert 1 <= run.iterations <= max_iterations + 1
            assert all(0 <= c < 4 for c in run.assignments)

    def test_converged_run_reports_assignment_centroids(self):
        corpus = mixed_corpus(3)

        run = run_kmeans(corpus, 3, random.Random(21), convergence_threshold=float("inf"))

        centroids = seed_centroids(corpus, 3, random.Random(21))
        assignments = assign_clusters(corpus, centroids)
        assert run.iterations == 1
        assert list(run.assignments) == assignments
        assert run.sum_of_distance == pytest.approx(sum_of_distance(corpus, centroids, assignments))

    def test_same_seed_same_result(self):
        corpus = mixed_corpus(9)
        assert run_kmeans(corpus, 3, random.Random(2)) == run_kmeans(corpus, 3, random.Random(2))
