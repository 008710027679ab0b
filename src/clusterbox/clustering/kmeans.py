"""
Single K-Means run over sparse term vectors.

1. Seed k centroids with K-Means++.
2. Assign each document to its nearest centroid.
3. Recompute each centroid as the mean of its documents.
4. Stop when the mean centroid shift is below the threshold or the iteration
   cap is reached; otherwise adopt the new centroids and repeat from 2.

On stop, the assignment from step 2 is returned together with its
sum-of-distance, measured against the centroids that assignment was made with
(not the freshly recomputed ones).
"""

import logging
import random
from dataclasses import dataclass
from typing import Sequence

from clusterbox.clustering.models import SparseVector
from clusterbox.clustering.seeding import nearest_centroid, seed_centroids
from clusterbox.clustering.vector_algebra import add_vectors, divide_vector, vector_distance

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 5
DEFAULT_CONVERGENCE_THRESHOLD = 0.01


@dataclass(frozen=True)
class KMeansRun:
    """Output of one run: assignment per document, its sum-of-distance, and cycles used."""

    assignments: tuple[int, ...]
    sum_of_distance: float
    iterations: int


def assign_clusters(corpus: Sequence[SparseVector], centroids: Sequence[SparseVector]) -> list[int]:
    return [nearest_centroid(element, centroids)[0] for element in corpus]


def compute_centroids(
    corpus: Sequence[SparseVector],
    assignments: Sequence[int],
    previous: Sequence[SparseVector],
) -> list[SparseVector]:
    """
    Mean vector of each cluster's documents.

    A cluster with no documents keeps its previous centroid.
    """
    k = len(previous)
    members: list[list[SparseVector]] = [[] for _ in range(k)]
    for element, cluster in zip(corpus, assignments):
        members[cluster].append(element)

    centroids = []
    for cluster in range(k):
        if not members[cluster]:
            logger.debug(f"Cluster {cluster} is empty, keeping its previous centroid")
            centroids.append(dict(previous[cluster]))
            continue
        centroids.append(divide_vector(add_vectors(*members[cluster]), len(members[cluster])))
    return centroids


def centroid_shift(old: Sequence[SparseVector], new: Sequence[SparseVector]) -> float:
    """Mean distance between old and new centroids at matching indexes."""
    return sum(vector_distance(n, o) for n, o in zip(new, old)) / len(new)


def sum_of_distance(
    corpus: Sequence[SparseVector],
    centroids: Sequence[SparseVector],
    assignments: Sequence[int],
) -> float:
    """Total distance of each document to the centroid it is assigned to."""
    return sum(vector_distance(centroids[c], element) for element, c in zip(corpus, assignments))


def run_kmeans(
    corpus: Sequence[SparseVector],
    k: int,
    rng: random.Random,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    convergence_threshold: float = DEFAULT_CONVERGENCE_THRESHOLD,
    seeding_exponent: float = 1.0,
) -> KMeansRun:
    """
    Cluster the corpus into k groups.

    Performs at most max_iterations + 1 assign/update cycles.

    Args:
        corpus: Weighted document vectors
        k: Number of clusters
        rng: Random source for seeding
        max_iterations: Cycles allowed after the first
        convergence_threshold: Stop once the mean centroid shift falls below this
        seeding_exponent: Exponent for K-Means++ seeding weights

    Returns:
        KMeansRun with the final assignment and its sum-of-distance
    """
    centroids = seed_centroids(corpus, k, rng, seeding_exponent)

    cycles = 0
    while True:
        assignments = assign_clusters(corpus, centroids)
        new_centroids = compute_centroids(corpus, assignments, centroids)
        shift = centroid_shift(centroids, new_centroids)
        cycles += 1

        logger.debug(f"Cycle {cycles}: mean centroid shift {shift:.6f}")

        if shift < convergence_threshold or cycles > max_iterations:
            break

        centroids = new_centroids

    return KMeansRun(
        assignments=tuple(assignments),
        sum_of_distance=sum_of_distance(corpus, centroids, assignments),
        iterations=cycles,
    )
