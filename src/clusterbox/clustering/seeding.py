"""
K-Means++ initial centroid selection.

The first centroid is a uniformly random document. Each following centroid is
drawn from the remaining documents with probability proportional to their
distance from the nearest centroid chosen so far. Distances are used linearly
by default (canonical K-Means++ squares them); pass exponent=2.0 for the
canonical weighting.
"""

import logging
import random
from typing import Sequence

from clusterbox.clustering.models import SparseVector
from clusterbox.clustering.vector_algebra import vector_distance

logger = logging.getLogger(__name__)


def weighted_choice(weights: Sequence[float], rng: random.Random) -> int:
    """
    Pick an index with probability proportional to its weight.

    Draws uniformly from [0, total] and scans the running total, rounded to two
    decimals at each step, for the first entry that reaches the draw.

    If every weight is zero the pick is uniform. If rounding leaves the draw
    above the final running total, the last positive-weight index is returned.

    Raises:
        ValueError: If weights is empty
    """
    if not weights:
        raise ValueError("Cannot choose from an empty weight list")

    total = sum(weights)
    if total <= 0:
        logger.debug(f"All {len(weights)} seeding weights are zero, choosing uniformly")
        return rng.randrange(len(weights))

    draw = rng.uniform(0, total)
    running = 0.0
    for i, weight in enumerate(weights):
        running = round(running + weight, 2)
        if draw <= running:
            return i

    return max(i for i, weight in enumerate(weights) if weight > 0)


def nearest_centroid(element: SparseVector, centroids: Sequence[SparseVector]) -> tuple[int, float]:
    """
    Index of the closest centroid and the distance to it.

    Ties go to the lowest index.
    """
    best_index = 0
    best_distance = vector_distance(centroids[0], element)
    for i in range(1, len(centroids)):
        distance = vector_distance(centroids[i], element)
        if distance < best_distance:
            best_distance = distance
            best_index = i
    return best_index, best_distance


def seed_indices(
    corpus: Sequence[SparseVector],
    k: int,
    rng: random.Random,
    exponent: float = 1.0,
) -> list[int]:
    """
    Choose k distinct corpus documents as initial centroids.

    Args:
        corpus: Weighted document vectors
        k: Number of centroids
        rng: Random source
        exponent: Power applied to each candidate's nearest-centroid distance

    Returns:
        Corpus indexes of the chosen documents, in selection order

    Raises:
        ValueError: If k is not between 1 and the corpus size
    """
    if not 1 <= k <= len(corpus):
        raise ValueError(f"Cannot seed {k} centroids from {len(corpus)} documents")

    first = rng.randrange(len(corpus))
    chosen = [first]
    candidates = [i for i in range(len(corpus)) if i != first]

    while len(chosen) < k:
        centroids = [corpus[i] for i in chosen]
        weights = [nearest_centroid(corpus[c], centroids)[1] ** exponent for c in candidates]
        picked = candidates.pop(weighted_choice(weights, rng))
        chosen.append(picked)

    return chosen


def seed_centroids(
    corpus: Sequence[SparseVector],
    k: int,
    rng: random.Random,
    exponent: float = 1.0,
) -> list[SparseVector]:
    """Initial centroids as copies of the seeded documents."""
    return [dict(corpus[i]) for i in seed_indices(corpus, k, rng, exponent)]
