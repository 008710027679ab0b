"""
Operations on sparse term vectors.

Vectors are plain dicts mapping term -> weight; a missing term is zero. Every
function returns a new dict and never mutates its arguments.
"""

import math

from clusterbox.clustering.models import SparseVector

# Added to the dot product so vectors with no common terms get a large finite distance
DOT_PRODUCT_FLOOR = 0.0001
DISTANCE_SCALE = 1000.0


def add_vectors(*vectors: SparseVector) -> SparseVector:
    """Element-wise sum of any number of vectors."""
    result: SparseVector = {}
    for v in vectors:
        for term, weight in v.items():
            result[term] = result.get(term, 0.0) + weight
    return result


def scale_vector(v: SparseVector, n: float) -> SparseVector:
    """Multiply every weight by n."""
    return {term: weight * n for term, weight in v.items()}


def divide_vector(v: SparseVector, n: float) -> SparseVector:
    """
    Divide every weight by n.

    Raises:
        ZeroDivisionError: If n is zero; callers decide how to handle empty clusters
    """
    if n == 0:
        raise ZeroDivisionError("Cannot divide a vector by zero")
    return {term: weight / n for term, weight in v.items()}


def dot_product(v1: SparseVector, v2: SparseVector) -> float:
    """Sum of weight products over the terms both vectors contain."""
    # Scan the smaller vector. fsum keeps the result independent of dict order.
    if len(v2) < len(v1):
        v1, v2 = v2, v1
    return math.fsum(weight * v2[term] for term, weight in v1.items() if term in v2)


def vector_distance(v1: SparseVector, v2: SparseVector) -> float:
    """
    Inverse-similarity distance between two vectors.

    distance = 1000 / (0.0001 + dot(v1, v2))

    Not a metric: more shared weight means a smaller distance, and vectors with
    nothing in common are about 1e7 apart. Symmetric in its arguments.
    """
    return DISTANCE_SCALE / (DOT_PRODUCT_FLOOR + dot_product(v1, v2))
