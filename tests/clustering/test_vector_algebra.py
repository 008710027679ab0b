"""
Tests for sparse vector operations and the inverse dot-product distance.
"""

import random

import pytest

from clusterbox.clustering.vector_algebra import (
    add_vectors,
    divide_vector,
    dot_product,
    scale_vector,
    vector_distance,
)

V = {"budget": 2.5, "review": 1.0, "q3": 0.4}

PAIRS = [
    ({"a": 2.0, "b": 3.0}, {"b": 4.0, "c": 1.0}),
    ({"a": 1.0}, {"a": 1.0, "b": 7.0, "c": 2.0, "d": 0.5}),
    ({"x": 3.0, "y": 1.5, "z": 0.2}, {"z": 9.0}),
    ({"a": 1.0}, {"b": 1.0}),
    ({}, {"a": 2.0}),
    # Same keys, different insertion order
    (
        {"t0": 0.1, "t1": 0.7, "t2": 1e-8, "t3": 3.3, "t4": 0.25, "t5": 1e6},
        {"t5": 0.3, "t4": 1.9, "t3": 0.01, "t2": 7e9, "t1": 0.2, "t0": 1e-5},
    ),
]


class TestIdentities:
    def test_add_empty_vector(self):
        assert add_vectors(V, {}) == V

    def test_add_many(self):
        assert add_vectors({"a": 1.0}, {"a": 2.0, "b": 1.0}, {"b": 0.5}) == {"a": 3.0, "b": 1.5}

    def test_scale_by_one(self):
        assert scale_vector(V, 1) == V

    def test_divide_sum_by_two(self):
        result = divide_vector(add_vectors(V, V), 2)
        assert result.keys() == V.keys()
        for term, weight in V.items():
            assert result[term] == pytest.approx(weight)

    def test_divide_by_zero_raises(self):
        with pytest.raises(ZeroDivisionError):
            divide_vector(V, 0)

    def test_inputs_are_not_mutated(self):
        original = dict(V)
        add_vectors(V, V)
        scale_vector(V, 3)
        divide_vector(V, 4)
        assert V == original


class TestDistance:
    def test_known_value(self):
        assert vector_distance({"a": 2.0, "b": 3.0}, {"b": 4.0, "c": 1.0}) == pytest.approx(1000 / 12.0001)

    def test_disjoint_vectors_are_far_but_finite(self):
        assert vector_distance({"a": 1.0}, {"b": 1.0}) == pytest.approx(1e7)

    @pytest.mark.parametrize("v1,v2", PAIRS)
    def test_symmetry(self, v1, v2):
        assert vector_distance(v1, v2) == vector_distance(v2, v1)
        assert dot_product(v1, v2) == dot_product(v2, v1)

    def test_self_distance_is_smallest(self):
        v = {"a": 3.0, "b": 1.0}
        others = [{"a": 1.0}, {"b": 2.0, "c": 5.0}, {"c": 1.0}]
        assert all(vector_distance(v, v) < vector_distance(v, other) for other in others)

    def test_symmetry_ignores_insertion_order(self):
        rng = random.Random(7)
        terms = [f"t{i}" for i in range(6)]
        for _ in range(200):
            v1 = {term: rng.uniform(0, 10) ** rng.choice([1, 3]) for term in terms}
            keys = list(terms)
            rng.shuffle(keys)
            v2 = {term: rng.uniform(0, 10) for term in keys}
            assert vector_distance(v1, v2) == vector_distance(v2, v1)
