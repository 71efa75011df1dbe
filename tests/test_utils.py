"""Tests for descriptor validation and nearest-match search."""

import math
from types import SimpleNamespace

import numpy as np
import pytest

from errors import InvalidDescriptor
from utils import (deserialize_descriptor, euclidean_distance, find_best_match,
                   match_descriptor, serialize_descriptor, to_descriptor)


def fake_candidate(name, vec):
    return SimpleNamespace(name=name, descriptor=np.asarray(vec, dtype=float))


def vec_at(index, value=1.0):
    v = [0.0] * 128
    v[index] = value
    return v


class TestToDescriptor:

    def test_accepts_128_floats(self):
        vec = to_descriptor([0.5] * 128)
        assert vec.shape == (128,)
        assert vec.dtype == np.float64

    @pytest.mark.parametrize("bad", [
        None,
        [],
        [0.1] * 127,
        [0.1] * 129,
        [[0.1] * 128],
        "0.1," * 128,
        {"a": 1},
        [0.1] * 127 + ["x"],
        [0.1] * 127 + [True],
        [0.1] * 127 + [float("nan")],
        [0.1] * 127 + [float("inf")],
    ])
    def test_rejects_malformed(self, bad):
        with pytest.raises(InvalidDescriptor):
            to_descriptor(bad)

    @pytest.mark.parametrize("text", ["{}", '{"a": 1}', '"abc"', "not json", "[1, 2]", None])
    def test_deserialize_rejects_malformed_text(self, text):
        with pytest.raises(InvalidDescriptor):
            deserialize_descriptor(text)

    def test_serialized_descriptor_is_read_back(self):
        vec = vec_at(5, 0.25)
        assert np.allclose(deserialize_descriptor(serialize_descriptor(vec)), vec)


class TestDistance:

    def test_identical_vectors_have_zero_distance(self):
        assert euclidean_distance(vec_at(0), vec_at(0)) == 0.0

    def test_distance_is_non_negative_and_symmetric(self):
        rng = np.random.default_rng(7)
        for _ in range(20):
            a = rng.normal(size=128)
            b = rng.normal(size=128)
            d = euclidean_distance(a, b)
            assert d >= 0
            assert d == pytest.approx(euclidean_distance(b, a))

    def test_known_distance(self):
        assert euclidean_distance(vec_at(0), vec_at(1)) == pytest.approx(math.sqrt(2))


class TestFindBestMatch:

    def test_empty_candidates(self):
        best, dist = find_best_match(vec_at(0), [])
        assert best is None
        assert dist == math.inf

    def test_picks_nearest(self):
        far = fake_candidate("far", vec_at(1))
        near = fake_candidate("near", vec_at(0, 0.9))
        best, dist = find_best_match(vec_at(0), [far, near])
        assert best is near
        assert dist == pytest.approx(0.1)

    def test_first_candidate_wins_ties(self):
        first = fake_candidate("first", vec_at(1))
        second = fake_candidate("second", vec_at(2))
        best, _ = find_best_match(vec_at(0), [first, second])
        assert best is first

    def test_rejects_wrong_length_query(self):
        with pytest.raises(InvalidDescriptor):
            find_best_match([0.0] * 64, [fake_candidate("a", vec_at(0))])


class TestMatchDescriptor:

    def test_within_threshold(self):
        c = fake_candidate("x", vec_at(0))
        best, dist = match_descriptor(vec_at(0), [c], threshold=0.6)
        assert best is c
        assert dist == 0.0

    def test_threshold_is_inclusive(self):
        c = fake_candidate("x", vec_at(0, 0.5))
        best, dist = match_descriptor(vec_at(0), [c], threshold=0.5)
        assert best is c
        assert dist == pytest.approx(0.5)

    def test_beyond_threshold_is_no_match(self):
        c = fake_candidate("x", vec_at(1))
        best, dist = match_descriptor(vec_at(0), [c], threshold=0.6)
        assert best is None
        assert dist == pytest.approx(math.sqrt(2))
