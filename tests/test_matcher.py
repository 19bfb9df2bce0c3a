import numpy as np
import pytest

from src_edge_matching.alignment import AlignmentParameters, FeatureSet, HammingMatcher, Match


def _hamming(a, b):
    return int(np.count_nonzero(np.unpackbits(np.bitwise_xor(a, b))))


def _descriptor_with_bits_set(count, width=32):
    bits = np.zeros(width * 8, dtype=np.uint8)
    bits[:count] = 1
    return np.packbits(bits)


def test_cross_check_returns_mutual_nearest_neighbours():
    rng = np.random.default_rng(5)
    query = rng.integers(0, 256, size=(12, 32), dtype=np.uint8)
    train = rng.integers(0, 256, size=(15, 32), dtype=np.uint8)
    train[:6] = query[:6]

    matches = HammingMatcher().cross_check_match(query, train)

    assert matches
    for m in matches:
        q_dist = [_hamming(query[m.query_idx], t) for t in train]
        t_dist = [_hamming(q, train[m.train_idx]) for q in query]
        assert m.distance == min(q_dist) == min(t_dist)
        assert m.distance == _hamming(query[m.query_idx], train[m.train_idx])
    assert {(m.query_idx, m.train_idx) for m in matches} >= {(i, i) for i in range(6)}


def test_cross_check_keeps_query_order():
    rng = np.random.default_rng(8)
    query = rng.integers(0, 256, size=(10, 32), dtype=np.uint8)
    train = query[::-1].copy()

    matches = HammingMatcher().cross_check_match(query, train)

    assert [m.query_idx for m in matches] == list(range(10))
    assert [m.train_idx for m in matches] == list(range(9, -1, -1))


@pytest.mark.parametrize("differing_bits, accepted", [(99, 1), (100, 0)])
def test_distance_threshold_is_strict(differing_bits, accepted, feature_set_factory):
    natural = feature_set_factory([[1, 1]], _descriptor_with_bits_set(0)[None, :])
    rendered = feature_set_factory([[2, 2]], _descriptor_with_bits_set(differing_bits)[None, :])

    matches = HammingMatcher().match(natural, rendered)

    assert len(matches) == accepted


def test_cap_applies_in_insertion_order_by_default():
    matcher = HammingMatcher(AlignmentParameters(max_matches=2))
    matches = [Match(0, 0, 50.0), Match(1, 1, 10.0), Match(2, 2, 30.0), Match(3, 3, 120.0)]

    selected = matcher.select_matches(matches)

    assert [m.query_idx for m in selected] == [0, 1]


def test_cap_applies_after_sorting_when_requested():
    matcher = HammingMatcher(AlignmentParameters(max_matches=2, sort_matches=True))
    matches = [Match(0, 0, 50.0), Match(1, 1, 10.0), Match(2, 2, 30.0), Match(3, 3, 120.0)]

    selected = matcher.select_matches(matches)

    assert [m.distance for m in selected] == [10.0, 30.0]


def test_default_cap_is_one_hundred():
    matches = [Match(i, i, 1.0) for i in range(150)]

    assert len(HammingMatcher().select_matches(matches)) == 100


def test_empty_feature_sets_give_no_matches():
    matcher = HammingMatcher()
    empty = FeatureSet.empty(61)
    rng = np.random.default_rng(0)
    some = FeatureSet(keypoints=(), descriptors=rng.integers(0, 256, size=(3, 61), dtype=np.uint8))

    assert matcher.match(empty, empty) == []
    assert matcher.cross_check_match(some.descriptors, empty.descriptors) == []


def test_descriptor_width_mismatch_raises():
    with pytest.raises(ValueError):
        HammingMatcher().cross_check_match(np.zeros((2, 32), np.uint8), np.zeros((2, 61), np.uint8))


def test_correspondences_follow_match_indices(feature_set_factory):
    descriptors = np.zeros((3, 32), dtype=np.uint8)
    natural = feature_set_factory([[1, 2], [3, 4], [5, 6]], descriptors)
    rendered = feature_set_factory([[10, 20], [30, 40], [50, 60]], descriptors)
    matches = [Match(2, 0, 0.0), Match(0, 1, 0.0)]

    natural_points, rendered_points = HammingMatcher.correspondences(matches, natural, rendered)

    np.testing.assert_allclose(natural_points, [[5, 6], [1, 2]])
    np.testing.assert_allclose(rendered_points, [[10, 20], [30, 40]])


def test_correspondences_of_no_matches_are_empty():
    natural_points, rendered_points = HammingMatcher.correspondences([], FeatureSet.empty(), FeatureSet.empty())

    assert natural_points.shape == (0, 2)
    assert rendered_points.shape == (0, 2)
