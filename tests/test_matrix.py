import numpy as np
import pytest

from semsort.engine.codec import DEFAULT_CODEC, LocationCodec
from semsort.engine.matrix import (
    build_distance_matrix,
    cosine_distance,
    decode_locations,
    routing_matrix,
    similarity_matrix,
)


def _wire(indices, codec=DEFAULT_CODEC):
    return [codec.encode_wire(i) for i in indices]


def test_cosine_distance_is_zero_on_self_and_bounded():
    rng = np.random.default_rng(3)
    vecs = rng.normal(size=(20, 8))
    for a in vecs:
        assert cosine_distance(a, a) == pytest.approx(0.0, abs=1e-12)
        for b in vecs:
            d = cosine_distance(a, b)
            assert 0.0 <= d <= 1.0


def test_cosine_distance_clamps_opposite_vectors():
    a = np.array([1.0, 0.0])
    assert cosine_distance(a, -a) == 1.0
    assert cosine_distance(a, np.array([0.0, 1.0])) == pytest.approx(1.0)


def test_matrix_size_and_zero_diagonal():
    emb = np.eye(4)
    locs = _wire([2, 0, 3, 1])
    costs = build_distance_matrix(emb, locs)
    assert costs.shape == (16,)
    m = costs.reshape(4, 4)
    np.testing.assert_array_equal(np.diag(m), np.zeros(4))
    # orthogonal unit vectors -> distance 1 -> full scale
    assert m[0, 1] == 10000


def test_matrix_follows_location_order_not_item_order():
    rng = np.random.default_rng(0)
    emb = rng.normal(size=(5, 6))
    natural = build_distance_matrix(emb, _wire(range(5))).reshape(5, 5)

    perm = [3, 0, 4, 1, 2]
    shuffled = build_distance_matrix(emb, _wire(perm)).reshape(5, 5)
    for i, a in enumerate(perm):
        for j, b in enumerate(perm):
            assert shuffled[i, j] == natural[a, b]


def test_matrix_is_symmetric():
    rng = np.random.default_rng(1)
    emb = rng.normal(size=(6, 4))
    m = build_distance_matrix(emb, _wire([5, 1, 4, 0, 2, 3])).reshape(6, 6)
    np.testing.assert_array_equal(m, m.T)


def test_matrix_values_match_scaled_distance():
    emb = np.array([[1.0, 0.0], [1.0, 1.0]])
    m = build_distance_matrix(emb, _wire([0, 1])).reshape(2, 2)
    expected = int(np.floor((1.0 - 1.0 / np.sqrt(2.0)) * 10000 + 0.5))
    assert m[0, 1] == expected == m[1, 0]


def test_missing_embedding_gets_penalty_without_aborting():
    emb = np.eye(3)
    locs = _wire([0, 7, 1]) + [{"lat": 0, "lng": 5000}]
    m = build_distance_matrix(emb, locs, penalty=20000).reshape(4, 4)
    assert (m[1, :] == 20000).all()
    assert (m[:, 1] == 20000).all()
    assert (m[3, :] == 20000).all()
    assert m[0, 2] == 10000
    assert m[0, 0] == 0


def test_non_finite_location_gets_penalty_without_aborting():
    emb = np.eye(3)
    locs = [_wire([0])[0], {"lat": float("nan"), "lng": 0}, _wire([1])[0], {"lat": float("inf"), "lng": 0}]
    m = build_distance_matrix(emb, locs, penalty=20000).reshape(4, 4)
    assert (m[1, :] == 20000).all()
    assert (m[:, 3] == 20000).all()
    assert m[0, 2] == 10000
    assert m[2, 2] == 0


def test_decode_locations_marks_undecodable_entries():
    idx = decode_locations([{"lat": 0, "lng": 4}, {"bogus": 1}], DEFAULT_CODEC)
    assert idx.tolist() == [4, -1]


def test_custom_codec_and_scale():
    codec = LocationCodec(base=2, max_major=4)
    emb = np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 0.0]])
    m = build_distance_matrix(emb, _wire([2, 1, 0], codec), codec, scale=100).reshape(3, 3)
    assert m[0, 2] == 0
    assert m[0, 1] == 100


def test_zero_vector_is_far_from_others_but_not_itself():
    emb = np.array([[0.0, 0.0], [1.0, 0.0]])
    m = build_distance_matrix(emb, _wire([0, 1])).reshape(2, 2)
    assert m[0, 0] == 0
    assert m[0, 1] == 10000


def test_routing_matrix_reuses_costs_for_both_layers():
    out = routing_matrix(np.array([0, 5, 5, 0]), profile="car")
    assert out["matrix"] == "car"
    assert out["distances"] == [0, 5, 5, 0]
    assert out["travelTimes"] == out["distances"]
    assert out["travelTimes"] is not out["distances"]


def test_similarity_matrix_diagonal_and_range():
    rng = np.random.default_rng(5)
    sim = similarity_matrix(rng.normal(size=(4, 3)))
    np.testing.assert_allclose(np.diag(sim), 1.0)
    assert sim.min() >= -1.0 and sim.max() <= 1.0
    np.testing.assert_allclose(sim, sim.T)
