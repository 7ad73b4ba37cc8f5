import pytest

from semsort.engine.codec import DEFAULT_CODEC
from semsort.engine.errors import EmptyTourError
from semsort.engine.solution import decode_solution


def _stops(indices):
    return [{"location": DEFAULT_CODEC.encode_wire(i)} for i in indices]


def test_decoder_keeps_first_visit_order():
    solution = {"tours": [{"stops": _stops([0, 3, 1, 2])}]}
    assert decode_solution(solution) == [0, 3, 1, 2]


def test_decoder_drops_revisits():
    solution = {"tours": [{"stops": _stops([0, 2, 1, 2, 0])}]}
    order = decode_solution(solution)
    assert order == [0, 2, 1]
    assert len(order) == len(set(order))


def test_decoder_handles_large_indices():
    solution = {"tours": [{"stops": _stops([0, 1500, 1001])}]}
    assert decode_solution(solution) == [0, 1500, 1001]


@pytest.mark.parametrize(
    "solution",
    [None, {}, {"tours": []}, {"tours": [{"stops": []}]}, {"tours": [{}]}],
)
def test_empty_tour_raises(solution):
    with pytest.raises(EmptyTourError):
        decode_solution(solution)


def test_decoder_skips_undecodable_stops():
    stops = _stops([0, 2]) + [{"location": {"lat": 0, "lng": 5000}}, {"location": None}] + _stops([1])
    solution = {"tours": [{"stops": stops}]}
    assert decode_solution(solution) == [0, 2, 1]


def test_tour_without_decodable_stops_is_empty():
    solution = {"tours": [{"stops": [{"location": {"lat": float("nan"), "lng": 0}}]}]}
    with pytest.raises(EmptyTourError):
        decode_solution(solution)
