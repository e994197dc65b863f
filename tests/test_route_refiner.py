from itertools import permutations

import pytest

from src.fieldroute.models.domain import Coordinate, Stop
from src.fieldroute.services.routing.constructor import construct_route
from src.fieldroute.services.routing.refiner import path_distance_km, refine_route


def _stop(sid: str, lat: float, lon: float) -> Stop:
    return Stop(id=sid, coordinate=Coordinate(lat, lon))


# Corners of a one-degree square; the east-west sides shrink with latitude.
SQUARE = [
    _stop("A", 45.0, 7.0),
    _stop("B", 45.0, 8.0),
    _stop("C", 46.0, 8.0),
    _stop("D", 46.0, 7.0),
]

SCATTERED = [
    _stop("S1", 40.000, -75.000),
    _stop("S2", 40.120, -74.850),
    _stop("S3", 39.910, -74.930),
    _stop("S4", 40.050, -75.210),
    _stop("S5", 40.200, -75.050),
    _stop("S6", 39.980, -75.120),
    _stop("S7", 40.150, -74.940),
    _stop("S8", 39.870, -75.060),
]


def _best_path_from_first(stops, start_id="A", end_depot=None):
    others = [stop.id for stop in stops if stop.id != start_id]
    return min(
        path_distance_km(stops, [start_id, *rest], end_depot=end_depot)
        for rest in permutations(others)
    )


def test_crossing_square_is_untangled():
    crossing = ["A", "C", "B", "D"]

    refined = refine_route(SQUARE, crossing)

    assert refined == ["A", "B", "C", "D"]
    assert path_distance_km(SQUARE, refined) < path_distance_km(SQUARE, crossing)
    assert path_distance_km(SQUARE, refined) == pytest.approx(_best_path_from_first(SQUARE))


def test_square_perimeter_from_nearest_neighbour():
    seed = construct_route(SQUARE)

    refined = refine_route(SQUARE, seed)

    assert path_distance_km(SQUARE, refined) <= path_distance_km(SQUARE, seed)
    assert path_distance_km(SQUARE, refined) == pytest.approx(_best_path_from_first(SQUARE))


def test_end_depot_leg_is_part_of_the_objective():
    end_depot = Coordinate(44.5, 8.0)

    assert refine_route(SQUARE, ["A", "B", "C", "D"]) == ["A", "B", "C", "D"]
    assert refine_route(SQUARE, ["A", "B", "C", "D"], end_depot=end_depot) == ["A", "D", "C", "B"]


def test_refinement_never_lengthens_the_route():
    depot = Coordinate(40.05, -75.0)
    for start in (None, depot):
        seed = construct_route(SCATTERED, start)
        refined = refine_route(SCATTERED, seed, start)

        assert path_distance_km(SCATTERED, refined, start) <= path_distance_km(SCATTERED, seed, start)


def test_refined_order_is_a_fixed_point():
    seed = ["S1", "S5", "S3", "S8", "S2", "S6", "S4", "S7"]

    once = refine_route(SCATTERED, seed)
    twice = refine_route(SCATTERED, once)

    assert twice == once


def test_refined_order_is_a_permutation():
    seed = [stop.id for stop in reversed(SCATTERED)]

    refined = refine_route(SCATTERED, seed, Coordinate(40.0, -75.3), Coordinate(39.9, -74.8))

    assert sorted(refined) == sorted(seed)
    assert len(set(refined)) == len(seed)


def test_first_stop_keeps_its_position():
    seed = ["S4", "S2", "S8", "S1", "S7", "S3", "S5", "S6"]

    assert refine_route(SCATTERED, seed)[0] == "S4"


def test_input_order_is_not_mutated():
    seed = ["A", "C", "B", "D"]

    refine_route(SQUARE, seed)

    assert seed == ["A", "C", "B", "D"]


def test_short_orders_are_handled():
    two = SQUARE[:2]
    three = [_stop("A", 0.0, 0.0), _stop("B", 0.0, 2.0), _stop("C", 0.0, 1.0)]

    assert refine_route(two, ["A", "B"]) == ["A", "B"]
    assert refine_route(three, ["A", "B", "C"]) == ["A", "C", "B"]


def test_unknown_stop_id_is_rejected():
    with pytest.raises(ValueError):
        refine_route(SQUARE, ["A", "B", "C", "Z"])
