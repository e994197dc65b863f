import pytest

from src.fieldroute.models.domain import Coordinate, Stop
from src.fieldroute.persistence.sequence_store import InMemorySequenceStore
from src.fieldroute.services.fuel.estimator import estimate_fuel_cost
from src.fieldroute.services.outputs.routing_formatter import route_result_to_csv, route_result_to_json
from src.fieldroute.services.routing import RouteRequest, optimize_route


def _result():
    stops = [
        Stop(id="J1", coordinate=Coordinate(0.0, 0.0)),
        Stop(id="J2", coordinate=Coordinate(0.0, 1.0)),
        Stop(id="J3", coordinate=Coordinate(0.0, 2.0)),
    ]
    request = RouteRequest(stops=stops, start_depot=Coordinate(0.0, -1.0))
    return optimize_route(request, sequence_store=InMemorySequenceStore())


def test_route_result_to_json():
    payload = route_result_to_json(_result())

    assert payload["order"] == ["J1", "J2", "J3"]
    assert payload["refinement_applied"] == "nearest_neighbor_only"
    assert payload["label"] == "nearest neighbor only"
    assert payload["legs"][0]["from_id"] is None
    assert payload["persistence"] == {"attempted": 3, "succeeded": 3, "failed": 0, "failed_ids": []}


def test_route_result_to_csv():
    lines = route_result_to_csv(_result()).splitlines()

    assert lines[0] == "sequence,stop_id,distance_from_prev_km,arrival_offset_hours"
    assert [line.split(",")[:2] for line in lines[1:]] == [["1", "J1"], ["2", "J2"], ["3", "J3"]]


def test_fuel_estimate_uses_leg_distances():
    result = _result()

    estimate = estimate_fuel_cost(result, cost_per_km=0.5)

    assert estimate.total_distance_km == result.total_distance_km
    assert estimate.total_cost == round(result.total_distance_km * 0.5, 2)
    assert [leg.to_id for leg in estimate.legs] == ["J1", "J2", "J3"]
    assert estimate.legs[0].cost == round(result.legs[0].distance_km * 0.5, 2)


def test_fuel_estimate_defaults_to_configured_rate(monkeypatch: pytest.MonkeyPatch):
    from src.fieldroute.config import settings

    monkeypatch.setattr(settings, "fuel_cost_per_km", 1.0)

    estimate = estimate_fuel_cost(_result())

    assert estimate.cost_per_km == 1.0
    assert estimate.total_cost == estimate.total_distance_km


def test_fuel_estimate_rejects_negative_rate():
    with pytest.raises(ValueError):
        estimate_fuel_cost(_result(), cost_per_km=-0.1)
