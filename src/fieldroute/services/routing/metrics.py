"""Distance and duration figures for a visiting order."""

from __future__ import annotations

from typing import Hashable, Optional, Sequence

from ...models.domain import Coordinate, Stop
from ..geospatial import distance_km
from .models import RouteLeg, RouteMetrics

AVERAGE_SPEED_KMH = 50.0
TRAFFIC_FACTOR = 1.2
REFINED_LABEL = "2-opt applied"
UNREFINED_LABEL = "nearest neighbor only"


def _round(value: float) -> float:
    return round(value, 2)


def compute_metrics(
    stops: Sequence[Stop],
    order: Sequence[Hashable],
    start_depot: Optional[Coordinate] = None,
    end_depot: Optional[Coordinate] = None,
    consider_traffic: bool = False,
    *,
    refined: bool = False,
) -> RouteMetrics:
    """Total distance, estimated duration and per-leg breakdown for ``order``.

    Travel time assumes a constant average speed; each stop adds its service
    duration. The traffic factor scales the whole duration, not single legs.
    Values are rounded to two decimals only in the returned figures.
    """
    by_id = {stop.id: stop for stop in stops}
    try:
        visits = [by_id[stop_id] for stop_id in order]
    except KeyError as exc:
        raise ValueError(f"Order references unknown stop id {exc.args[0]!r}.") from exc

    raw_legs: list[tuple[Optional[Hashable], Optional[Hashable], float]] = []
    if visits and start_depot is not None:
        raw_legs.append((None, visits[0].id, distance_km(start_depot, visits[0].coordinate)))
    for previous, current in zip(visits, visits[1:]):
        raw_legs.append((previous.id, current.id, distance_km(previous.coordinate, current.coordinate)))
    if visits and end_depot is not None:
        raw_legs.append((visits[-1].id, None, distance_km(visits[-1].coordinate, end_depot)))

    service_hours = {
        stop.id: (stop.service_duration_minutes or 0.0) / 60.0 for stop in visits
    }
    factor = TRAFFIC_FACTOR if consider_traffic else 1.0

    total_distance = 0.0
    elapsed = 0.0
    legs: list[RouteLeg] = []
    for from_id, to_id, leg_km in raw_legs:
        travel = leg_km / AVERAGE_SPEED_KMH
        if from_id is not None:
            elapsed += service_hours[from_id]
        elapsed += travel
        total_distance += leg_km
        legs.append(
            RouteLeg(
                from_id=from_id,
                to_id=to_id,
                distance_km=_round(leg_km),
                travel_hours=_round(travel * factor),
                arrival_offset_hours=_round(elapsed * factor),
            )
        )

    total_duration = sum(leg_km / AVERAGE_SPEED_KMH for _, _, leg_km in raw_legs)
    total_duration += sum(service_hours.values())
    total_duration *= factor

    return RouteMetrics(
        total_distance_km=_round(total_distance),
        estimated_duration_hours=_round(total_duration),
        label=REFINED_LABEL if refined else UNREFINED_LABEL,
        legs=legs,
    )
