"""Nearest-neighbour construction of an initial visiting order."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Hashable, Optional, Sequence

from ...models.domain import Coordinate, Stop
from ..geospatial import distance_km

logger = logging.getLogger(__name__)

TIME_PENALTY_PER_HOUR = 0.1


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def time_penalty(stop: Stop, now: datetime) -> float:
    """Score added for a stop whose preferred time is far from ``now``."""

    if stop.preferred_time is None:
        return 0.0
    hours = abs((_as_utc(stop.preferred_time) - _as_utc(now)).total_seconds()) / 3600.0
    return hours * TIME_PENALTY_PER_HOUR


def construct_route(
    stops: Sequence[Stop],
    start_depot: Optional[Coordinate] = None,
    *,
    now: Optional[datetime] = None,
    consider_time_windows: bool = True,
) -> list[Hashable]:
    """Build a visiting order by repeatedly taking the best-scoring unvisited stop.

    The search starts at ``start_depot`` when given, otherwise at the coordinate
    of the first stop in ``stops``. A stop's score is its distance from the
    current location plus a small penalty per hour between its preferred time
    and ``now``. On equal scores the stop that comes first in ``stops`` wins.
    """
    if not stops:
        return []

    now = now or datetime.now(timezone.utc)
    penalties = [time_penalty(stop, now) if consider_time_windows else 0.0 for stop in stops]
    unvisited = list(range(len(stops)))
    current = start_depot if start_depot is not None else stops[0].coordinate
    order: list[Hashable] = []

    while unvisited:
        best_position = 0
        best_score = float("inf")
        for position, index in enumerate(unvisited):
            score = distance_km(current, stops[index].coordinate) + penalties[index]
            if score < best_score:
                best_score = score
                best_position = position
        chosen = unvisited.pop(best_position)
        order.append(stops[chosen].id)
        current = stops[chosen].coordinate

    logger.debug("Constructed nearest-neighbour order for %d stops", len(order))
    return order
