"""2-opt local search over an existing visiting order.

Every candidate in a pass is produced by reversing one contiguous segment of
the order the pass started from. The best strictly shorter candidate of the
pass becomes the starting order of the next pass; a pass without any strictly
shorter candidate ends the search at a 2-opt local optimum.

Each pass evaluates O(n^2) candidates at O(n) each, so a pass costs O(n^3)
and a full search O(n^4) in the worst case. Callers bound the stop count
instead of capping the number of passes, which would break the guarantee
that the returned order is never longer than the input.
"""

from __future__ import annotations

import logging
from typing import Hashable, Optional, Sequence

from ...models.domain import Coordinate, Stop
from ..geospatial import distance_km

logger = logging.getLogger(__name__)


class _DistanceTable:
    """Pairwise distances for one request, indexed by stop id."""

    def __init__(
        self,
        stops: Sequence[Stop],
        start_depot: Optional[Coordinate],
        end_depot: Optional[Coordinate],
    ) -> None:
        self.index = {stop.id: position for position, stop in enumerate(stops)}
        coordinates = [stop.coordinate for stop in stops]
        self.pairs = [[distance_km(a, b) for b in coordinates] for a in coordinates]
        self.from_start = [distance_km(start_depot, c) for c in coordinates] if start_depot is not None else None
        self.to_end = [distance_km(c, end_depot) for c in coordinates] if end_depot is not None else None

    def positions(self, order: Sequence[Hashable]) -> list[int]:
        try:
            return [self.index[stop_id] for stop_id in order]
        except KeyError as exc:
            raise ValueError(f"Order references unknown stop id {exc.args[0]!r}.") from exc

    def path_length(self, path: Sequence[int]) -> float:
        if not path:
            return 0.0
        total = 0.0
        if self.from_start is not None:
            total += self.from_start[path[0]]
        for previous, current in zip(path, path[1:]):
            total += self.pairs[previous][current]
        if self.to_end is not None:
            total += self.to_end[path[-1]]
        return total


def path_distance_km(
    stops: Sequence[Stop],
    order: Sequence[Hashable],
    start_depot: Optional[Coordinate] = None,
    end_depot: Optional[Coordinate] = None,
) -> float:
    """Unrounded length of ``order`` including any depot legs."""

    table = _DistanceTable(stops, start_depot, end_depot)
    return table.path_length(table.positions(order))


def refine_route(
    stops: Sequence[Stop],
    order: Sequence[Hashable],
    start_depot: Optional[Coordinate] = None,
    end_depot: Optional[Coordinate] = None,
) -> list[Hashable]:
    """Improve ``order`` with 2-opt segment reversals until no reversal helps."""

    table = _DistanceTable(stops, start_depot, end_depot)
    route = table.positions(order)
    best_distance = table.path_length(route)
    size = len(route)
    passes = 0

    while True:
        passes += 1
        best_route = None
        for i in range(size - 1):
            for j in range(i + 2, size):
                candidate = route[: i + 1] + route[i + 1 : j + 1][::-1] + route[j + 1 :]
                candidate_distance = table.path_length(candidate)
                if candidate_distance < best_distance:
                    best_distance = candidate_distance
                    best_route = candidate
        if best_route is None:
            break
        route = best_route

    logger.debug("2-opt finished after %d passes at %.3f km", passes, best_distance)
    return [stops[position].id for position in route]
