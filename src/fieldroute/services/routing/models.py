"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Hashable, List, Optional, Sequence

from ...models.domain import Coordinate, Stop

NEAREST_NEIGHBOR = "nearest_neighbor"
TWO_OPT = "2-opt"
ALGORITHMS = (NEAREST_NEIGHBOR, TWO_OPT)
OPTIMIZATION_TYPES = ("distance",)


class RefinementStage(str, Enum):
    NONE = "none"
    NEAREST_NEIGHBOR_ONLY = "nearest_neighbor_only"
    TWO_OPT = "two_opt"


@dataclass(slots=True)
class RouteRequest:
    stops: Optional[Sequence[Stop]]
    start_depot: Optional[Coordinate] = None
    end_depot: Optional[Coordinate] = None
    consider_traffic: bool = False
    optimization_type: str = "distance"
    algorithm: str = TWO_OPT
    consider_time_windows: bool = True


@dataclass(slots=True)
class RouteLeg:
    from_id: Optional[Hashable]
    to_id: Optional[Hashable]
    distance_km: float
    travel_hours: float
    arrival_offset_hours: float


@dataclass(slots=True)
class RouteMetrics:
    total_distance_km: float
    estimated_duration_hours: float
    label: str
    legs: List[RouteLeg] = field(default_factory=list)


@dataclass(slots=True)
class SequenceWriteReport:
    attempted: int = 0
    succeeded: int = 0
    failed_ids: List[Hashable] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failed_ids)

    @property
    def complete(self) -> bool:
        return self.succeeded == self.attempted


@dataclass(slots=True)
class RouteResult:
    order: List[Hashable]
    total_distance_km: float
    estimated_duration_hours: float
    refinement_applied: RefinementStage
    label: str
    legs: List[RouteLeg] = field(default_factory=list)
    persistence: Optional[SequenceWriteReport] = None
