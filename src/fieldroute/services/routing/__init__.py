"""Route optimization engine."""

from .constructor import construct_route
from .errors import RouteValidationError, RoutingError, TooManyStopsError
from .metrics import compute_metrics
from .models import RefinementStage, RouteRequest, RouteResult, SequenceWriteReport
from .refiner import path_distance_km, refine_route
from .service import optimize_route, persist_sequence

__all__ = [
    "construct_route",
    "refine_route",
    "path_distance_km",
    "compute_metrics",
    "optimize_route",
    "persist_sequence",
    "RouteRequest",
    "RouteResult",
    "RefinementStage",
    "SequenceWriteReport",
    "RoutingError",
    "RouteValidationError",
    "TooManyStopsError",
]
