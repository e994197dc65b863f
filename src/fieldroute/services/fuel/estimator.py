"""Fuel-cost estimate for an optimized route."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Hashable, List, Optional

from ...config import settings

if TYPE_CHECKING:
    from ..routing.models import RouteResult


@dataclass(slots=True)
class LegFuelCost:
    from_id: Optional[Hashable]
    to_id: Optional[Hashable]
    distance_km: float
    cost: float


@dataclass(slots=True)
class FuelEstimate:
    total_distance_km: float
    cost_per_km: float
    total_cost: float
    legs: List[LegFuelCost] = field(default_factory=list)


def estimate_fuel_cost(result: RouteResult, cost_per_km: float | None = None) -> FuelEstimate:
    rate = settings.fuel_cost_per_km if cost_per_km is None else cost_per_km
    if rate < 0:
        raise ValueError("Fuel cost per kilometre cannot be negative.")
    legs = [
        LegFuelCost(
            from_id=leg.from_id,
            to_id=leg.to_id,
            distance_km=leg.distance_km,
            cost=round(leg.distance_km * rate, 2),
        )
        for leg in result.legs
    ]
    return FuelEstimate(
        total_distance_km=result.total_distance_km,
        cost_per_km=rate,
        total_cost=round(result.total_distance_km * rate, 2),
        legs=legs,
    )
