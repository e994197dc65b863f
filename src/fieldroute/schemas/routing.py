"""Routing request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

StopId = Union[int, str]


class LocationModel(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class StopModel(BaseModel):
    id: StopId
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    preferred_time: Optional[datetime] = None
    service_duration_minutes: Optional[float] = Field(default=None, ge=0)


class OptimizeRouteRequest(BaseModel):
    stops: List[StopModel] = Field(..., description="Jobs to sequence. Jobs without coordinates are skipped.")
    start_location: Optional[LocationModel] = None
    end_location: Optional[LocationModel] = None
    consider_traffic: bool = True
    optimization_type: Literal["distance"] = "distance"
    algorithm: Literal["nearest_neighbor", "2-opt"] = "2-opt"
    consider_time_windows: bool = True
    persist_sequence: bool = Field(default=True, description="Store each job's position in the sequence store.")
    persist_outputs: bool = Field(default=False, description="Write summary.json and sequence.csv under the data root.")
    include_fuel_estimate: bool = False
    fuel_cost_per_km: Optional[float] = Field(default=None, ge=0)


class RouteLegModel(BaseModel):
    from_id: Optional[StopId]
    to_id: Optional[StopId]
    distance_km: float
    travel_hours: float
    arrival_offset_hours: float


class PersistenceModel(BaseModel):
    attempted: int
    succeeded: int
    failed: int
    failed_ids: List[StopId]


class FuelEstimateModel(BaseModel):
    total_distance_km: float
    cost_per_km: float
    total_cost: float


class OptimizeRouteResponse(BaseModel):
    optimized_order: List[StopId]
    total_jobs: int
    dropped_stops: int = 0
    total_distance_km: float
    estimated_duration_hours: float
    optimization_type: str
    improvements: str
    refinement_applied: str
    legs: List[RouteLegModel]
    persistence: Optional[PersistenceModel] = None
    fuel_estimate: Optional[FuelEstimateModel] = None
    output_directory: Optional[str] = None
