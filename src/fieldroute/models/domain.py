"""Domain models for stops and coordinates."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Hashable, Optional


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude {self.latitude} is outside [-90, 90].")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude {self.longitude} is outside [-180, 180].")


@dataclass(frozen=True, slots=True)
class Stop:
    """One job to visit, already resolved to a coordinate."""

    id: Hashable
    coordinate: Coordinate
    preferred_time: Optional[datetime] = None
    service_duration_minutes: Optional[float] = None

    def __post_init__(self) -> None:
        if self.service_duration_minutes is not None and self.service_duration_minutes < 0:
            raise ValueError(f"Stop {self.id!r} has a negative service duration.")
