"""Serializers for routing outputs."""

from __future__ import annotations

import csv
import io
from dataclasses import asdict
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..routing.models import RouteResult


def route_result_to_json(result: RouteResult) -> dict:
    persistence = None
    if result.persistence is not None:
        persistence = {
            "attempted": result.persistence.attempted,
            "succeeded": result.persistence.succeeded,
            "failed": result.persistence.failed,
            "failed_ids": list(result.persistence.failed_ids),
        }
    return {
        "order": list(result.order),
        "total_distance_km": result.total_distance_km,
        "estimated_duration_hours": result.estimated_duration_hours,
        "refinement_applied": result.refinement_applied.value,
        "label": result.label,
        "legs": [asdict(leg) for leg in result.legs],
        "persistence": persistence,
    }


def route_result_to_csv(result: RouteResult) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "sequence",
        "stop_id",
        "distance_from_prev_km",
        "arrival_offset_hours",
    ]
    arrivals = {leg.to_id: leg for leg in result.legs if leg.to_id is not None}
    writer = csv.DictWriter(buffer, fieldnames=fieldnames, lineterminator="\n")
    writer.writeheader()
    for sequence, stop_id in enumerate(result.order, start=1):
        leg = arrivals.get(stop_id)
        writer.writerow(
            {
                "sequence": sequence,
                "stop_id": stop_id,
                "distance_from_prev_km": leg.distance_km if leg else 0.0,
                "arrival_offset_hours": leg.arrival_offset_hours if leg else 0.0,
            }
        )
    return buffer.getvalue()
