"""Routing orchestration service."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Hashable, Optional, Sequence

from ...config import settings
from ...models.domain import Coordinate, Stop
from ...persistence.filesystem import FileStorage
from ...persistence.sequence_store import FileSequenceStore, SequenceStore
from ...schemas.routing import (
    FuelEstimateModel,
    LocationModel,
    OptimizeRouteRequest,
    OptimizeRouteResponse,
    PersistenceModel,
    RouteLegModel,
)
from ..fuel.estimator import estimate_fuel_cost
from ..outputs.routing_formatter import route_result_to_csv, route_result_to_json
from .constructor import construct_route
from .errors import RouteValidationError, TooManyStopsError
from .metrics import compute_metrics
from .models import (
    ALGORITHMS,
    OPTIMIZATION_TYPES,
    TWO_OPT,
    RefinementStage,
    RouteRequest,
    RouteResult,
    SequenceWriteReport,
)
from .refiner import refine_route

MIN_STOPS_FOR_OPTIMIZATION = 2
REFINEMENT_THRESHOLD = 3


def _validate(request: RouteRequest, max_stops: Optional[int]) -> list[Stop]:
    if request.stops is None:
        raise RouteValidationError("Request does not contain any stops.")
    if request.optimization_type not in OPTIMIZATION_TYPES:
        raise RouteValidationError(f"Unsupported optimization type '{request.optimization_type}'.")
    if request.algorithm not in ALGORITHMS:
        raise RouteValidationError(f"Unsupported algorithm '{request.algorithm}'.")

    stops = list(request.stops)
    # Stored positions are keyed by the id's text, so 1 and "1" are the same job.
    seen: dict[str, Hashable] = {}
    for stop in stops:
        if not isinstance(stop, Stop):
            raise RouteValidationError(f"Expected Stop instances, got {type(stop).__name__}.")
        key = str(stop.id)
        if key in seen:
            if seen[key] == stop.id:
                raise RouteValidationError(f"Duplicate stop id {stop.id!r} in request.")
            raise RouteValidationError(f"Stop ids {seen[key]!r} and {stop.id!r} refer to the same job.")
        seen[key] = stop.id

    if max_stops is not None and len(stops) > max_stops:
        raise TooManyStopsError(len(stops), max_stops)
    return stops


def persist_sequence(order: Sequence[Hashable], store: SequenceStore) -> SequenceWriteReport:
    """Write each stop's 1-based position, one independent write per stop.

    A failing write is logged and recorded; later writes still run and earlier
    ones are kept.
    """
    report = SequenceWriteReport()
    for position, stop_id in enumerate(order, start=1):
        report.attempted += 1
        try:
            store.set_sequence(stop_id, position)
        except Exception:
            logging.exception(f"Failed to store sequence {position} for stop {stop_id!r}")
            report.failed_ids.append(stop_id)
        else:
            report.succeeded += 1

    if report.failed_ids:
        logging.warning(
            f"Stored {report.succeeded} of {report.attempted} sequence positions; "
            f"failed for {report.failed_ids}"
        )
    return report


def optimize_route(
    request: RouteRequest,
    *,
    sequence_store: Optional[SequenceStore] = None,
    now: Optional[datetime] = None,
    max_stops: Optional[int] = None,
) -> RouteResult:
    """Order a technician's stops for the day and compute route metrics.

    Nearest-neighbour construction always runs; 2-opt refinement runs when the
    2-opt algorithm is requested and there are more than three stops. With
    fewer than two stops the input order is returned as is and nothing is
    persisted. When ``sequence_store`` is given, every stop's position is
    written to it and the outcome is attached as ``result.persistence``.
    """
    limit = max_stops if max_stops is not None else settings.max_stops_per_route
    stops = _validate(request, limit)

    if len(stops) < MIN_STOPS_FOR_OPTIMIZATION:
        logging.warning(f"Only {len(stops)} stop(s) supplied; returning input order unchanged")
        order = [stop.id for stop in stops]
        # Nothing is visited on a degenerate route; only depot legs are travelled.
        unvisited = [replace(stop, service_duration_minutes=None) for stop in stops]
        metrics = compute_metrics(
            unvisited, order, request.start_depot, request.end_depot, request.consider_traffic
        )
        return RouteResult(
            order=order,
            total_distance_km=metrics.total_distance_km,
            estimated_duration_hours=metrics.estimated_duration_hours,
            refinement_applied=RefinementStage.NONE,
            label=metrics.label,
            legs=metrics.legs,
            persistence=SequenceWriteReport() if sequence_store is not None else None,
        )

    order = construct_route(
        stops,
        request.start_depot,
        now=now,
        consider_time_windows=request.consider_time_windows,
    )

    refined = request.algorithm == TWO_OPT and len(stops) > REFINEMENT_THRESHOLD
    if refined:
        order = refine_route(stops, order, request.start_depot, request.end_depot)

    metrics = compute_metrics(
        stops,
        order,
        request.start_depot,
        request.end_depot,
        request.consider_traffic,
        refined=refined,
    )
    stage = RefinementStage.TWO_OPT if refined else RefinementStage.NEAREST_NEIGHBOR_ONLY
    logging.info(
        f"Optimized {len(order)} stops ({stage.value}): "
        f"{metrics.total_distance_km} km, {metrics.estimated_duration_hours} h"
    )

    result = RouteResult(
        order=order,
        total_distance_km=metrics.total_distance_km,
        estimated_duration_hours=metrics.estimated_duration_hours,
        refinement_applied=stage,
        label=metrics.label,
        legs=metrics.legs,
    )
    if sequence_store is not None:
        result.persistence = persist_sequence(order, sequence_store)
    return result


def _to_coordinate(location: LocationModel | None) -> Coordinate | None:
    if location is None:
        return None
    return Coordinate(latitude=location.latitude, longitude=location.longitude)


def _stops_from_payload(payload: OptimizeRouteRequest) -> tuple[list[Stop], int]:
    stops: list[Stop] = []
    dropped = 0
    for item in payload.stops:
        if item.latitude is None or item.longitude is None:
            dropped += 1
            continue
        stops.append(
            Stop(
                id=item.id,
                coordinate=Coordinate(latitude=item.latitude, longitude=item.longitude),
                preferred_time=item.preferred_time,
                service_duration_minutes=item.service_duration_minutes,
            )
        )
    return stops, dropped


def optimize_job_route(payload: OptimizeRouteRequest) -> OptimizeRouteResponse:
    """Run an optimization for an HTTP request and shape the response."""

    stops, dropped = _stops_from_payload(payload)
    if dropped:
        logging.info(f"Skipped {dropped} job(s) without coordinates")

    request = RouteRequest(
        stops=stops,
        start_depot=_to_coordinate(payload.start_location),
        end_depot=_to_coordinate(payload.end_location),
        consider_traffic=payload.consider_traffic,
        optimization_type=payload.optimization_type,
        algorithm=payload.algorithm,
        consider_time_windows=payload.consider_time_windows,
    )
    store = FileSequenceStore() if payload.persist_sequence else None
    result = optimize_route(request, sequence_store=store)

    output_directory = None
    if payload.persist_outputs:
        try:
            storage = FileStorage()
            run_dir = storage.make_run_directory(prefix="route")
            storage.write_json(run_dir / "summary.json", route_result_to_json(result))
            storage.write_csv(run_dir / "sequence.csv", route_result_to_csv(result))
            output_directory = str(run_dir)
        except OSError as exc:
            # The optimized order is still valid without the saved copy.
            logging.error(f"Failed to write route outputs: {exc}")

    fuel_estimate = None
    if payload.include_fuel_estimate:
        estimate = estimate_fuel_cost(result, payload.fuel_cost_per_km)
        fuel_estimate = FuelEstimateModel(
            total_distance_km=estimate.total_distance_km,
            cost_per_km=estimate.cost_per_km,
            total_cost=estimate.total_cost,
        )

    persistence = None
    if result.persistence is not None:
        persistence = PersistenceModel(
            attempted=result.persistence.attempted,
            succeeded=result.persistence.succeeded,
            failed=result.persistence.failed,
            failed_ids=list(result.persistence.failed_ids),
        )

    return OptimizeRouteResponse(
        optimized_order=list(result.order),
        total_jobs=len(result.order),
        dropped_stops=dropped,
        total_distance_km=result.total_distance_km,
        estimated_duration_hours=result.estimated_duration_hours,
        optimization_type=payload.optimization_type,
        improvements=result.label,
        refinement_applied=result.refinement_applied.value,
        legs=[
            RouteLegModel(
                from_id=leg.from_id,
                to_id=leg.to_id,
                distance_km=leg.distance_km,
                travel_hours=leg.travel_hours,
                arrival_offset_hours=leg.arrival_offset_hours,
            )
            for leg in result.legs
        ],
        persistence=persistence,
        fuel_estimate=fuel_estimate,
        output_directory=output_directory,
    )
