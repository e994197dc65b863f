"""Routing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.routing import OptimizeRouteRequest, OptimizeRouteResponse
from ...services.routing.errors import TooManyStopsError
from ...services.routing.service import optimize_job_route

router = APIRouter(prefix="/routes", tags=["routes"])


@router.post("/optimize", response_model=OptimizeRouteResponse, status_code=status.HTTP_200_OK)
def optimize(payload: OptimizeRouteRequest) -> OptimizeRouteResponse:
    if not payload.stops:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No jobs selected for optimization")
    try:
        return optimize_job_route(payload)
    except TooManyStopsError as exc:
        raise HTTPException(status_code=413, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error optimizing route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize route: {str(exc)}"
        ) from exc
