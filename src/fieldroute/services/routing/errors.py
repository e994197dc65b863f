"""Routing engine exceptions."""

from __future__ import annotations


class RoutingError(Exception):
    """Base class for route optimization failures."""


class RouteValidationError(RoutingError, ValueError):
    """The request cannot be optimized as submitted."""


class TooManyStopsError(RouteValidationError):
    def __init__(self, count: int, limit: int) -> None:
        super().__init__(f"Route has {count} stops; at most {limit} can be optimized in one request.")
        self.count = count
        self.limit = limit
