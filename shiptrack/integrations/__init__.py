"""External service adapters."""

from shiptrack.integrations.route_estimator import (
    GeocodeResult,
    RouteEstimator,
    RouteSummary,
    TravelEstimate,
    format_distance,
    format_duration,
)

__all__ = [
    "GeocodeResult",
    "RouteEstimator",
    "RouteSummary",
    "TravelEstimate",
    "format_distance",
    "format_duration",
]
