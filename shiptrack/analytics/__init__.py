"""Read-only analytics over shipment snapshots."""

from shiptrack.analytics.aggregator import (
    CheckpointActivity,
    CheckpointsReport,
    OverviewReport,
    RoutePerformance,
    RoutesReport,
    StatusBreakdown,
    TimelineEntry,
    TimelineReport,
    checkpoint_activity,
    delivery_hours,
    is_valid_delivery,
    overview,
    route_performance,
    timeline,
)

__all__ = [
    "CheckpointActivity",
    "CheckpointsReport",
    "OverviewReport",
    "RoutePerformance",
    "RoutesReport",
    "StatusBreakdown",
    "TimelineEntry",
    "TimelineReport",
    "checkpoint_activity",
    "delivery_hours",
    "is_valid_delivery",
    "overview",
    "route_performance",
    "timeline",
]
