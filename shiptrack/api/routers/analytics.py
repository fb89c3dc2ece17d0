"""Analytics endpoints. Each call recomputes from a fresh snapshot."""

from fastapi import APIRouter, Depends, Query

from shiptrack.analytics import aggregator
from shiptrack.analytics.aggregator import (
    CheckpointsReport,
    OverviewReport,
    RoutesReport,
    TimelineReport,
)
from shiptrack.api.dependencies import get_settings, get_store
from shiptrack.common.config_loader import Config
from shiptrack.common.timeutils import utc_now
from shiptrack.store import ShipmentRepository

router = APIRouter()


@router.get("/overview", response_model=OverviewReport)
def get_overview(
    store: ShipmentRepository = Depends(get_store),
    settings: Config = Depends(get_settings),
):
    """Status mix, location/supply counts, recent volume and average delivery time."""
    return aggregator.overview(
        store.list(),
        now=utc_now(),
        recent_window_days=settings.analytics.recent_window_days,
        max_delivery_hours=settings.analytics.max_delivery_hours,
    )


@router.get("/timeline", response_model=TimelineReport)
def get_timeline(
    start_date: str | None = Query(default=None, alias="startDate", description="Inclusive lower bound"),
    end_date: str | None = Query(default=None, alias="endDate", description="Inclusive upper bound"),
    store: ShipmentRepository = Depends(get_store),
):
    """Per-date totals split by status."""
    return aggregator.timeline(store.list(), start_date=start_date, end_date=end_date)


@router.get("/routes", response_model=RoutesReport)
def get_route_performance(
    store: ShipmentRepository = Depends(get_store),
    settings: Config = Depends(get_settings),
):
    """Volume and delivery performance per origin/destination pair."""
    return aggregator.route_performance(
        store.list(),
        max_delivery_hours=settings.analytics.max_delivery_hours,
    )


@router.get("/checkpoints", response_model=CheckpointsReport)
def get_checkpoint_activity(store: ShipmentRepository = Depends(get_store)):
    """Scan activity per checkpoint location."""
    return aggregator.checkpoint_activity(store.list())
