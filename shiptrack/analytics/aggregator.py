"""
Operational analytics over a snapshot of the shipment collection.

All functions are pure: they take the full list of shipments plus the
reference instant and recompute everything on each call.
"""

from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Sequence

from pydantic import BaseModel, Field

from shiptrack.common.errors import ValidationError
from shiptrack.common.timeutils import format_timestamp, parse_timestamp
from shiptrack.models.shipment import Shipment, ShipmentStatus

DEFAULT_RECENT_WINDOW_DAYS = 30
DEFAULT_MAX_DELIVERY_HOURS = 720.0
UNKNOWN_SUPPLY = "Unknown"
UNKNOWN_DATE = "Unknown"


class _Report(BaseModel):
    class Config:
        populate_by_name = True


class StatusBreakdown(_Report):
    """Shipment counts per status bucket."""

    pending: int = 0
    in_transit: int = Field(default=0, alias="inTransit")
    received: int = 0
    tampered: int = 0

    def add(self, status: ShipmentStatus) -> None:
        if status == ShipmentStatus.RECEIVED:
            self.received += 1
        elif status == ShipmentStatus.TAMPERED:
            self.tampered += 1
        elif status == ShipmentStatus.PENDING:
            self.pending += 1
        else:
            self.in_transit += 1


class OverviewReport(_Report):
    """Fleet-wide summary."""

    total: int
    status_breakdown: StatusBreakdown = Field(alias="statusBreakdown")
    location_stats: dict[str, int] = Field(alias="locationStats")
    supply_stats: dict[str, int] = Field(alias="supplyStats")
    recent_shipments_count: int = Field(alias="recentShipmentsCount")
    avg_delivery_hours: float = Field(alias="avgDeliveryHours")
    delivered_count: int = Field(alias="deliveredCount")
    timestamp: str


class TimelineEntry(StatusBreakdown):
    """Per-date totals split by status bucket."""

    date: str
    total: int = 0


class TimelineReport(_Report):
    timeline: list[TimelineEntry]


class RoutePerformance(_Report):
    """Volume and delivery time for one origin/destination pair."""

    route: str
    init_loc: str = Field(alias="initLoc")
    final_loc: str = Field(alias="finalLoc")
    total: int = 0
    completed: int = 0
    in_progress: int = Field(default=0, alias="inProgress")
    avg_delivery_hours: float = Field(default=0.0, alias="avgDeliveryHours")


class RoutesReport(_Report):
    routes: list[RoutePerformance]


class CheckpointActivity(_Report):
    """Scan activity recorded at one location."""

    location: str
    total_scans: int = Field(alias="totalScans")
    unique_shipments: int = Field(alias="uniqueShipments")
    officers_count: int = Field(alias="officersCount")


class CheckpointsReport(_Report):
    checkpoints: list[CheckpointActivity]


def delivery_hours(
    shipment: Shipment,
    now: datetime | None = None,
    ledger_only: bool = False,
) -> float | None:
    """
    Elapsed delivery time of a shipment in hours, before any validity check.

    With at least two ledger entries this is last minus first entry. Otherwise
    it falls back to ``now`` minus the shipment ``date``, unless
    ``ledger_only`` is set. Returns None when the needed instants cannot be
    parsed or no ``now`` is given for the fallback.
    """
    history = shipment.location_history
    if len(history) > 1:
        start = parse_timestamp(history[0].timestamp)
        end = parse_timestamp(history[-1].timestamp)
    elif ledger_only:
        return None
    else:
        start = parse_timestamp(shipment.date)
        end = now

    if start is None or end is None:
        return None
    return (end - start).total_seconds() / 3600


def is_valid_delivery(hours: float | None, max_hours: float = DEFAULT_MAX_DELIVERY_HOURS) -> bool:
    """A sample counts only when strictly between zero and ``max_hours``."""
    return hours is not None and 0 < hours < max_hours


def _average(samples: Sequence[float]) -> float:
    if not samples:
        return 0.0
    return round(sum(samples) / len(samples), 1)


def overview(
    shipments: Sequence[Shipment],
    now: datetime,
    recent_window_days: int = DEFAULT_RECENT_WINDOW_DAYS,
    max_delivery_hours: float = DEFAULT_MAX_DELIVERY_HOURS,
) -> OverviewReport:
    """
    Status mix, location and supply counts, recent volume and average
    delivery time over received shipments.
    """
    breakdown = StatusBreakdown()
    locations: Counter[str] = Counter()
    supplies: Counter[str] = Counter()
    window_start = now - timedelta(days=recent_window_days)
    recent = 0
    samples: list[float] = []

    for shipment in shipments:
        breakdown.add(shipment.status)
        locations[shipment.current_location or shipment.init_loc] += 1
        supplies[shipment.supply or UNKNOWN_SUPPLY] += 1

        shipment_date = parse_timestamp(shipment.date)
        if shipment_date is not None and shipment_date >= window_start:
            recent += 1

        if shipment.status == ShipmentStatus.RECEIVED:
            hours = delivery_hours(shipment, now)
            if is_valid_delivery(hours, max_delivery_hours):
                samples.append(hours)

    return OverviewReport(
        total=len(shipments),
        status_breakdown=breakdown,
        location_stats=dict(locations),
        supply_stats=dict(supplies),
        recent_shipments_count=recent,
        avg_delivery_hours=_average(samples),
        delivered_count=len(samples),
        timestamp=format_timestamp(now),
    )


def _parse_bound(value: str | None, name: str) -> datetime | None:
    if not value:
        return None
    parsed = parse_timestamp(value)
    if parsed is None:
        raise ValidationError(f"Invalid {name}: {value}")
    return parsed


def timeline(
    shipments: Sequence[Shipment],
    start_date: str | None = None,
    end_date: str | None = None,
) -> TimelineReport:
    """
    Per-date status totals.

    Bounds are inclusive and apply to the parsed shipment ``date``; records
    without a parsable date are dropped once any bound is given. Groups are
    keyed by the raw ``date`` string and sorted by parsed date, unparsable
    keys last.
    """
    start = _parse_bound(start_date, "startDate")
    end = _parse_bound(end_date, "endDate")

    groups: dict[str, TimelineEntry] = {}
    for shipment in shipments:
        if start is not None or end is not None:
            shipment_date = parse_timestamp(shipment.date)
            if shipment_date is None:
                continue
            if start is not None and shipment_date < start:
                continue
            if end is not None and shipment_date > end:
                continue

        key = shipment.date or UNKNOWN_DATE
        entry = groups.setdefault(key, TimelineEntry(date=key))
        entry.total += 1
        entry.add(shipment.status)

    def sort_key(entry: TimelineEntry) -> tuple[bool, datetime]:
        parsed = parse_timestamp(entry.date)
        return parsed is None, parsed or datetime.min.replace(tzinfo=timezone.utc)

    return TimelineReport(timeline=sorted(groups.values(), key=sort_key))


def route_performance(
    shipments: Sequence[Shipment],
    max_delivery_hours: float = DEFAULT_MAX_DELIVERY_HOURS,
) -> RoutesReport:
    """
    Volume, completion and average delivery time per (origin, destination).

    Averages use received shipments with at least two ledger entries only.
    Routes are ordered by descending volume.
    """
    routes: dict[tuple[str, str], RoutePerformance] = {}
    samples: dict[tuple[str, str], list[float]] = {}

    for shipment in shipments:
        key = (shipment.init_loc, shipment.final_loc)
        stats = routes.get(key)
        if stats is None:
            stats = RoutePerformance(
                route=f"{shipment.init_loc} → {shipment.final_loc}",
                init_loc=shipment.init_loc,
                final_loc=shipment.final_loc,
            )
            routes[key] = stats
            samples[key] = []

        stats.total += 1
        if shipment.status == ShipmentStatus.RECEIVED:
            stats.completed += 1
            hours = delivery_hours(shipment, ledger_only=True)
            if is_valid_delivery(hours, max_delivery_hours):
                samples[key].append(hours)
        elif shipment.status == ShipmentStatus.IN_TRANSIT:
            stats.in_progress += 1

    for key, stats in routes.items():
        stats.avg_delivery_hours = _average(samples[key])

    return RoutesReport(routes=sorted(routes.values(), key=lambda r: r.total, reverse=True))


def checkpoint_activity(shipments: Sequence[Shipment]) -> CheckpointsReport:
    """Scan counts, distinct shipments and distinct officers per location."""
    scans: Counter[str] = Counter()
    shipment_ids: dict[str, set[str]] = {}
    officers: dict[str, set[str]] = {}

    for shipment in shipments:
        for event in shipment.location_history:
            scans[event.location] += 1
            shipment_ids.setdefault(event.location, set()).add(shipment.id)
            seen_officers = officers.setdefault(event.location, set())
            if event.officer:
                seen_officers.add(event.officer)

    checkpoints = [
        CheckpointActivity(
            location=location,
            total_scans=count,
            unique_shipments=len(shipment_ids[location]),
            officers_count=len(officers[location]),
        )
        for location, count in scans.items()
    ]
    checkpoints.sort(key=lambda c: c.total_scans, reverse=True)
    return CheckpointsReport(checkpoints=checkpoints)
