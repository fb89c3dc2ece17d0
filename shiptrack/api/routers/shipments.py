"""Shipment lifecycle endpoints."""

from fastapi import APIRouter, Depends, Header, Query, Response, status
from pydantic import BaseModel, Field

from shiptrack.api.dependencies import get_estimator, get_lifecycle
from shiptrack.common.errors import ValidationError
from shiptrack.integrations.route_estimator import RouteEstimator
from shiptrack.lifecycle.manager import LifecycleManager
from shiptrack.models.requests import (
    LocationUpdate,
    ShipmentCreate,
    ShipmentUpdate,
    TamperRequest,
    VerifyRequest,
)
from shiptrack.models.shipment import LocationEvent, Shipment

router = APIRouter()


class LocationRecordedResponse(BaseModel):
    """Result of a checkpoint scan."""
    success: bool = True
    location: LocationEvent
    shipment: Shipment


class VerificationResponse(BaseModel):
    """Result of a checkpoint verification."""
    shipment: Shipment
    event_recorded: bool = Field(alias="eventRecorded")
    completed: bool

    class Config:
        populate_by_name = True


class MessageResponse(BaseModel):
    message: str


def _parse_if_match(if_match: str | None) -> int | None:
    """Read a record version from an ``If-Match`` header (``"3"``, ``W/"3"`` or ``3``)."""
    if not if_match:
        return None
    tag = if_match.strip()
    if tag.startswith("W/"):
        tag = tag[2:]
    tag = tag.strip('"')
    try:
        return int(tag)
    except ValueError:
        raise ValidationError(f"Invalid If-Match header: {if_match}") from None


def _set_etag(response: Response, shipment: Shipment) -> None:
    response.headers["ETag"] = f'"{shipment.version}"'


@router.get("", response_model=list[Shipment])
def list_shipments(lifecycle: LifecycleManager = Depends(get_lifecycle)):
    """List all shipments in insertion order."""
    return lifecycle.list()


@router.get("/{shipment_id}", response_model=Shipment)
def get_shipment(
    shipment_id: str,
    response: Response,
    lifecycle: LifecycleManager = Depends(get_lifecycle),
):
    """Get a single shipment."""
    shipment = lifecycle.get(shipment_id)
    _set_etag(response, shipment)
    return shipment


@router.post("", response_model=Shipment, status_code=status.HTTP_201_CREATED)
def create_shipment(
    request: ShipmentCreate,
    lifecycle: LifecycleManager = Depends(get_lifecycle),
):
    """Dispatch a new shipment."""
    return lifecycle.dispatch(request)


@router.put("/{shipment_id}", response_model=Shipment)
def update_shipment(
    shipment_id: str,
    request: ShipmentUpdate,
    response: Response,
    if_match: str | None = Header(default=None),
    lifecycle: LifecycleManager = Depends(get_lifecycle),
):
    """
    Edit a shipment.

    Send ``If-Match`` with the ETag from a previous read to reject the edit
    (409) when the shipment changed in between.
    """
    shipment = lifecycle.update(shipment_id, request, expected_version=_parse_if_match(if_match))
    _set_etag(response, shipment)
    return shipment


@router.post("/{shipment_id}/location", response_model=LocationRecordedResponse)
def record_location(
    shipment_id: str,
    request: LocationUpdate,
    lifecycle: LifecycleManager = Depends(get_lifecycle),
):
    """Append a checkpoint scan to the shipment's ledger."""
    event, shipment = lifecycle.record_location(shipment_id, request)
    return LocationRecordedResponse(location=event, shipment=shipment)


@router.post("/{shipment_id}/verify", response_model=VerificationResponse)
def verify_shipment(
    shipment_id: str,
    request: VerifyRequest,
    lifecycle: LifecycleManager = Depends(get_lifecycle),
):
    """Verify a shipment at a checkpoint, marking it received when complete."""
    outcome = lifecycle.verify(
        shipment_id,
        officer=request.officer,
        location=request.location,
        complete=request.complete,
    )
    return VerificationResponse(
        shipment=outcome.shipment,
        event_recorded=outcome.event_recorded,
        completed=outcome.completed,
    )


@router.post("/{shipment_id}/tamper", response_model=Shipment)
def flag_tamper(
    shipment_id: str,
    request: TamperRequest | None = None,
    lifecycle: LifecycleManager = Depends(get_lifecycle),
):
    """Flag suspected tampering."""
    request = request or TamperRequest()
    return lifecycle.flag_tamper(shipment_id, officer=request.officer, location=request.location)


@router.post("/{shipment_id}/receive", response_model=Shipment)
def receive_shipment(
    shipment_id: str,
    lifecycle: LifecycleManager = Depends(get_lifecycle),
):
    """Mark a shipment received by the receiving officer."""
    return lifecycle.receive(shipment_id)


@router.delete("/{shipment_id}", response_model=MessageResponse)
def delete_shipment(
    shipment_id: str,
    lifecycle: LifecycleManager = Depends(get_lifecycle),
):
    """Remove a shipment permanently."""
    lifecycle.delete(shipment_id)
    return MessageResponse(message="Shipment deleted successfully")


@router.get("/{shipment_id}/estimate")
def estimate_shipment_route(
    shipment_id: str,
    mode: str | None = Query(default=None, description="Routing profile, e.g. driving-car"),
    lifecycle: LifecycleManager = Depends(get_lifecycle),
    estimator: RouteEstimator = Depends(get_estimator),
):
    """Travel time and distance from the shipment's origin to its destination."""
    shipment = lifecycle.get(shipment_id)
    if not shipment.init_loc or not shipment.final_loc:
        raise ValidationError("Shipment lacks initLoc/finalLoc")

    estimate = estimator.estimate(shipment.init_loc, shipment.final_loc, mode)
    return {"shipmentId": shipment.id, **estimate.to_dict()}
