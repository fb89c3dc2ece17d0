"""Data models for the shipment tracking service."""

from shiptrack.models.requests import (
    EstimateRequest,
    LocationUpdate,
    ShipmentCreate,
    ShipmentUpdate,
    TamperRequest,
    VerifyRequest,
)
from shiptrack.models.shipment import (
    LocationAction,
    LocationEvent,
    Shipment,
    ShipmentStatus,
    missing_required_fields,
)

__all__ = [
    "LocationAction",
    "LocationEvent",
    "Shipment",
    "ShipmentStatus",
    "missing_required_fields",
    "ShipmentCreate",
    "ShipmentUpdate",
    "LocationUpdate",
    "VerifyRequest",
    "TamperRequest",
    "EstimateRequest",
]
