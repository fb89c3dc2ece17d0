"""Inbound payloads for lifecycle operations and route estimates."""

from typing import Any

from pydantic import BaseModel, Field

from shiptrack.models.shipment import Coordinates, ShipmentStatus, missing_required_fields


class ShipmentCreate(BaseModel):
    """Dispatch request. Field presence is checked by the lifecycle, not here."""

    id: str | None = None
    name: str | None = None
    supply: str | None = None
    init_loc: str | None = Field(default=None, alias="initLoc")
    final_loc: str | None = Field(default=None, alias="finalLoc")
    date: str | None = None

    def missing_fields(self) -> list[str]:
        return missing_required_fields(self.model_dump(by_alias=True))

    class Config:
        populate_by_name = True


class LocationUpdate(BaseModel):
    """Checkpoint scan payload."""

    location: str | None = None
    officer: str | None = None
    action: str | None = None
    coordinates: Coordinates | None = None


class ShipmentUpdate(BaseModel):
    """
    Generic edit payload.

    Scalar fields follow keep-existing-unless-provided semantics: empty or
    missing values never overwrite. ``location`` (with ``officer``,
    ``action`` and ``coordinates``) appends a ledger entry.
    """

    name: str | None = None
    supply: str | None = None
    init_loc: str | None = Field(default=None, alias="initLoc")
    final_loc: str | None = Field(default=None, alias="finalLoc")
    date: str | None = None
    status: str | None = None
    received_at: str | None = Field(default=None, alias="receivedAt")
    tampered_at: str | None = Field(default=None, alias="tamperedAt")

    location: str | None = None
    officer: str | None = None
    action: str | None = None
    coordinates: Coordinates | None = None

    def scalar_patch(self) -> dict[str, Any]:
        """Provided non-identity fields keyed by attribute name."""
        fields = ("name", "supply", "init_loc", "final_loc", "date", "received_at", "tampered_at")
        patch = {name: getattr(self, name) for name in fields if getattr(self, name)}
        if self.status:
            patch["status"] = ShipmentStatus.from_raw(self.status)
        return patch

    def location_update(self) -> LocationUpdate | None:
        if not self.location:
            return None
        return LocationUpdate(
            location=self.location,
            officer=self.officer,
            action=self.action,
            coordinates=self.coordinates,
        )

    class Config:
        populate_by_name = True


class VerifyRequest(BaseModel):
    """Checkpoint verification. ``complete`` marks terminal receipt."""

    officer: str | None = None
    location: str | None = None
    complete: bool = True


class TamperRequest(BaseModel):
    """Tamper flag raised by a checkpoint officer."""

    officer: str | None = None
    location: str | None = None


class EstimateRequest(BaseModel):
    """Ad-hoc travel estimate between two place names."""

    start_location: str | None = Field(default=None, alias="startLocation")
    end_location: str | None = Field(default=None, alias="endLocation")
    mode: str | None = None

    class Config:
        populate_by_name = True
