"""Shipment record and location ledger entry definitions."""

from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, Field, field_validator, model_validator

# Stored as given so integer pairs round-trip unchanged
Coordinates = tuple[int | float, int | float]

REQUIRED_FIELDS = ("name", "id", "supply", "initLoc", "finalLoc", "date")

DISPATCH_OFFICER = "System"
UNKNOWN_OFFICER = "Unknown"


class ShipmentStatus(str, Enum):
    """Shipment status enumeration."""

    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    RECEIVED = "received"
    TAMPERED = "tampered"

    @classmethod
    def from_raw(cls, value: Any) -> "ShipmentStatus":
        """
        Map a stored or submitted status onto the closed set.

        Empty or missing values are ``pending``; any value that is not one of
        the four known statuses is ``in_transit``.
        """
        if isinstance(value, cls):
            return value
        if not value:
            return cls.PENDING
        try:
            return cls(value)
        except ValueError:
            return cls.IN_TRANSIT


class LocationAction(str, Enum):
    """Recognized ledger actions. Stored actions are open strings."""

    DISPATCHED = "dispatched"
    CHECKED_IN = "checked_in"
    VERIFIED = "verified"
    TAMPERED = "tampered"


class LocationEvent(BaseModel):
    """One recorded movement or verification fact. Immutable once built."""

    location: str = Field(..., description="Place name")
    timestamp: str = Field(default="", description="ISO-8601 instant the event was recorded")
    officer: str = Field(default=UNKNOWN_OFFICER, description="Actor asserting the event")
    action: str = Field(default=LocationAction.CHECKED_IN.value, description="Ledger action")
    coordinates: Coordinates | None = Field(
        default=None,
        description="Cached [longitude, latitude] of a prior geocode",
    )

    @field_validator("action", mode="before")
    @classmethod
    def coerce_action(cls, v: Any) -> Any:
        if isinstance(v, LocationAction):
            return v.value
        return v

    class Config:
        frozen = True
        populate_by_name = True


class Shipment(BaseModel):
    """A tracked unit of cargo and its location ledger."""

    id: str = Field(..., description="Caller-supplied unique identifier")
    name: str = Field(default="", description="Descriptive name")
    supply: str = Field(default="", description="Supply category")
    init_loc: str = Field(default="", alias="initLoc", description="Origin place name")
    final_loc: str = Field(default="", alias="finalLoc", description="Destination place name")
    date: str = Field(default="", description="Dispatch date as submitted")
    status: ShipmentStatus = Field(default=ShipmentStatus.PENDING)
    current_location: str | None = Field(default=None, alias="currentLocation")
    location_history: tuple[LocationEvent, ...] = Field(default=(), alias="locationHistory")
    received_at: str | None = Field(default=None, alias="receivedAt")
    tampered_at: str | None = Field(default=None, alias="tamperedAt")
    version: int = Field(default=1, ge=1, description="Bumped on every persisted mutation")

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> ShipmentStatus:
        return ShipmentStatus.from_raw(v)

    @field_validator("location_history", mode="before")
    @classmethod
    def default_history(cls, v: Any) -> Any:
        return () if v is None else v

    @model_validator(mode="after")
    def derive_current_location(self) -> "Shipment":
        if not self.current_location:
            if self.location_history:
                self.current_location = self.location_history[-1].location
            else:
                self.current_location = self.init_loc
        return self

    def to_record(self) -> dict[str, Any]:
        """Serialize with wire/disk field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    class Config:
        populate_by_name = True


def missing_required_fields(data: Mapping[str, Any]) -> list[str]:
    """Return the required create fields that are absent or empty in ``data``."""
    return [name for name in REQUIRED_FIELDS if not data.get(name)]
