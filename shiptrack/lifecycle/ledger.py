"""
Append-only location ledger.

``append`` is the only way a shipment's ``locationHistory`` grows. It
never reorders or removes entries, and it recomputes ``currentLocation``
from the entry it appends.
"""

from datetime import datetime

from shiptrack.common.timeutils import format_timestamp, parse_timestamp
from shiptrack.models.shipment import (
    DISPATCH_OFFICER,
    UNKNOWN_OFFICER,
    Coordinates,
    LocationAction,
    LocationEvent,
    Shipment,
)


class LocationLedger:
    """Discipline for building and appending ledger entries."""

    @staticmethod
    def new_event(
        location: str,
        now: datetime,
        officer: str | None = None,
        action: str | None = None,
        coordinates: Coordinates | None = None,
    ) -> LocationEvent:
        """Build an entry stamped with ``now``, defaulting officer and action."""
        return LocationEvent(
            location=location,
            timestamp=format_timestamp(now),
            officer=officer or UNKNOWN_OFFICER,
            action=action or LocationAction.CHECKED_IN.value,
            coordinates=coordinates,
        )

    @staticmethod
    def dispatch_event(init_loc: str, now: datetime) -> LocationEvent:
        """The synthetic first entry of every ledger."""
        return LocationEvent(
            location=init_loc,
            timestamp=format_timestamp(now),
            officer=DISPATCH_OFFICER,
            action=LocationAction.DISPATCHED.value,
        )

    @classmethod
    def ensure_history(cls, shipment: Shipment, now: datetime) -> Shipment:
        """Seed the dispatch entry on legacy records that have no ledger."""
        if shipment.location_history:
            return shipment
        return shipment.model_copy(update={
            "location_history": (cls.dispatch_event(shipment.init_loc, now),),
        })

    @classmethod
    def append(cls, shipment: Shipment, event: LocationEvent, now: datetime | None = None) -> Shipment:
        """
        Return ``shipment`` with ``event`` appended to its ledger.

        Args:
            shipment: Current record
            event: Entry to append at the end
            now: Instant used to seed a missing dispatch entry (defaults to
                the event's own timestamp)

        Returns:
            A new record; the input is left untouched
        """
        if not shipment.location_history:
            seed_time = now or parse_timestamp(event.timestamp)
            if seed_time is not None:
                shipment = cls.ensure_history(shipment, seed_time)

        return shipment.model_copy(update={
            "location_history": shipment.location_history + (event,),
            "current_location": event.location,
        })
