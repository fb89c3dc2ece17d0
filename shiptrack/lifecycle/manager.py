"""
Shipment lifecycle transitions.

Every operation is one read-modify-write against the store, built from the
ledger primitives. The current instant is injectable per call (``now``) or
per manager (``clock``).
"""

from dataclasses import dataclass
from datetime import datetime

from shiptrack.common.errors import StorageError, ValidationError
from shiptrack.common.logging_utils import get_logger
from shiptrack.common.timeutils import Clock, format_timestamp, utc_now
from shiptrack.lifecycle.ledger import LocationLedger
from shiptrack.models.requests import LocationUpdate, ShipmentCreate, ShipmentUpdate
from shiptrack.models.shipment import LocationAction, LocationEvent, Shipment, ShipmentStatus
from shiptrack.store.base import ShipmentRepository, merge_patch

logger = get_logger(__name__)


@dataclass
class VerificationOutcome:
    """
    Result of a checkpoint verification.

    ``event_recorded`` is False when the ledger append failed and the
    status phase ran anyway.
    """

    shipment: Shipment
    event: LocationEvent | None
    event_recorded: bool

    @property
    def completed(self) -> bool:
        return self.shipment.status == ShipmentStatus.RECEIVED


class LifecycleManager:
    """Validates and applies lifecycle transitions onto the shipment store."""

    def __init__(self, store: ShipmentRepository, clock: Clock = utc_now):
        self.store = store
        self.clock = clock

    def _now(self, now: datetime | None) -> datetime:
        return now if now is not None else self.clock()

    # Reads

    def get(self, shipment_id: str) -> Shipment:
        return self.store.get(shipment_id)

    def list(self) -> list[Shipment]:
        return self.store.list()

    # Transitions

    def dispatch(self, request: ShipmentCreate, now: datetime | None = None) -> Shipment:
        """
        Create a shipment in ``pending`` with its synthetic dispatch entry.

        Raises:
            ValidationError: a required field is missing or empty
            ConflictError: the id is already taken
        """
        missing = request.missing_fields()
        if missing:
            raise ValidationError(f"All fields are required (missing: {', '.join(missing)})")

        moment = self._now(now)
        shipment = Shipment(
            id=request.id,
            name=request.name,
            supply=request.supply,
            init_loc=request.init_loc,
            final_loc=request.final_loc,
            date=request.date,
            status=ShipmentStatus.PENDING,
            current_location=request.init_loc,
            location_history=(LocationLedger.dispatch_event(request.init_loc, moment),),
        )
        created = self.store.create(shipment)

        logger.info(
            "Shipment dispatched",
            shipment_id=created.id,
            origin=created.init_loc,
            destination=created.final_loc,
        )
        return created

    def record_location(
        self,
        shipment_id: str,
        request: LocationUpdate,
        now: datetime | None = None,
    ) -> tuple[LocationEvent, Shipment]:
        """
        Append a checkpoint scan to the ledger.

        Status is left alone unless the action is ``tampered``.

        Returns:
            The appended entry and the updated shipment
        """
        if not request.location:
            self.store.get(shipment_id)
            raise ValidationError("Location is required")

        moment = self._now(now)
        event = LocationLedger.new_event(
            request.location,
            moment,
            officer=request.officer,
            action=request.action,
            coordinates=request.coordinates,
        )
        shipment = self.store.mutate(shipment_id, lambda s: self._apply_event(s, event, moment))

        logger.info(
            "Location recorded",
            shipment_id=shipment_id,
            location=event.location,
            officer=event.officer,
            action=event.action,
        )
        return event, shipment

    def verify(
        self,
        shipment_id: str,
        officer: str | None = None,
        location: str | None = None,
        complete: bool = True,
        now: datetime | None = None,
    ) -> VerificationOutcome:
        """
        Verify a shipment at a checkpoint.

        Two phases: the ``verified`` ledger entry is appended first on a
        best-effort basis (a storage failure is logged and skipped), then,
        when ``complete`` is set, the shipment moves to ``received`` and is
        stamped with ``receivedAt``. Failures of the second phase propagate.
        """
        if not location:
            raise ValidationError("Checkpoint location is required to verify")

        moment = self._now(now)
        event: LocationEvent | None = None
        shipment: Shipment | None = None

        try:
            event, shipment = self.record_location(
                shipment_id,
                LocationUpdate(location=location, officer=officer, action=LocationAction.VERIFIED.value),
                now=moment,
            )
        except StorageError as e:
            logger.warning(
                "Verification entry not recorded, continuing with status update",
                shipment_id=shipment_id,
                error=e.message,
            )

        if complete:
            shipment = self.store.mutate(shipment_id, lambda s: self._mark_received(s, moment))
        elif shipment is None:
            shipment = self.store.get(shipment_id)

        logger.info(
            "Shipment verified",
            shipment_id=shipment_id,
            location=location,
            status=shipment.status.value,
            event_recorded=event is not None,
        )
        return VerificationOutcome(shipment=shipment, event=event, event_recorded=event is not None)

    def flag_tamper(
        self,
        shipment_id: str,
        officer: str | None = None,
        location: str | None = None,
        now: datetime | None = None,
    ) -> Shipment:
        """
        Flag suspected tampering.

        Appends a ``tampered`` entry (at the shipment's current location when
        none is given), sets status ``tampered`` and stamps ``tamperedAt``.
        """
        moment = self._now(now)

        def apply(shipment: Shipment) -> Shipment:
            event = LocationLedger.new_event(
                location or shipment.current_location or shipment.init_loc,
                moment,
                officer=officer,
                action=LocationAction.TAMPERED.value,
            )
            return self._apply_event(shipment, event, moment)

        shipment = self.store.mutate(shipment_id, apply)

        logger.warning(
            "Shipment flagged as tampered",
            shipment_id=shipment_id,
            location=shipment.current_location,
            officer=officer or "Unknown",
        )
        return shipment

    def receive(self, shipment_id: str, now: datetime | None = None) -> Shipment:
        """Mark a shipment received without a ledger entry."""
        moment = self._now(now)
        shipment = self.store.mutate(shipment_id, lambda s: self._mark_received(s, moment))
        logger.info("Shipment received", shipment_id=shipment_id, status=shipment.status.value)
        return shipment

    def update(
        self,
        shipment_id: str,
        request: ShipmentUpdate,
        expected_version: int | None = None,
        now: datetime | None = None,
    ) -> Shipment:
        """
        Administrative edit of non-identity fields.

        Status may be set directly here, including away from ``tampered``.
        A ``location`` in the request appends a ledger entry with the same
        effects as a checkpoint scan, so a ``tampered`` action flags the
        shipment.
        """
        moment = self._now(now)
        patch = request.scalar_patch()
        location_update = request.location_update()

        def apply(shipment: Shipment) -> Shipment:
            updated = merge_patch(shipment, patch)
            stamps = {}
            if updated.status == ShipmentStatus.RECEIVED and not updated.received_at:
                stamps["received_at"] = format_timestamp(moment)
            if updated.status == ShipmentStatus.TAMPERED and not updated.tampered_at:
                stamps["tampered_at"] = format_timestamp(moment)
            if stamps:
                updated = updated.model_copy(update=stamps)

            if location_update is not None:
                event = LocationLedger.new_event(
                    location_update.location,
                    moment,
                    officer=location_update.officer,
                    action=location_update.action,
                    coordinates=location_update.coordinates,
                )
                updated = self._apply_event(updated, event, moment)
            return updated

        shipment = self.store.mutate(shipment_id, apply, expected_version)

        logger.info(
            "Shipment updated",
            shipment_id=shipment_id,
            fields=sorted(patch),
            location=location_update.location if location_update else None,
            version=shipment.version,
        )
        return shipment

    def delete(self, shipment_id: str) -> None:
        self.store.delete(shipment_id)
        logger.info("Shipment deleted", shipment_id=shipment_id)

    # Helpers

    def _apply_event(self, shipment: Shipment, event: LocationEvent, moment: datetime) -> Shipment:
        shipment = LocationLedger.append(shipment, event, moment)
        if event.action == LocationAction.TAMPERED.value:
            changes = {"status": ShipmentStatus.TAMPERED}
            if not shipment.tampered_at:
                changes["tampered_at"] = format_timestamp(moment)
            shipment = shipment.model_copy(update=changes)
        return shipment

    @staticmethod
    def _mark_received(shipment: Shipment, moment: datetime) -> Shipment:
        if shipment.status == ShipmentStatus.TAMPERED:
            logger.warning("Tampered shipment kept out of received", shipment_id=shipment.id)
            return shipment
        changes = {"status": ShipmentStatus.RECEIVED}
        if not shipment.received_at:
            changes["received_at"] = format_timestamp(moment)
        return shipment.model_copy(update=changes)
