"""
Shipment repository interface and the shared whole-collection engine.

Every mutation is a read-entire-collection, mutate-in-memory,
write-entire-collection sequence. Mutations are serialized by one
store-wide lock, and each record carries a ``version`` that callers may
pin with ``expected_version`` to detect edits made since their read.
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Mapping

from shiptrack.common.errors import ConflictError, NotFoundError, ValidationError, VersionConflictError
from shiptrack.common.logging_utils import get_logger
from shiptrack.models.shipment import Shipment, ShipmentStatus, missing_required_fields

logger = get_logger(__name__)

Mutator = Callable[[Shipment], Shipment]

PATCHABLE_FIELDS = frozenset({
    "name",
    "supply",
    "init_loc",
    "final_loc",
    "date",
    "status",
    "received_at",
    "tampered_at",
})

_ALIASES = {
    field.alias: name
    for name, field in Shipment.model_fields.items()
    if field.alias
}


def merge_patch(shipment: Shipment, patch: Mapping[str, Any]) -> Shipment:
    """
    Merge provided fields over a record.

    Keys may be attribute names or wire aliases. Falsy values never
    overwrite, and identity/ledger fields are ignored.
    """
    changes: dict[str, Any] = {}
    for key, value in patch.items():
        name = _ALIASES.get(key, key)
        if name not in PATCHABLE_FIELDS or not value:
            continue
        if name == "status":
            value = ShipmentStatus.from_raw(value)
        changes[name] = value
    if not changes:
        return shipment
    return shipment.model_copy(update=changes)


class ShipmentRepository(ABC):
    """Keyed, durable collection of shipment records."""

    @abstractmethod
    def create(self, shipment: Shipment) -> Shipment:
        """Persist a new record. Raises ConflictError on duplicate id."""

    @abstractmethod
    def get(self, shipment_id: str) -> Shipment:
        """Return a record. Raises NotFoundError."""

    @abstractmethod
    def list(self) -> list[Shipment]:
        """Return all records in insertion order."""

    @abstractmethod
    def mutate(
        self,
        shipment_id: str,
        fn: Mutator,
        expected_version: int | None = None,
    ) -> Shipment:
        """
        Apply ``fn`` to a record and persist the result atomically.

        When ``fn`` returns the record it was given, nothing is written and
        the version stays as it was.
        """

    @abstractmethod
    def delete(self, shipment_id: str) -> None:
        """Remove a record. Raises NotFoundError."""

    def update(
        self,
        shipment_id: str,
        patch: Mapping[str, Any],
        expected_version: int | None = None,
    ) -> Shipment:
        """Merge ``patch`` over a record with keep-existing semantics."""
        return self.mutate(shipment_id, lambda s: merge_patch(s, patch), expected_version)


class CollectionShipmentStore(ShipmentRepository):
    """Repository over a single collection loaded and saved as a whole."""

    def __init__(self):
        self._lock = threading.RLock()

    @abstractmethod
    def _load(self) -> list[Shipment]:
        """Read the full collection."""

    @abstractmethod
    def _save(self, shipments: list[Shipment]) -> None:
        """Replace the full collection. Must be atomic for readers."""

    @staticmethod
    def _index_of(shipments: list[Shipment], shipment_id: str) -> int:
        for index, shipment in enumerate(shipments):
            if shipment.id == shipment_id:
                return index
        raise NotFoundError(shipment_id)

    def create(self, shipment: Shipment) -> Shipment:
        missing = missing_required_fields(shipment.to_record())
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        with self._lock:
            shipments = self._load()
            if any(existing.id == shipment.id for existing in shipments):
                raise ConflictError(f"Shipment ID already exists: {shipment.id}")
            record = shipment.model_copy(update={"version": 1})
            shipments.append(record)
            self._save(shipments)

        logger.debug("Shipment persisted", shipment_id=record.id)
        return record

    def get(self, shipment_id: str) -> Shipment:
        shipments = self._load()
        return shipments[self._index_of(shipments, shipment_id)]

    def list(self) -> list[Shipment]:
        return self._load()

    def mutate(
        self,
        shipment_id: str,
        fn: Mutator,
        expected_version: int | None = None,
    ) -> Shipment:
        with self._lock:
            shipments = self._load()
            index = self._index_of(shipments, shipment_id)
            current = shipments[index]

            if expected_version is not None and current.version != expected_version:
                raise VersionConflictError(shipment_id, expected_version, current.version)

            changed = fn(current)
            if changed is current:
                return current

            updated = changed.model_copy(update={
                "id": current.id,
                "version": current.version + 1,
            })
            shipments[index] = updated
            self._save(shipments)

        return updated

    def delete(self, shipment_id: str) -> None:
        with self._lock:
            shipments = self._load()
            del shipments[self._index_of(shipments, shipment_id)]
            self._save(shipments)

        logger.debug("Shipment removed", shipment_id=shipment_id)
