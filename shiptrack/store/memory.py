"""In-process shipment store."""

from shiptrack.models.shipment import Shipment
from shiptrack.store.base import CollectionShipmentStore


class InMemoryShipmentStore(CollectionShipmentStore):
    """
    Ordered in-memory collection.

    Loads hand out deep copies so callers cannot change stored records
    without going through the repository.
    """

    def __init__(self, shipments: list[Shipment] | None = None):
        super().__init__()
        self._records: list[Shipment] = list(shipments or [])

    def _load(self) -> list[Shipment]:
        return [shipment.model_copy(deep=True) for shipment in self._records]

    def _save(self, shipments: list[Shipment]) -> None:
        self._records = list(shipments)
