"""Shipment store: the sole owner of persisted state."""

from shiptrack.common.config_loader import StorageConfig
from shiptrack.store.base import CollectionShipmentStore, ShipmentRepository, merge_patch
from shiptrack.store.json_file import JsonFileShipmentStore
from shiptrack.store.memory import InMemoryShipmentStore


def build_store(config: StorageConfig) -> ShipmentRepository:
    """Create the configured store backend."""
    if config.backend == "memory":
        return InMemoryShipmentStore()
    if config.backend == "json":
        return JsonFileShipmentStore(config.path)
    raise ValueError(f"Unknown storage backend: {config.backend}")


__all__ = [
    "ShipmentRepository",
    "CollectionShipmentStore",
    "InMemoryShipmentStore",
    "JsonFileShipmentStore",
    "build_store",
    "merge_patch",
]
