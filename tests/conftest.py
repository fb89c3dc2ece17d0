"""
Pytest configuration and fixtures for the test suite.
"""

import os
from datetime import datetime, timezone
from typing import Any
from unittest.mock import MagicMock

import pytest

# Set environment for testing
os.environ["ENVIRONMENT"] = "test"
os.environ.pop("ORS_API_KEY", None)

FIXED_NOW = datetime(2024, 1, 2, 8, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now() -> datetime:
    """Return the instant every fixed clock reports."""
    return FIXED_NOW


@pytest.fixture
def create_payload() -> dict[str, Any]:
    """Return a complete dispatch request body."""
    return {
        "id": "S1",
        "name": "Medkit",
        "supply": "Medical",
        "initLoc": "Delhi",
        "finalLoc": "Mumbai",
        "date": "2024-01-01",
    }


@pytest.fixture
def memory_store():
    """Return an empty in-memory shipment store."""
    from shiptrack.store import InMemoryShipmentStore

    return InMemoryShipmentStore()


@pytest.fixture
def json_store(tmp_path):
    """Return a JSON file store backed by a temporary file."""
    from shiptrack.store import JsonFileShipmentStore

    return JsonFileShipmentStore(tmp_path / "data" / "shipments.json")


@pytest.fixture
def lifecycle(memory_store, fixed_now):
    """Return a lifecycle manager over the memory store with a frozen clock."""
    from shiptrack.lifecycle import LifecycleManager

    return LifecycleManager(memory_store, clock=lambda: fixed_now)


@pytest.fixture
def make_shipment():
    """Return a factory for shipment records with a ledger."""
    from shiptrack.models import LocationEvent, Shipment

    def _make(
        shipment_id: str = "S1",
        status: str = "pending",
        init_loc: str = "Delhi",
        final_loc: str = "Mumbai",
        date: str = "2024-01-01",
        supply: str = "Medical",
        stops: list[tuple[str, str, str]] | None = None,
    ) -> Shipment:
        history = [
            LocationEvent(
                location=init_loc,
                timestamp=f"{date}T00:00:00.000Z",
                officer="System",
                action="dispatched",
            )
        ]
        for location, timestamp, officer in stops or []:
            history.append(LocationEvent(location=location, timestamp=timestamp, officer=officer))
        return Shipment(
            id=shipment_id,
            name=f"Shipment {shipment_id}",
            supply=supply,
            init_loc=init_loc,
            final_loc=final_loc,
            date=date,
            status=status,
            location_history=history,
        )

    return _make


@pytest.fixture
def mock_estimator():
    """Return a mock route estimator."""
    estimator = MagicMock()
    estimator.session = MagicMock()
    return estimator


@pytest.fixture
def api_client(memory_store, mock_estimator):
    """Return a TestClient wired to the memory store and mock estimator."""
    from fastapi.testclient import TestClient

    from shiptrack.api import dependencies
    from shiptrack.api.main import app, config

    dependencies.init_services(config, store=memory_store, estimator=mock_estimator)
    with TestClient(app) as client:
        yield client
    dependencies.shutdown_services()
