"""
Service wiring for the API.

The store and estimator are process-wide; they are created by the app
lifespan and handed to endpoints through FastAPI dependencies.
"""

from fastapi import Depends, HTTPException

from shiptrack.common.config_loader import Config, get_config
from shiptrack.integrations.route_estimator import RouteEstimator
from shiptrack.lifecycle.manager import LifecycleManager
from shiptrack.store import ShipmentRepository, build_store

_config: Config | None = None
_store: ShipmentRepository | None = None
_estimator: RouteEstimator | None = None


def init_services(
    config: Config,
    store: ShipmentRepository | None = None,
    estimator: RouteEstimator | None = None,
) -> None:
    """Create the shared services unless they were supplied."""
    global _config, _store, _estimator
    _config = config
    _store = store if store is not None else build_store(config.storage)
    _estimator = estimator if estimator is not None else RouteEstimator.from_config(config.routing)


def shutdown_services() -> None:
    global _store, _estimator
    if _estimator is not None:
        _estimator.session.close()
    _store = None
    _estimator = None


def get_settings() -> Config:
    global _config
    if _config is None:
        _config = get_config()
    return _config


def get_store() -> ShipmentRepository:
    if _store is None:
        raise HTTPException(status_code=503, detail="Shipment store not initialized")
    return _store


def get_lifecycle(store: ShipmentRepository = Depends(get_store)) -> LifecycleManager:
    return LifecycleManager(store)


def get_estimator() -> RouteEstimator:
    if _estimator is None:
        raise HTTPException(status_code=503, detail="Route estimator not initialized")
    return _estimator
