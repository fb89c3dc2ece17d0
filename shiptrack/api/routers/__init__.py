"""API routers."""

from shiptrack.api.routers import analytics, estimates, shipments

__all__ = ["analytics", "estimates", "shipments"]
