"""HTTP boundary for the shipment tracking service."""
