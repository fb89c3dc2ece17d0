"""
Shipment checkpoint tracking service

Tracks shipments from dispatch through checkpoint verification to receipt:
- Append-only location ledger per shipment
- Lifecycle transitions (dispatch, scan, verify, tamper, receive)
- Read-only operational analytics over the shipment collection
- Travel-time enrichment through OpenRouteService
"""

__version__ = "1.0.0"
