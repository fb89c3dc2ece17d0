"""Shipment lifecycle: ledger discipline and state transitions."""

from shiptrack.lifecycle.ledger import LocationLedger
from shiptrack.lifecycle.manager import LifecycleManager, VerificationOutcome

__all__ = ["LocationLedger", "LifecycleManager", "VerificationOutcome"]
