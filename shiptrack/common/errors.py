"""Error taxonomy shared by the store, lifecycle, estimator and API layers."""


class ShipTrackError(Exception):
    """Base class for all service errors.

    ``status_code`` is the HTTP status the API boundary maps the error to.
    """

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ShipTrackError):
    """Missing or malformed required fields."""

    status_code = 400


class NotFoundError(ShipTrackError):
    """Unknown shipment id."""

    status_code = 404

    def __init__(self, shipment_id: str, message: str = "Shipment not found"):
        self.shipment_id = shipment_id
        super().__init__(message)


class ConflictError(ShipTrackError):
    """Duplicate shipment id on create."""

    status_code = 400


class VersionConflictError(ConflictError):
    """The record changed since the caller read it."""

    status_code = 409

    def __init__(self, shipment_id: str, expected: int, actual: int):
        self.shipment_id = shipment_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Shipment {shipment_id} is at version {actual}, expected {expected}"
        )


class ExternalServiceError(ShipTrackError):
    """Geocoding or routing upstream failure."""

    status_code = 500


class PlaceNotFoundError(ExternalServiceError):
    """A place name could not be resolved to coordinates."""

    status_code = 404


class RouteNotFoundError(ExternalServiceError):
    """The routing service returned no route between two points."""

    status_code = 404


class StorageError(ShipTrackError):
    """Persistence I/O failure. Never retried."""

    status_code = 500
