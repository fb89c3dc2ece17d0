"""Common utilities shared across the service."""

from shiptrack.common.config_loader import Config, ConfigLoader, get_config
from shiptrack.common.errors import (
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    PlaceNotFoundError,
    RouteNotFoundError,
    ShipTrackError,
    StorageError,
    ValidationError,
    VersionConflictError,
)
from shiptrack.common.logging_utils import get_logger, setup_logging
from shiptrack.common.timeutils import format_timestamp, parse_timestamp, utc_now

__all__ = [
    "Config",
    "ConfigLoader",
    "get_config",
    "get_logger",
    "setup_logging",
    "ShipTrackError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "VersionConflictError",
    "ExternalServiceError",
    "PlaceNotFoundError",
    "RouteNotFoundError",
    "StorageError",
    "format_timestamp",
    "parse_timestamp",
    "utc_now",
]
