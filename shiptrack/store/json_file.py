"""
JSON file backed shipment store.

The whole collection lives in one JSON array. Writes go to a temporary file
in the same directory and are moved into place with ``os.replace``, so a
reader sees either the old or the new collection and a failed write leaves
the previous file untouched.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from jsonschema import Draft7Validator
from pydantic import ValidationError as PydanticValidationError

from shiptrack.common.errors import StorageError
from shiptrack.common.logging_utils import get_logger
from shiptrack.models.shipment import Shipment
from shiptrack.store.base import CollectionShipmentStore
from shiptrack.store.schema import SHIPMENT_COLLECTION_SCHEMA

logger = get_logger(__name__)


class JsonFileShipmentStore(CollectionShipmentStore):
    """Shipment collection persisted as a single JSON file."""

    def __init__(self, path: str | Path):
        """
        Initialize the store, creating an empty collection file if needed.

        Args:
            path: Location of the JSON collection file
        """
        super().__init__()
        self.path = Path(path)
        self._validator = Draft7Validator(SHIPMENT_COLLECTION_SCHEMA)

        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._write_records([])
            logger.info("Created shipment collection file", path=str(self.path))

    def _load(self) -> list[Shipment]:
        records = self._read_records()

        errors = sorted(self._validator.iter_errors(records), key=lambda e: list(e.absolute_path))
        if errors:
            first = errors[0]
            location = "/".join(str(p) for p in first.absolute_path) or "<root>"
            logger.error(
                "Shipment collection failed schema validation",
                path=str(self.path),
                error_count=len(errors),
            )
            raise StorageError(f"Corrupt shipment collection at {location}: {first.message}")

        try:
            return [Shipment.model_validate(record) for record in records]
        except PydanticValidationError as e:
            raise StorageError(f"Corrupt shipment record: {e}") from e

    def _save(self, shipments: list[Shipment]) -> None:
        self._write_records([shipment.to_record() for shipment in shipments])

    def _read_records(self) -> list[dict[str, Any]]:
        try:
            with open(self.path, encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return []
        except json.JSONDecodeError as e:
            logger.error("Shipment collection is not valid JSON", path=str(self.path), error=str(e))
            raise StorageError("Failed to read shipments: collection file is not valid JSON") from e
        except OSError as e:
            logger.error("Failed to read shipment collection", path=str(self.path), error=str(e))
            raise StorageError("Failed to read shipments") from e

    def _write_records(self, records: list[dict[str, Any]]) -> None:
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            logger.error("Failed to write shipment collection", path=str(self.path), error=str(e))
            raise StorageError("Failed to save shipments") from e
