"""Flat-file JSON storage backend."""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Optional

from portfolio_tracker.core.exceptions import StorageError

logger = logging.getLogger(__name__)

PORTFOLIOS = "portfolios"
TRANSACTIONS = "transactions"
CASH_POSITIONS = "cash_positions"
STOCKS = "stocks"
USER_ACTIONS = "user_actions"


class JsonFileStore:
    """
    One pretty-printed JSON array per entity type under `data_dir`.

    Writes go to a temp file in the same directory, are fsynced and then
    atomically renamed over the target, so a write is durable when the
    call returns. A single re-entrant lock serializes read-modify-write
    cycles within the process.
    """

    def __init__(self, data_dir: Path):
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def path_for(self, entity_type: str) -> Path:
        return self._data_dir / f"{entity_type}.json"

    def read_all(self, entity_type: str) -> list[dict[str, Any]]:
        path = self.path_for(entity_type)
        with self._lock:
            if not path.exists():
                return []
            try:
                with path.open("r", encoding="utf-8") as fh:
                    content = fh.read()
            except OSError as exc:
                raise StorageError(f"Cannot read {path.name}: {exc}") from exc
            if not content.strip():
                return []
            try:
                data = json.loads(content)
            except json.JSONDecodeError as exc:
                logger.error("Corrupt data file %s: %s", path, exc)
                raise StorageError(f"Corrupt data file {path.name}: {exc}") from exc
            if not isinstance(data, list):
                raise StorageError(f"Data file {path.name} must contain a JSON array")
            return data

    def write_all(self, entity_type: str, records: list[dict[str, Any]]) -> None:
        path = self.path_for(entity_type)
        with self._lock:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{entity_type}.", suffix=".tmp", dir=self._data_dir
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(records, fh, indent=2)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, path)
            except OSError as exc:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise StorageError(f"Cannot write {path.name}: {exc}") from exc

    def append(self, entity_type: str, record: dict[str, Any]) -> None:
        with self._lock:
            records = self.read_all(entity_type)
            records.append(record)
            self.write_all(entity_type, records)

    def update(
        self,
        entity_type: str,
        record_id: str,
        patch: dict[str, Any],
        id_field: str = "id",
    ) -> Optional[dict[str, Any]]:
        with self._lock:
            records = self.read_all(entity_type)
            for record in records:
                if record.get(id_field) == record_id:
                    record.update(patch)
                    self.write_all(entity_type, records)
                    return record
            return None

    def upsert(
        self,
        entity_type: str,
        record_id: str,
        record: dict[str, Any],
        id_field: str = "id",
    ) -> dict[str, Any]:
        """Update the record with this id, or append it if missing."""
        with self._lock:
            updated = self.update(entity_type, record_id, record, id_field=id_field)
            if updated is None:
                self.append(entity_type, record)
                return record
            return updated
