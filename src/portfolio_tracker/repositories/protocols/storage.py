"""Persistence backend protocol."""

from typing import Any, Optional, Protocol


class StorageBackend(Protocol):
    """
    Minimal key-value persistence contract.

    Reads return the full current collection; writes are durable before
    the call returns.
    """

    def read_all(self, entity_type: str) -> list[dict[str, Any]]:
        """Return every record of an entity type (empty list if none)."""
        ...

    def append(self, entity_type: str, record: dict[str, Any]) -> None:
        """Append one record."""
        ...

    def update(
        self,
        entity_type: str,
        record_id: str,
        patch: dict[str, Any],
        id_field: str = "id",
    ) -> Optional[dict[str, Any]]:
        """Merge `patch` into the record with this id; None if absent."""
        ...

    def write_all(self, entity_type: str, records: list[dict[str, Any]]) -> None:
        """Replace the whole collection."""
        ...

    def upsert(
        self,
        entity_type: str,
        record_id: str,
        record: dict[str, Any],
        id_field: str = "id",
    ) -> dict[str, Any]:
        """Update the record with this id, or append it if missing."""
        ...
