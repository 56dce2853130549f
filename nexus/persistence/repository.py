"""Storage abstractions for entity collections and the session store."""

from __future__ import annotations

from typing import Optional, Protocol, TypeVar

from pydantic import BaseModel

RecordT = TypeVar("RecordT", bound=BaseModel)


class Repository(Protocol[RecordT]):
    """Protocol for an ordered collection of records keyed by ``id``."""

    def list(self) -> list[RecordT]:
        """Return all records in insertion order."""

    def get(self, record_id: str) -> Optional[RecordT]:
        """Return the record with ``record_id`` if present."""

    def add(self, record: RecordT) -> None:
        """Append a new record."""

    def replace(self, record_id: str, record: RecordT) -> bool:
        """Swap the stored record in place. ``False`` if it does not exist."""

    def remove(self, record_id: str) -> bool:
        """Delete the record. ``False`` if it does not exist."""


class KeyValueStorage(Protocol):
    """Durable string key/value storage for client-side state."""

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value or ``None``."""

    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``."""

    def remove_item(self, key: str) -> None:
        """Delete ``key`` if present."""
