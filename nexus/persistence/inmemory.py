"""In-memory implementations of the storage protocols."""

from __future__ import annotations

from typing import Dict, Generic, Iterable, List, Optional

from .repository import KeyValueStorage, RecordT, Repository


class InMemoryRepository(Repository[RecordT], Generic[RecordT]):
    """Keep records in a local list.

    Data lives as long as the owning store and is not persisted across
    process restarts.
    """

    def __init__(self, records: Iterable[RecordT] = ()) -> None:
        self._records: List[RecordT] = list(records)

    def _index(self, record_id: str) -> int:
        for i, record in enumerate(self._records):
            if record.id == record_id:
                return i
        return -1

    # ------------------------------------------------------------------
    def list(self) -> list[RecordT]:
        return list(self._records)

    def get(self, record_id: str) -> Optional[RecordT]:
        i = self._index(record_id)
        return self._records[i] if i >= 0 else None

    def add(self, record: RecordT) -> None:
        self._records.append(record)

    def replace(self, record_id: str, record: RecordT) -> bool:
        i = self._index(record_id)
        if i < 0:
            return False
        self._records[i] = record
        return True

    def remove(self, record_id: str) -> bool:
        i = self._index(record_id)
        if i < 0:
            return False
        del self._records[i]
        return True

    def __len__(self) -> int:
        return len(self._records)


class InMemoryStorage(KeyValueStorage):
    """Key/value storage held in a dict. Useful for tests."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)
