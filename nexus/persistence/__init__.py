"""Persistence layer for Nexus entity collections and session storage."""

from __future__ import annotations

import os
from typing import Optional

from ..config import NexusConfig, load_config
from .inmemory import InMemoryRepository, InMemoryStorage
from .repository import KeyValueStorage, Repository
from .sqlite import SQLiteStorage


def get_storage(
    url: Optional[str] = None, config: Optional[NexusConfig] = None
) -> KeyValueStorage:
    """Factory function to obtain the durable key/value storage.

    The backend is selected based on ``url`` which can be provided
    explicitly, via environment variable ``NEXUS_STORAGE_URL``, or from
    loaded configuration. When no storage is configured, an in-memory
    storage is returned.
    """

    config = config or load_config()
    url = url or os.getenv("NEXUS_STORAGE_URL") or config.storage.url

    if not url:
        return InMemoryStorage()

    if url.startswith("sqlite://"):
        path = url.replace("sqlite://", "", 1)
        return SQLiteStorage(path)
    raise ValueError(f"Unsupported storage backend: {url}")


__all__ = [
    "Repository",
    "KeyValueStorage",
    "InMemoryRepository",
    "InMemoryStorage",
    "SQLiteStorage",
    "get_storage",
]
