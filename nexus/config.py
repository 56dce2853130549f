from __future__ import annotations

import os
from typing import Optional

import yaml
from pydantic import BaseModel, Field


class LatencyConfig(BaseModel):
    """Simulated network latency per service operation, in milliseconds."""

    enabled: bool = True
    list_ms: int = 300
    get_ms: int = 200
    stats_ms: int = 400
    create_ms: int = 600
    update_ms: int = 500
    delete_ms: int = 300
    toggle_ms: int = 300
    login_ms: int = 1000

    def delay_for(self, operation: str) -> int:
        """Return the delay for ``operation`` or ``0`` when disabled."""
        if not self.enabled:
            return 0
        return getattr(self, f"{operation}_ms", 0)


class StorageConfig(BaseModel):
    """Durable storage used for the session user."""

    url: Optional[str] = None
    session_key: str = "nexus_user"


class NexusConfig(BaseModel):
    """Top-level configuration model."""

    latency: LatencyConfig = Field(default_factory=LatencyConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    log_level: str = "WARNING"


def load_config(path: Optional[str] = None) -> NexusConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to NEXUS_CONFIG env
            variable or 'config.yaml' in the current directory.
    """

    config_path = path or os.getenv("NEXUS_CONFIG", "config.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = NexusConfig(**data)
    else:
        config = NexusConfig()

    env_storage_url = os.getenv("NEXUS_STORAGE_URL")
    if env_storage_url:
        config.storage.url = env_storage_url
    env_log_level = os.getenv("NEXUS_LOG_LEVEL")
    if env_log_level:
        config.log_level = env_log_level.upper()
    return config
