"""Composition root wiring the fixture store, services and auth session."""

from __future__ import annotations

from typing import Optional

from .auth import AuthSession
from .config import NexusConfig, load_config
from .fixtures import TIME_FILTERS, FixtureStore, seed_store
from .persistence import KeyValueStorage, get_storage
from .services import (
    ClientApiService,
    DashboardService,
    ExceptionApiService,
    PipelineApiService,
    SubscriptionApiService,
    UserApiService,
    WorkflowApiService,
)

_app_instance: "Nexus | None" = None


class Nexus:
    """Services over one fixture store."""

    def __init__(
        self,
        config: Optional[NexusConfig] = None,
        store: Optional[FixtureStore] = None,
        storage: Optional[KeyValueStorage] = None,
    ) -> None:
        self.config = config or load_config()
        self.store = store or seed_store()
        latency = self.config.latency

        self.clients = ClientApiService(self.store.clients, latency)
        self.users = UserApiService(self.store.users, latency)
        self.workflows = WorkflowApiService(self.store.workflow_data, latency)
        self.pipeline = PipelineApiService(self.store.workflows, latency)
        self.plans = SubscriptionApiService(self.store.plans, latency)
        self.exceptions = ExceptionApiService(self.store.exceptions, latency)
        self.dashboard = DashboardService(self.store.dashboard_metrics, TIME_FILTERS, latency)

        self.storage = storage or get_storage(config=self.config)
        self.auth = AuthSession(self.storage, self.config.storage.session_key, latency)


def get_app(config: Optional[NexusConfig] = None) -> Nexus:
    """Return the process-wide :class:`Nexus`, building it on first use."""

    global _app_instance
    if _app_instance is not None and config is None:
        return _app_instance
    _app_instance = Nexus(config)
    return _app_instance
