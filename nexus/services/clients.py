"""Client accounts service."""

from __future__ import annotations

from operator import attrgetter

from ..contracts import ApiResponse
from ..models import Client, ClientMetrics
from ..query import QueryFields
from .base import ApiService

CLIENT_FIELDS = QueryFields[Client](
    search={
        "name": attrgetter("name"),
        "url": attrgetter("url"),
    },
    sort={
        "name": attrgetter("name"),
        "url": attrgetter("url"),
        "contract_start_date": attrgetter("contract_start_date"),
        "total_workflows": attrgetter("total_workflows"),
        "total_nodes": attrgetter("total_nodes"),
        "executions": attrgetter("executions"),
        "exceptions": attrgetter("exceptions"),
        "total_revenue": attrgetter("total_revenue"),
        "time_saved": attrgetter("time_saved"),
        "money_saved": attrgetter("money_saved"),
        "created_at": attrgetter("created_at"),
        "updated_at": attrgetter("updated_at"),
    },
)


class ClientApiService(ApiService[Client]):
    model = Client
    entity = "Client"
    id_prefix = "client"
    fields = CLIENT_FIELDS

    async def get_dashboard_metrics(self) -> ApiResponse[ClientMetrics]:
        """Totals across every client account."""
        await self._delay("stats")
        clients = self.repository.list()
        metrics = ClientMetrics(
            total_clients=len(clients),
            total_workflows=sum(c.total_workflows for c in clients),
            total_executions=sum(c.executions for c in clients),
            total_revenue=sum(c.total_revenue for c in clients),
            total_exceptions=sum(c.exceptions for c in clients),
            total_time_saved=sum(c.time_saved for c in clients),
            total_money_saved=sum(c.money_saved for c in clients),
        )
        return ApiResponse.ok(metrics)
