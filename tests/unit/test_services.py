"""Tests for the mock API services over a seeded store."""

import pytest
from pydantic import ValidationError

from nexus.config import LatencyConfig
from nexus.errors import InvalidQueryError
from nexus.fixtures import TIME_FILTERS, FixtureStore, seed_store
from nexus.persistence import InMemoryRepository
from nexus.query import ListQuery
from nexus.services import base
from nexus.services import (
    ClientApiService,
    DashboardService,
    ExceptionApiService,
    PipelineApiService,
    SubscriptionApiService,
    UserApiService,
    WorkflowApiService,
)

NO_LATENCY = LatencyConfig(enabled=False)


def _store() -> FixtureStore:
    return seed_store()


# ----------------------------------------------------------------------
# Generic CRUD through the client service


@pytest.mark.asyncio
async def test_get_all_defaults():
    service = ClientApiService(_store().clients, NO_LATENCY)
    response = await service.get_all()
    assert response.success is True
    assert [c.id for c in response.data] == ["client-1", "client-2", "client-3"]
    assert response.pagination.total == 3
    assert response.pagination.total_pages == 1


@pytest.mark.asyncio
async def test_get_all_accepts_wire_sort_names():
    service = ClientApiService(_store().clients, NO_LATENCY)
    by_field = await service.get_all(ListQuery(sort_by="total_revenue", sort_order="desc"))
    by_alias = await service.get_all(ListQuery(sort_by="totalRevenue", sort_order="desc"))
    assert [c.name for c in by_field.data] == ["Acme Corporation", "Global Industries", "TechStart Inc"]
    assert by_alias.data == by_field.data


@pytest.mark.asyncio
async def test_get_all_propagates_invalid_queries():
    service = ClientApiService(_store().clients, NO_LATENCY)
    with pytest.raises(InvalidQueryError):
        await service.get_all(ListQuery(page=0))
    with pytest.raises(InvalidQueryError):
        await service.get_all(ListQuery(sort_by="departments"))
    with pytest.raises(InvalidQueryError):
        await service.get_all(region="emea")


@pytest.mark.asyncio
async def test_get_by_id_and_not_found():
    service = ClientApiService(_store().clients, NO_LATENCY)
    found = await service.get_by_id("client-2")
    assert found.success is True
    assert found.data.name == "Global Industries"

    missing = await service.get_by_id("client-99")
    assert missing.success is False
    assert missing.data is None
    assert missing.error == "Client not found"


@pytest.mark.asyncio
async def test_create_then_read():
    store = _store()
    service = ClientApiService(store.clients, NO_LATENCY)
    created = await service.create(
        {
            "name": "Initech",
            "url": "https://initech.com",
            "contractStartDate": "2025-01-01T00:00:00Z",
            "id": "ignored",
        }
    )
    assert created.success is True
    assert created.message == "Client created successfully"
    client = created.data
    assert client.id.startswith("client-")
    assert client.id != "ignored"
    assert client.created_at == client.updated_at

    fetched = await service.get_by_id(client.id)
    assert fetched.data == client
    assert len(store.clients) == 4
    assert store.clients.list()[-1].id == client.id

    searched = await service.get_all(ListQuery(search="initech"))
    assert len(searched.data) == 1
    assert searched.data[0].id == client.id
    assert searched.pagination.total == 1


@pytest.mark.asyncio
async def test_get_all_is_idempotent_on_unchanged_store():
    service = UserApiService(_store().users, NO_LATENCY)
    query = ListQuery(search="example", sort_by="name", sort_order="desc", page=1, limit=2)
    first = await service.get_all(query, role="se")
    second = await service.get_all(query, role="se")
    assert first.data == second.data
    assert first.pagination == second.pagination
    assert [u.name for u in first.data] == ["Sarah Johnson", "John Smith"]


@pytest.mark.asyncio
async def test_create_rejects_invalid_payload():
    store = _store()
    service = ClientApiService(store.clients, NO_LATENCY)
    with pytest.raises(ValidationError):
        await service.create({"name": "No URL", "contractStartDate": "2025-01-01T00:00:00Z"})
    assert len(store.clients) == 3


@pytest.mark.asyncio
async def test_update_merges_and_keeps_id():
    store = _store()
    service = ClientApiService(store.clients, NO_LATENCY)
    before = store.clients.get("client-1")

    response = await service.update("client-1", {"name": "Acme Corp", "id": "client-9"})
    assert response.success is True
    assert response.message == "Client updated successfully"
    assert response.data.id == "client-1"
    assert response.data.name == "Acme Corp"
    assert response.data.url == before.url
    assert response.data.updated_at > before.updated_at
    assert store.clients.get("client-1").name == "Acme Corp"
    assert store.clients.get("client-9") is None


@pytest.mark.asyncio
async def test_update_and_delete_missing_leave_store_unchanged():
    store = _store()
    service = ClientApiService(store.clients, NO_LATENCY)
    snapshot = store.clients.list()

    updated = await service.update("nope", {"name": "x"})
    deleted = await service.delete("nope")
    assert updated.error == "Client not found"
    assert deleted.error == "Client not found"
    assert store.clients.list() == snapshot


@pytest.mark.asyncio
async def test_delete_removes_record():
    store = _store()
    service = ClientApiService(store.clients, NO_LATENCY)
    response = await service.delete("client-3")
    assert response.success is True
    assert response.data is None
    assert response.message == "Client deleted successfully"
    assert (await service.get_by_id("client-3")).success is False


@pytest.mark.asyncio
async def test_stores_are_isolated():
    first, second = _store(), _store()
    await ClientApiService(first.clients, NO_LATENCY).delete("client-1")
    assert len(first.clients) == 2
    assert len(second.clients) == 3


@pytest.mark.asyncio
async def test_latency_is_awaited(monkeypatch):
    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    monkeypatch.setattr(base.asyncio, "sleep", fake_sleep)
    service = ClientApiService(_store().clients, LatencyConfig(get_ms=250))
    await service.get_by_id("client-1")
    assert delays == [0.25]


# ----------------------------------------------------------------------
# Clients


@pytest.mark.asyncio
async def test_acme_and_global_scenario():
    clients = [c for c in _store().clients.list() if c.id in ("client-1", "client-2")]
    service = ClientApiService(InMemoryRepository(clients), NO_LATENCY)

    by_revenue = await service.get_all(ListQuery(sort_by="totalRevenue", sort_order="desc"))
    assert by_revenue.data[0].name == "Acme Corporation"

    searched = await service.get_all(ListQuery(search="global"))
    assert [c.name for c in searched.data] == ["Global Industries"]

    paged = await service.get_all(ListQuery(page=1, limit=1))
    assert paged.pagination.model_dump() == {"page": 1, "limit": 1, "total": 2, "total_pages": 2}


@pytest.mark.asyncio
async def test_client_dashboard_metrics():
    service = ClientApiService(_store().clients, NO_LATENCY)
    metrics = (await service.get_dashboard_metrics()).data
    assert metrics.total_clients == 3
    assert metrics.total_workflows == 25
    assert metrics.total_executions == 2847 + 1653 + 892
    assert metrics.total_revenue == 950000
    assert metrics.total_exceptions == 43
    assert metrics.total_money_saved == 370000


# ----------------------------------------------------------------------
# Users


@pytest.mark.asyncio
async def test_users_role_filter_and_search():
    service = UserApiService(_store().users, NO_LATENCY)
    ses = await service.get_all(role="se")
    assert [u.name for u in ses.data] == ["John Smith", "Sarah Johnson", "Alex Chen"]
    assert (await service.get_all(role="all")).pagination.total == 8

    searched = await service.get_all(ListQuery(search="USEBRAINTRUST"))
    assert {u.id for u in searched.data} == {"1", "6"}


@pytest.mark.asyncio
async def test_users_sorted_by_name():
    service = UserApiService(_store().users, NO_LATENCY)
    response = await service.get_all(ListQuery(sort_by="name", limit=3))
    assert [u.name for u in response.data] == ["Admin User", "Alex Chen", "Client User"]
    assert response.pagination.total_pages == 3


@pytest.mark.asyncio
async def test_user_stats():
    stats = (await UserApiService(_store().users, NO_LATENCY).get_stats()).data
    assert (stats.total_users, stats.total_admins, stats.total_ses, stats.total_clients) == (8, 2, 3, 3)


@pytest.mark.asyncio
async def test_user_create_rejects_unknown_role():
    service = UserApiService(_store().users, NO_LATENCY)
    with pytest.raises(ValidationError):
        await service.create({"email": "x@y.com", "name": "X", "role": "owner"})


# ----------------------------------------------------------------------
# Workflows


@pytest.mark.asyncio
async def test_workflow_filters():
    service = WorkflowApiService(_store().workflow_data, NO_LATENCY)
    hr = await service.get_all(department="HR")
    assert [w.workflow_name for w in hr.data] == ["Employee Onboarding"]
    assert (await service.get_all(status="inactive")).data == []
    assert (await service.get_all(department="all", status="active")).pagination.total == 2


@pytest.mark.asyncio
async def test_toggle_status_round_trip():
    store = _store()
    service = WorkflowApiService(store.workflow_data, NO_LATENCY)

    off = await service.toggle_status("1")
    assert off.data.status == "inactive"
    assert off.message == "Workflow deactivated successfully"
    assert store.workflow_data.get("1").status == "inactive"
    assert (await service.get_stats()).data.active_workflows == 1

    on = await service.toggle_status("1")
    assert on.data.status == "active"
    assert on.message == "Workflow activated successfully"

    missing = await service.toggle_status("99")
    assert missing.error == "Workflow not found"


@pytest.mark.asyncio
async def test_workflow_stats():
    stats = (await WorkflowApiService(_store().workflow_data, NO_LATENCY).get_stats()).data
    assert stats.total_workflows == 2
    assert stats.total_executions == 1690
    assert stats.total_exceptions == 28
    assert stats.total_cost_saved == 24570
    assert stats.active_workflows == 2


@pytest.mark.asyncio
async def test_pipeline_sorts_by_stage_order():
    service = PipelineApiService(_store().workflows, NO_LATENCY)
    asc = await service.get_all(ListQuery(sort_by="status"))
    assert [w.status for w in asc.data] == ["testing_started", "production_deploy"]

    finance = await service.get_all(department_id="dept-2")
    assert [w.id for w in finance.data] == ["workflow-1"]
    deployed = await service.get_all(status="production_deploy")
    assert [w.id for w in deployed.data] == ["workflow-1"]


# ----------------------------------------------------------------------
# Subscription plans


@pytest.mark.asyncio
async def test_plan_stats():
    stats = (await SubscriptionApiService(_store().plans, NO_LATENCY).get_stats()).data
    assert stats.total_plans == 3
    assert stats.total_clients == 85
    assert stats.average_setup_fee == pytest.approx(8500 / 3)
    assert stats.most_popular_pricing_model == "Usage"


@pytest.mark.asyncio
async def test_plan_stats_on_empty_store():
    stats = (await SubscriptionApiService(InMemoryRepository(), NO_LATENCY).get_stats()).data
    assert stats.total_plans == 0
    assert stats.average_setup_fee == 0
    assert stats.most_popular_pricing_model == "Fixed"


@pytest.mark.asyncio
async def test_plan_messages_use_entity_label():
    service = SubscriptionApiService(_store().plans, NO_LATENCY)
    assert (await service.get_by_id("9")).error == "Subscription plan not found"
    updated = await service.update("2", {"setupFee": 3000})
    assert updated.message == "Subscription plan updated successfully"
    assert updated.data.setup_fee == 3000


# ----------------------------------------------------------------------
# Exceptions


@pytest.mark.asyncio
async def test_exception_filters():
    service = ExceptionApiService(_store().exceptions, NO_LATENCY)
    open_ = await service.get_all(status="open")
    assert [e.id for e in open_.data] == ["exc-1"]
    by_workflow = await service.get_all(workflowId="workflow-1")
    assert [e.id for e in by_workflow.data] == ["exc-2"]


@pytest.mark.asyncio
async def test_resolve_exception():
    store = _store()
    service = ExceptionApiService(store.exceptions, NO_LATENCY)

    response = await service.resolve("exc-1", "Clarified with the client")
    assert response.success is True
    assert response.data.status == "resolved"
    assert response.data.resolution == "Clarified with the client"
    assert response.data.resolved_at is not None
    assert store.exceptions.get("exc-1").status == "resolved"

    again = await service.resolve("exc-1", "twice")
    assert again.success is False
    assert again.error == "Exception already resolved"
    assert (await service.resolve("exc-9", "x")).error == "Exception not found"


# ----------------------------------------------------------------------
# Dashboard


@pytest.mark.asyncio
async def test_dashboard_metrics():
    store = _store()
    service = DashboardService(store.dashboard_metrics, TIME_FILTERS, NO_LATENCY)
    response = await service.get_metrics("30d")
    assert response.success is True
    assert response.data.total_workflows == 25
    assert response.data.change("total_workflows") == 13.6
    assert response.data.change("active_clients") == 0.0

    unknown = await service.get_metrics("decade")
    assert unknown.error == "Unknown time filter: decade"
