"""Seed data and the fixture store that stands in for a database."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from .models import (
    Client,
    DashboardMetrics,
    Department,
    SubscriptionPlan,
    TimeFilter,
    User,
    Workflow,
    WorkflowData,
    WorkflowException,
    WorkflowExecution,
    WorkflowNode,
)
from .persistence import InMemoryRepository


def _at(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


TIME_FILTERS = [
    TimeFilter(label="Last 7 days", value="7d"),
    TimeFilter(label="Last 30 days", value="30d"),
    TimeFilter(label="MTD", value="mtd"),
    TimeFilter(label="QTD", value="qtd"),
    TimeFilter(label="YTD", value="ytd"),
    TimeFilter(label="ITD", value="itd"),
]

DEFAULT_DASHBOARD_METRICS = DashboardMetrics(
    total_workflows=25,
    total_exceptions=43,
    time_saved=2460,
    revenue=950000,
    active_clients=3,
    previous_period_comparison=dict(
        total_workflows=22,
        total_exceptions=38,
        time_saved=2100,
        revenue=850000,
        active_clients=3,
    ),
)


def seed_clients() -> list[Client]:
    return [
        Client(
            id="client-1",
            name="Acme Corporation",
            url="https://acme.com",
            contract_start_date=_at("2024-01-15"),
            total_workflows=12,
            total_nodes=45,
            executions=2847,
            exceptions=23,
            total_revenue=450000,
            time_saved=1200,
            money_saved=180000,
            departments=[
                Department(id="dept-1", name="Customer Service", client_id="client-1"),
                Department(id="dept-2", name="Finance", client_id="client-1"),
            ],
            created_at=_at("2024-01-15"),
            updated_at=_at("2024-12-01"),
        ),
        Client(
            id="client-2",
            name="Global Industries",
            url="https://globalind.com",
            contract_start_date=_at("2024-03-10"),
            total_workflows=8,
            total_nodes=28,
            executions=1653,
            exceptions=12,
            total_revenue=320000,
            time_saved=840,
            money_saved=125000,
            departments=[Department(id="dept-3", name="HR", client_id="client-2")],
            created_at=_at("2024-03-10"),
            updated_at=_at("2024-12-01"),
        ),
        Client(
            id="client-3",
            name="TechStart Inc",
            url="https://techstart.io",
            contract_start_date=_at("2024-06-01"),
            total_workflows=5,
            total_nodes=18,
            executions=892,
            exceptions=8,
            total_revenue=180000,
            time_saved=420,
            money_saved=65000,
            departments=[Department(id="dept-4", name="Operations", client_id="client-3")],
            created_at=_at("2024-06-01"),
            updated_at=_at("2024-12-01"),
        ),
    ]


def seed_exceptions() -> list[WorkflowException]:
    return [
        WorkflowException(
            id="exc-1",
            workflow_id="workflow-2",
            message="Unable to classify ticket priority",
            details="Ticket content was unclear and required human review",
            status="open",
            assigned_to="se@contractor.com",
            created_at=_at("2024-11-28"),
        ),
        WorkflowException(
            id="exc-2",
            workflow_id="workflow-1",
            message="Bill.com API timeout",
            details="API call exceeded 30 second timeout limit",
            status="resolved",
            assigned_to="client@company.com",
            resolution="Increased timeout limit and retried successfully",
            created_at=_at("2024-11-25"),
            resolved_at=_at("2024-11-26"),
        ),
    ]


def seed_workflows() -> list[Workflow]:
    return [
        Workflow(
            id="workflow-1",
            name="Invoice Processing Automation",
            description="Automatically process incoming invoices from email and integrate with accounting system",
            status="production_deploy",
            department_id="dept-2",
            nodes=[
                WorkflowNode(
                    id="node-1",
                    type="email_monitor",
                    name="Email Monitor",
                    description="Monitor inbox for invoice emails",
                    config={"inbox": "invoices@acme.com"},
                    workflow_id="workflow-1",
                ),
                WorkflowNode(
                    id="node-2",
                    type="bill_com_api",
                    name="Bill.com Integration",
                    description="Post invoices to Bill.com",
                    config={"apiKey": "encrypted"},
                    workflow_id="workflow-1",
                ),
            ],
            executions=[
                WorkflowExecution(
                    id="exec-1",
                    workflow_id="workflow-1",
                    status="success",
                    start_time=_at("2024-12-01T09:00:00"),
                    end_time=_at("2024-12-01T09:05:00"),
                    logs=["Started execution", "Email processed", "Invoice posted to Bill.com"],
                    time_saved=25,
                )
            ],
            created_at=_at("2024-01-20"),
            updated_at=_at("2024-12-01"),
        ),
        Workflow(
            id="workflow-2",
            name="Customer Support Ticket Routing",
            description="Automatically route support tickets based on priority and category",
            status="testing_started",
            department_id="dept-1",
            nodes=[
                WorkflowNode(
                    id="node-3",
                    type="custom_agent",
                    name="Support Agent",
                    description="AI agent for ticket classification",
                    config={"model": "gpt-4"},
                    workflow_id="workflow-2",
                )
            ],
            exceptions=[seed_exceptions()[0]],
            created_at=_at("2024-02-15"),
            updated_at=_at("2024-11-28"),
        ),
    ]


def _avatar(seed: str, background: str) -> str:
    return f"https://api.dicebear.com/7.x/avataaars/svg?seed={seed}&backgroundColor={background}"


def seed_users() -> list[User]:
    rows = [
        ("1", "admin@usebraintrust.com", "Admin User", "admin", "+1 234 567 8900", 120, 200, "admin", "b6e3f4", {}, "2024-01-01"),
        ("2", "john@example.com", "John Smith", "se", "+1 234 567 8900", 75, 150, "john", "c0aede", {"assigned_clients": ["client-1", "client-2"]}, "2024-01-15"),
        ("3", "client@company.com", "Client User", "client", "+1 234 567 8901", None, None, "client", "ffd93d", {"company_id": "client-1"}, "2024-02-01"),
        ("4", "sarah@example.com", "Sarah Johnson", "se", "+1 234 567 8902", 80, 160, "sarah", "ffb3ba", {"assigned_clients": ["client-1"]}, "2024-03-01"),
        ("5", "mike@globalind.com", "Mike Wilson", "client", "+1 234 567 8903", None, None, "mike", "bae1ff", {"company_id": "client-2"}, "2024-03-15"),
        ("6", "emma@usebraintrust.com", "Emma Davis", "admin", "+1 234 567 8904", 125, 210, "emma", "caffbf", {}, "2024-04-01"),
        ("7", "alex@example.com", "Alex Chen", "se", "+1 234 567 8905", 78, 155, "alex", "f4a261", {"assigned_clients": ["client-2"]}, "2024-04-15"),
        ("8", "lisa@techcorp.com", "Lisa Rodriguez", "client", "+1 234 567 8906", None, None, "lisa", "e76f51", {"company_id": "client-3"}, "2024-05-01"),
    ]
    return [
        User(
            id=user_id,
            email=email,
            name=name,
            role=role,
            phone=phone,
            cost_rate=cost_rate,
            bill_rate=bill_rate,
            avatar=_avatar(seed, background),
            created_at=_at(created),
            updated_at=_at("2024-12-01"),
            **extra,
        )
        for user_id, email, name, role, phone, cost_rate, bill_rate, seed, background, extra, created in rows
    ]


def seed_plans() -> list[SubscriptionPlan]:
    return [
        SubscriptionPlan(
            id="1",
            name="Enterprise Pro",
            pricing_model="Tiered",
            contract_length=2,
            contract_cadence="Quarter",
            billing_cadence="Monthly",
            setup_fee=5000,
            prepayment_percent=25,
            cap=100000,
            overage_cost=150,
            clients=12,
        ),
        SubscriptionPlan(
            id="2",
            name="Business Plus",
            pricing_model="Fixed",
            contract_length=6,
            contract_cadence="Month",
            billing_cadence="Quarterly",
            setup_fee=2500,
            prepayment_percent=15,
            cap=50000,
            overage_cost=125,
            clients=28,
        ),
        SubscriptionPlan(
            id="3",
            name="Starter",
            pricing_model="Usage",
            contract_length=3,
            contract_cadence="Year",
            billing_cadence="Monthly",
            setup_fee=1000,
            prepayment_percent=10,
            cap=25000,
            overage_cost=100,
            clients=45,
        ),
    ]


def seed_workflow_data() -> list[WorkflowData]:
    return [
        WorkflowData(
            id="1",
            create_date_time="2025-05-14 09:30",
            department="Finance",
            workflow_name="Invoice Processing",
            description="Automated invoice processing workflow",
            nodes=12,
            executions=1234,
            exceptions=23,
            time_saved=156.5,
            cost_saved=15650,
            status="active",
        ),
        WorkflowData(
            id="2",
            create_date_time="2025-05-13 14:15",
            department="HR",
            workflow_name="Employee Onboarding",
            description="New employee onboarding automation",
            nodes=8,
            executions=456,
            exceptions=5,
            time_saved=89.2,
            cost_saved=8920,
            status="active",
        ),
    ]


@dataclass
class FixtureStore:
    """Repositories backing the mock services.

    Owned by the composition root and passed to each service, so every store
    instance is isolated from the others.
    """

    clients: InMemoryRepository[Client] = field(default_factory=InMemoryRepository)
    users: InMemoryRepository[User] = field(default_factory=InMemoryRepository)
    workflows: InMemoryRepository[Workflow] = field(default_factory=InMemoryRepository)
    exceptions: InMemoryRepository[WorkflowException] = field(default_factory=InMemoryRepository)
    plans: InMemoryRepository[SubscriptionPlan] = field(default_factory=InMemoryRepository)
    workflow_data: InMemoryRepository[WorkflowData] = field(default_factory=InMemoryRepository)
    dashboard_metrics: DashboardMetrics = field(
        default_factory=lambda: DEFAULT_DASHBOARD_METRICS.model_copy(deep=True)
    )


def seed_store() -> FixtureStore:
    """Build a fresh store populated with the demo fixtures."""
    return FixtureStore(
        clients=InMemoryRepository(seed_clients()),
        users=InMemoryRepository(seed_users()),
        workflows=InMemoryRepository(seed_workflows()),
        exceptions=InMemoryRepository(seed_exceptions()),
        plans=InMemoryRepository(seed_plans()),
        workflow_data=InMemoryRepository(seed_workflow_data()),
    )
