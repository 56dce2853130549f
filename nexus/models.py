"""Pydantic models describing the dashboard entities."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Role = Literal["admin", "se", "client"]

WorkflowStatus = Literal[
    "design_approved",
    "requirements_gathering",
    "technical_design",
    "development",
    "code_review",
    "client_review",
    "testing_plan",
    "testing_started",
    "production_deploy",
]

# Pipeline stages in delivery order.
WORKFLOW_STAGES: tuple[str, ...] = get_args(WorkflowStatus)

NodeType = Literal[
    "email_monitor",
    "salesforce_api",
    "kronos_api",
    "ariba_api",
    "bill_com_api",
    "custom_agent",
]


class NexusModel(BaseModel):
    """Base model; serialises to the camelCase keys used on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class User(NexusModel):
    """Portal user. Optional fields depend on ``role``."""

    id: str
    email: str
    name: str
    role: Role
    phone: Optional[str] = None
    cost_rate: Optional[float] = None
    bill_rate: Optional[float] = None
    avatar: Optional[str] = None
    # client users only; not checked against existing clients
    company_id: Optional[str] = None
    # solutions engineers only
    assigned_clients: Optional[List[str]] = None
    created_at: datetime
    updated_at: datetime


class WorkflowNode(NexusModel):
    """Typed unit of automation logic inside a workflow."""

    id: str
    type: NodeType
    name: str
    description: str = ""
    config: dict[str, Any] = Field(default_factory=dict)
    workflow_id: str


class WorkflowExecution(NexusModel):
    """One run of a workflow."""

    id: str
    workflow_id: str
    status: Literal["success", "failed", "running"]
    start_time: datetime
    end_time: Optional[datetime] = None
    logs: List[str] = Field(default_factory=list)
    time_saved: Optional[float] = None


class WorkflowException(NexusModel):
    """Error raised while a workflow executed."""

    id: str
    workflow_id: str
    message: str
    details: str = ""
    status: Literal["open", "resolved"] = "open"
    assigned_to: Optional[str] = None
    resolution: Optional[str] = None
    created_at: datetime
    resolved_at: Optional[datetime] = None


class Workflow(NexusModel):
    """Automation workflow moving through the delivery pipeline."""

    id: str
    name: str
    description: str = ""
    status: WorkflowStatus
    # not enforced against existing departments
    department_id: str
    nodes: List[WorkflowNode] = Field(default_factory=list)
    executions: List[WorkflowExecution] = Field(default_factory=list)
    exceptions: List[WorkflowException] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @property
    def stage_index(self) -> int:
        return WORKFLOW_STAGES.index(self.status)


class Department(NexusModel):
    id: str
    name: str
    client_id: str
    workflows: List[Workflow] = Field(default_factory=list)


class Client(NexusModel):
    """Client account.

    The counters and financial figures are snapshots maintained alongside the
    account; they are not computed from workflow records.
    """

    id: str
    name: str
    url: str
    contract_start_date: datetime
    total_workflows: int = 0
    total_nodes: int = 0
    executions: int = 0
    exceptions: int = 0
    total_revenue: float = 0
    time_saved: float = 0
    money_saved: float = 0
    departments: List[Department] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class SubscriptionPlan(NexusModel):
    """Billing plan template. Not linked to the clients that hold it."""

    id: str
    name: str
    pricing_model: Literal["Tiered", "Fixed", "Usage"]
    contract_length: int
    contract_cadence: Literal["Month", "Quarter", "Year"]
    billing_cadence: Literal["Monthly", "Quarterly", "Annually"]
    setup_fee: float
    prepayment_percent: float
    cap: float
    overage_cost: float
    clients: int = 0


class WorkflowData(NexusModel):
    """Row of the client ROI table."""

    id: str
    create_date_time: str
    department: str
    workflow_name: str
    description: str = ""
    nodes: int = 0
    executions: int = 0
    exceptions: int = 0
    time_saved: float = 0
    cost_saved: float = 0
    status: Literal["active", "inactive"] = "active"


class PeriodMetrics(NexusModel):
    total_workflows: int
    total_exceptions: int
    time_saved: float
    revenue: float
    active_clients: int


class DashboardMetrics(PeriodMetrics):
    """Headline metrics with the previous period for comparison."""

    previous_period_comparison: PeriodMetrics

    def change(self, metric: str) -> Optional[float]:
        """Percentage change of ``metric`` against the previous period.

        Returns ``None`` when the previous value is zero.
        """
        current = getattr(self, metric)
        previous = getattr(self.previous_period_comparison, metric)
        if not previous:
            return None
        return round((current - previous) / previous * 100, 1)


class TimeFilter(NexusModel):
    label: str
    value: Literal["7d", "30d", "mtd", "qtd", "ytd", "itd"]


# ----------------------------------------------------------------------
# Aggregates returned by the stats endpoints


class ClientMetrics(NexusModel):
    total_clients: int
    total_workflows: int
    total_executions: int
    total_revenue: float
    total_exceptions: int
    total_time_saved: float
    total_money_saved: float


class UserStats(NexusModel):
    total_users: int
    total_admins: int
    total_ses: int
    total_clients: int


class WorkflowStats(NexusModel):
    total_workflows: int
    total_executions: int
    total_exceptions: int
    total_time_saved: float
    total_cost_saved: float
    active_workflows: int


class PlanStats(NexusModel):
    total_plans: int
    total_clients: int
    average_setup_fee: float
    most_popular_pricing_model: str
