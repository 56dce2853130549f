"""Mock API services, one per entity type."""

from .base import ApiService, simulate_api_delay
from .clients import ClientApiService
from .dashboard import DashboardService
from .subscriptions import SubscriptionApiService
from .users import UserApiService
from .workflow_exceptions import ExceptionApiService
from .workflows import PipelineApiService, WorkflowApiService

__all__ = [
    "ApiService",
    "ClientApiService",
    "DashboardService",
    "ExceptionApiService",
    "PipelineApiService",
    "SubscriptionApiService",
    "UserApiService",
    "WorkflowApiService",
    "simulate_api_delay",
]
