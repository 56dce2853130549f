"""Services for the workflow ROI table and the delivery pipeline."""

from __future__ import annotations

import logging
from operator import attrgetter

from ..contracts import ApiResponse
from ..models import Workflow, WorkflowData, WorkflowStats
from ..query import QueryFields
from .base import ApiService

logger = logging.getLogger(__name__)

WORKFLOW_FIELDS = QueryFields[WorkflowData](
    search={
        "workflow_name": attrgetter("workflow_name"),
        "description": attrgetter("description"),
        "department": attrgetter("department"),
    },
    sort={
        "workflow_name": attrgetter("workflow_name"),
        "department": attrgetter("department"),
        "create_date_time": attrgetter("create_date_time"),
        "nodes": attrgetter("nodes"),
        "executions": attrgetter("executions"),
        "exceptions": attrgetter("exceptions"),
        "time_saved": attrgetter("time_saved"),
        "cost_saved": attrgetter("cost_saved"),
        "status": attrgetter("status"),
    },
    filters={
        "department": attrgetter("department"),
        "status": attrgetter("status"),
    },
)


class WorkflowApiService(ApiService[WorkflowData]):
    """Workflows as listed in the client ROI table."""

    model = WorkflowData
    entity = "Workflow"
    id_prefix = "workflow"
    fields = WORKFLOW_FIELDS

    async def get_stats(self) -> ApiResponse[WorkflowStats]:
        await self._delay("stats")
        rows = self.repository.list()
        stats = WorkflowStats(
            total_workflows=len(rows),
            total_executions=sum(w.executions for w in rows),
            total_exceptions=sum(w.exceptions for w in rows),
            total_time_saved=sum(w.time_saved for w in rows),
            total_cost_saved=sum(w.cost_saved for w in rows),
            active_workflows=sum(1 for w in rows if w.status == "active"),
        )
        return ApiResponse.ok(stats)

    async def toggle_status(self, record_id: str) -> ApiResponse[WorkflowData]:
        """Flip a workflow between active and inactive."""
        await self._delay("toggle")
        current = self.repository.get(record_id)
        if current is None:
            return self._not_found()
        new_status = "inactive" if current.status == "active" else "active"
        updated = current.model_copy(update={"status": new_status})
        self.repository.replace(record_id, updated)
        verb = "activated" if new_status == "active" else "deactivated"
        logger.info(f"Workflow {record_id} {verb}")
        return ApiResponse.ok(updated, message=f"Workflow {verb} successfully")


PIPELINE_FIELDS = QueryFields[Workflow](
    search={
        "name": attrgetter("name"),
        "description": attrgetter("description"),
    },
    sort={
        "name": attrgetter("name"),
        # pipeline order rather than alphabetical
        "status": attrgetter("stage_index"),
        "created_at": attrgetter("created_at"),
        "updated_at": attrgetter("updated_at"),
    },
    filters={
        "status": attrgetter("status"),
        "department_id": attrgetter("department_id"),
    },
)


class PipelineApiService(ApiService[Workflow]):
    """Workflows as tracked through the delivery pipeline."""

    model = Workflow
    entity = "Workflow"
    id_prefix = "workflow"
    fields = PIPELINE_FIELDS
