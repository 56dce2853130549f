"""Workflow exception service."""

from __future__ import annotations

import logging
from operator import attrgetter
from typing import Optional

from ..contracts import ApiResponse
from ..models import WorkflowException
from ..query import QueryFields
from .base import ApiService, utcnow

logger = logging.getLogger(__name__)

EXCEPTION_FIELDS = QueryFields[WorkflowException](
    search={
        "message": attrgetter("message"),
        "details": attrgetter("details"),
        "assigned_to": attrgetter("assigned_to"),
    },
    sort={
        "message": attrgetter("message"),
        "status": attrgetter("status"),
        "assigned_to": attrgetter("assigned_to"),
        "created_at": attrgetter("created_at"),
        "resolved_at": attrgetter("resolved_at"),
    },
    filters={
        "status": attrgetter("status"),
        "workflow_id": attrgetter("workflow_id"),
    },
)


class ExceptionApiService(ApiService[WorkflowException]):
    model = WorkflowException
    entity = "Exception"
    id_prefix = "exc"
    fields = EXCEPTION_FIELDS

    async def resolve(
        self, record_id: str, resolution: str, assigned_to: Optional[str] = None
    ) -> ApiResponse[WorkflowException]:
        """Close an open exception with ``resolution``."""
        await self._delay("update")
        current = self.repository.get(record_id)
        if current is None:
            return self._not_found()
        if current.status == "resolved":
            return ApiResponse.fail("Exception already resolved")
        updated = current.model_copy(
            update={
                "status": "resolved",
                "resolution": resolution,
                "resolved_at": utcnow(),
                "assigned_to": assigned_to or current.assigned_to,
            }
        )
        self.repository.replace(record_id, updated)
        logger.info(f"Resolved exception {record_id}")
        return ApiResponse.ok(updated, message="Exception resolved successfully")
