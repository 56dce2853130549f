"""Generic mock API service bound to one entity repository."""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, Generic, Mapping, Optional, Type

from ..config import LatencyConfig
from ..contracts import ApiResponse, PaginatedResponse
from ..persistence.repository import RecordT, Repository
from ..query import ListQuery, QueryFields, run_query

logger = logging.getLogger(__name__)


async def simulate_api_delay(ms: int) -> None:
    """Stand-in for network latency."""
    if ms > 0:
        await asyncio.sleep(ms / 1000)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApiService(Generic[RecordT]):
    """CRUD and list endpoints over a single repository.

    Subclasses declare the entity ``model``, a human readable ``entity``
    label used in messages, the ``id_prefix`` for new records and the
    ``fields`` the list endpoint may search, sort and filter on.

    Expected failures (unknown ids) come back as ``success=False`` envelopes.
    Anything else, such as an invalid payload, raises.
    """

    model: ClassVar[Type[Any]]
    entity: ClassVar[str] = "Record"
    id_prefix: ClassVar[str] = "record"
    fields: ClassVar[QueryFields]

    def __init__(
        self,
        repository: Repository[RecordT],
        latency: Optional[LatencyConfig] = None,
    ) -> None:
        self.repository = repository
        self.latency = latency or LatencyConfig()

    # ------------------------------------------------------------------
    # Helpers
    async def _delay(self, operation: str) -> None:
        await simulate_api_delay(self.latency.delay_for(operation))

    def _not_found(self) -> ApiResponse:
        logger.debug(f"{self.entity} lookup missed")
        return ApiResponse.fail(f"{self.entity} not found")

    def _field_name(self, key: str) -> str:
        """Map a camelCase wire name to the model attribute name."""
        for name, info in self.model.model_fields.items():
            if info.alias == key:
                return name
        return key

    def _normalise(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        data = {self._field_name(key): value for key, value in payload.items()}
        data.pop("id", None)
        return data

    def _new_id(self) -> str:
        while True:
            record_id = f"{self.id_prefix}-{uuid.uuid4().hex[:12]}"
            if self.repository.get(record_id) is None:
                return record_id

    def _has_field(self, name: str) -> bool:
        return name in self.model.model_fields

    # ------------------------------------------------------------------
    # Endpoints
    async def get_all(
        self, query: Optional[ListQuery] = None, **filters: Any
    ) -> PaginatedResponse[RecordT]:
        """Search, sort and paginate the collection.

        Keyword arguments are equality filters declared in ``fields``.
        """
        await self._delay("list")
        if query is not None and query.sort_by:
            query = query.model_copy(update={"sort_by": self._field_name(query.sort_by)})
        filters = {self._field_name(name): value for name, value in filters.items()}
        page = run_query(self.repository.list(), query, self.fields, filters)
        return PaginatedResponse(success=True, data=page.data, pagination=page.pagination)

    async def get_by_id(self, record_id: str) -> ApiResponse[RecordT]:
        await self._delay("get")
        record = self.repository.get(record_id)
        if record is None:
            return self._not_found()
        return ApiResponse.ok(record)

    async def create(self, payload: Mapping[str, Any]) -> ApiResponse[RecordT]:
        """Validate ``payload`` into a new record and append it to the store."""
        await self._delay("create")
        data = self._normalise(payload)
        data["id"] = self._new_id()
        now = utcnow()
        for stamp in ("created_at", "updated_at"):
            if self._has_field(stamp):
                data[stamp] = now
        record = self.model.model_validate(data)
        self.repository.add(record)
        logger.info(f"Created {self.entity.lower()} {record.id}")
        return ApiResponse.ok(record, message=f"{self.entity} created successfully")

    async def update(
        self, record_id: str, partial: Mapping[str, Any]
    ) -> ApiResponse[RecordT]:
        """Merge ``partial`` into the stored record and write it back."""
        await self._delay("update")
        current = self.repository.get(record_id)
        if current is None:
            return self._not_found()
        changes = self._normalise(partial)
        if self._has_field("updated_at"):
            changes["updated_at"] = utcnow()
        record = self.model.model_validate({**current.model_dump(), **changes})
        self.repository.replace(record_id, record)
        logger.info(f"Updated {self.entity.lower()} {record_id}")
        return ApiResponse.ok(record, message=f"{self.entity} updated successfully")

    async def delete(self, record_id: str) -> ApiResponse[None]:
        await self._delay("delete")
        if not self.repository.remove(record_id):
            return self._not_found()
        logger.info(f"Deleted {self.entity.lower()} {record_id}")
        return ApiResponse.ok(None, message=f"{self.entity} deleted successfully")
