"""Response envelopes returned by every service call."""

from __future__ import annotations

from math import ceil
from typing import Any, Generic, List, Optional, TypeVar

from .models import NexusModel

T = TypeVar("T")


class Pagination(NexusModel):
    """Pagination metadata for a list response."""

    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, total_pages=ceil(total / limit))


class ApiResponse(NexusModel, Generic[T]):
    """Uniform envelope. Callers branch on ``success``."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None) -> "ApiResponse":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: str) -> "ApiResponse":
        return cls(success=False, data=None, error=error)

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the JSON boundary shape.

        Keys are camelCase, unset optional keys are omitted and ``data`` is
        always present.
        """
        wire = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        wire.setdefault("data", None)
        return wire


class PaginatedResponse(ApiResponse[List[T]], Generic[T]):
    """List envelope with pagination metadata."""

    data: List[T]
    pagination: Pagination
