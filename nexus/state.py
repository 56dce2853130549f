"""Async state containers that drive the dashboard views.

A container owns the query for one view, issues fetches against a service
and exposes ``data``, ``loading``, ``error`` and ``pagination`` for
rendering. Every fetch is numbered; a response that arrives after a newer
fetch was issued is discarded, so the most recent query always wins.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, TypeVar

from .contracts import ApiResponse, PaginatedResponse, Pagination
from .errors import InvalidQueryError
from .query import ListQuery, SortOrder
from .services import (
    ClientApiService,
    ExceptionApiService,
    SubscriptionApiService,
    UserApiService,
    WorkflowApiService,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

ListFetcher = Callable[..., Awaitable[PaginatedResponse[Any]]]
ResourceFetcher = Callable[[], Awaitable[ApiResponse[Any]]]

DEFAULT_ERROR = "An error occurred"


class _Sequenced:
    """Request numbering shared by the containers."""

    def __init__(self, label: str, auto_fetch: bool = True) -> None:
        self.label = label
        self.auto_fetch = auto_fetch
        self.loading = False
        self.error: Optional[str] = None
        self._issued = 0
        self._in_flight = 0

    async def mount(self) -> None:
        """Perform the initial fetch when ``auto_fetch`` is set."""
        if self.auto_fetch:
            await self.refetch()

    async def refetch(self) -> None:
        raise NotImplementedError

    def _begin(self) -> int:
        self._issued += 1
        self._in_flight += 1
        self.loading = True
        self.error = None
        return self._issued

    def _end(self) -> None:
        self._in_flight -= 1
        self.loading = self._in_flight > 0

    def _is_stale(self, ticket: int) -> bool:
        if ticket != self._issued:
            logger.debug(f"Discarding stale {self.label} response #{ticket} (latest #{self._issued})")
            return True
        return False

    def _fail(self, message: str) -> None:
        logger.warning(f"Fetching {self.label} failed: {message}")
        self.error = message


class ListState(_Sequenced, Generic[T]):
    """Paginated list view over a service ``get_all`` endpoint.

    A query or filter change the service rejects with
    :class:`InvalidQueryError` is reported in ``error`` and then undone, so
    the next change fetches with the last accepted query again.
    """

    def __init__(
        self,
        fetcher: ListFetcher,
        label: str,
        query: Optional[ListQuery] = None,
        filters: Optional[Dict[str, Any]] = None,
        auto_fetch: bool = True,
    ) -> None:
        super().__init__(label, auto_fetch)
        self.fetcher = fetcher
        self.query = query or ListQuery()
        self.filters: Dict[str, Any] = dict(filters or {})
        self.data: List[T] = []
        self.pagination: Optional[Pagination] = None

    async def refetch(self) -> None:
        """Fetch using the current query and filters."""
        await self._fetch()

    async def _fetch(self) -> Optional[Exception]:
        """Run one fetch and return the exception it raised, if any."""
        ticket = self._begin()
        query, filters = self.query, dict(self.filters)
        try:
            response = await self.fetcher(query, **filters)
        except Exception as exc:
            if not self._is_stale(ticket):
                self._fail(str(exc) or DEFAULT_ERROR)
            return exc
        finally:
            self._end()

        if self._is_stale(ticket):
            return None
        if response.success:
            self.data = list(response.data or [])
            self.pagination = response.pagination
        else:
            self._fail(response.error or f"Failed to fetch {self.label}")
        return None

    async def _apply(self, filters: Optional[Dict[str, Any]] = None, **changes: Any) -> None:
        filters = filters or {}
        previous_query, previous_filters = self.query, dict(self.filters)
        self.query = self.query.model_copy(update=changes)
        self.filters.update(filters)

        if isinstance(await self._fetch(), InvalidQueryError):
            self._undo(previous_query, previous_filters, changes, filters)

    def _undo(
        self,
        previous_query: ListQuery,
        previous_filters: Dict[str, Any],
        changes: Dict[str, Any],
        filters: Dict[str, Any],
    ) -> None:
        # only fields still holding the rejected value; a newer change wins
        restore = {
            name: getattr(previous_query, name)
            for name, value in changes.items()
            if getattr(self.query, name) == value
        }
        self.query = self.query.model_copy(update=restore)
        for name, value in filters.items():
            if self.filters.get(name) != value:
                continue
            if name in previous_filters:
                self.filters[name] = previous_filters[name]
            else:
                del self.filters[name]
        logger.debug(f"Reverted rejected {self.label} query change {changes} {filters}")

    async def update_search(self, search: str) -> None:
        await self._apply(search=search, page=1)

    async def update_sort(self, sort_by: str, sort_order: SortOrder = "asc") -> None:
        await self._apply(sort_by=sort_by, sort_order=sort_order)

    async def update_page(self, page: int) -> None:
        await self._apply(page=page)

    async def update_filters(self, **filters: Any) -> None:
        """Merge equality filters and go back to the first page."""
        await self._apply(filters, page=1)

    async def update_role(self, role: str) -> None:
        await self.update_filters(role=role)


class ResourceState(_Sequenced, Generic[T]):
    """Single record or aggregate, e.g. one client or the user stats."""

    def __init__(self, fetcher: ResourceFetcher, label: str, auto_fetch: bool = True) -> None:
        super().__init__(label, auto_fetch)
        self.fetcher = fetcher
        self.data: Optional[T] = None

    async def refetch(self) -> None:
        ticket = self._begin()
        try:
            response = await self.fetcher()
        except Exception as exc:
            if not self._is_stale(ticket):
                self._fail(str(exc) or DEFAULT_ERROR)
            return
        finally:
            self._end()

        if self._is_stale(ticket):
            return
        if response.success:
            self.data = response.data
        else:
            self._fail(response.error or f"Failed to fetch {self.label}")


def _list_state(fetcher: ListFetcher, label: str, filters: Dict[str, Any], auto_fetch: bool, options: Dict[str, Any]) -> ListState:
    return ListState(fetcher, label, query=ListQuery(**options), filters=filters, auto_fetch=auto_fetch)


def client_list(service: ClientApiService, auto_fetch: bool = True, **options: Any) -> ListState:
    return _list_state(service.get_all, "clients", {}, auto_fetch, options)


def user_list(service: UserApiService, role: str = "all", auto_fetch: bool = True, **options: Any) -> ListState:
    return _list_state(service.get_all, "users", {"role": role}, auto_fetch, options)


def workflow_list(
    service: WorkflowApiService,
    department: str = "all",
    status: str = "all",
    auto_fetch: bool = True,
    **options: Any,
) -> ListState:
    filters = {"department": department, "status": status}
    return _list_state(service.get_all, "workflows", filters, auto_fetch, options)


def plan_list(service: SubscriptionApiService, auto_fetch: bool = True, **options: Any) -> ListState:
    return _list_state(service.get_all, "subscription plans", {}, auto_fetch, options)


def exception_list(
    service: ExceptionApiService,
    status: str = "all",
    workflow_id: str = "all",
    auto_fetch: bool = True,
    **options: Any,
) -> ListState:
    filters = {"status": status, "workflow_id": workflow_id}
    return _list_state(service.get_all, "exceptions", filters, auto_fetch, options)
