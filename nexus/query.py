"""List query engine: search, sort and paginate an in-memory collection.

Every entity service runs its list endpoint through :func:`run_query`. An
entity declares which attributes are searchable and sortable through a
:class:`QueryFields` accessor map, so no attribute is ever looked up by an
arbitrary string.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from functools import cmp_to_key
from numbers import Real
from typing import Any, Callable, Dict, Generic, List, Literal, Mapping, Optional, Sequence, TypeVar

from pydantic import BaseModel

from .contracts import Pagination
from .errors import InvalidQueryError

T = TypeVar("T")

SortOrder = Literal["asc", "desc"]
Accessor = Callable[[T], Any]

# Filter values meaning "do not filter".
NO_FILTER = (None, "", "all")


class ListQuery(BaseModel):
    """Query descriptor for list endpoints."""

    search: Optional[str] = None
    sort_by: Optional[str] = None
    sort_order: SortOrder = "asc"
    page: int = 1
    limit: int = 10


@dataclass
class QueryFields(Generic[T]):
    """Accessors an entity exposes to the query engine."""

    search: Dict[str, Callable[[T], Optional[str]]] = field(default_factory=dict)
    sort: Dict[str, Accessor] = field(default_factory=dict)
    filters: Dict[str, Accessor] = field(default_factory=dict)


@dataclass
class Page(Generic[T]):
    data: List[T]
    pagination: Pagination


def _kind(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return "str"
    # datetime is a subclass of date; both compare chronologically
    if isinstance(value, datetime):
        return "datetime"
    if isinstance(value, date):
        return "date"
    if isinstance(value, Real):
        return "number"
    return None


def compare_values(a: Any, b: Any, order: SortOrder = "asc") -> int:
    """Three-way comparison used when sorting.

    Strings compare case-folded first and fall back to the raw value, numbers
    numerically and dates chronologically. ``desc`` reverses the result.
    ``None`` always sorts last, whatever the order. Values of different or
    unsupported kinds compare equal, so a column mixing kinds has no
    total order and its relative order is unspecified.
    """
    if a is None or b is None:
        if a is None and b is None:
            return 0
        return 1 if a is None else -1

    kind = _kind(a)
    if kind is None or kind != _kind(b):
        return 0

    if kind == "str":
        left, right = (a.casefold(), a), (b.casefold(), b)
    elif kind == "datetime":
        left, right = a.timestamp(), b.timestamp()
    else:
        left, right = a, b

    if left < right:
        result = -1
    elif left > right:
        result = 1
    else:
        result = 0
    return -result if order == "desc" else result


def matches_search(item: T, term: str, accessors: Mapping[str, Callable[[T], Optional[str]]]) -> bool:
    """Return ``True`` if any accessor's value contains ``term``.

    ``term`` must already be trimmed and case-folded.
    """
    for accessor in accessors.values():
        value = accessor(item)
        if value is not None and term in str(value).casefold():
            return True
    return False


def apply_search(items: Sequence[T], search: Optional[str], fields: QueryFields[T]) -> List[T]:
    term = (search or "").strip().casefold()
    if not term:
        return list(items)
    return [item for item in items if matches_search(item, term, fields.search)]


def apply_filters(items: Sequence[T], filters: Mapping[str, Any], fields: QueryFields[T]) -> List[T]:
    """Keep items whose filtered attributes equal the requested values.

    Values in :data:`NO_FILTER` are ignored, whatever the filter name.
    """
    result = list(items)
    for name, wanted in filters.items():
        if wanted in NO_FILTER:
            continue
        if name not in fields.filters:
            raise InvalidQueryError(f"Unknown filter: {name}")
        accessor = fields.filters[name]
        result = [item for item in result if accessor(item) == wanted]
    return result


def apply_sort(items: Sequence[T], sort_by: Optional[str], order: SortOrder, fields: QueryFields[T]) -> List[T]:
    if not sort_by:
        return list(items)
    accessor = fields.sort.get(sort_by)
    if accessor is None:
        raise InvalidQueryError(f"Cannot sort by: {sort_by}")
    # list.sort is stable, so equal keys keep their filtered order
    return sorted(items, key=cmp_to_key(lambda a, b: compare_values(accessor(a), accessor(b), order)))


def check_window(page: int, limit: int) -> None:
    if page < 1:
        raise InvalidQueryError(f"page must be >= 1, got {page}")
    if limit < 1:
        raise InvalidQueryError(f"limit must be >= 1, got {limit}")


def paginate(items: Sequence[T], page: int, limit: int) -> Page[T]:
    check_window(page, limit)
    start = (page - 1) * limit
    return Page(
        data=list(items[start : start + limit]),
        pagination=Pagination.build(page=page, limit=limit, total=len(items)),
    )


def run_query(
    items: Sequence[T],
    query: Optional[ListQuery],
    fields: QueryFields[T],
    filters: Optional[Mapping[str, Any]] = None,
) -> Page[T]:
    """Filter, sort and paginate ``items``.

    Args:
        items: Collection to query. It is not modified.
        query: Query descriptor; ``None`` uses the defaults.
        fields: Search, sort and filter accessors for the entity.
        filters: Optional equality filters applied after the search.

    Returns:
        The requested page together with pagination metadata computed from
        the filtered, pre-slice count.

    Raises:
        InvalidQueryError: On a non-positive page or limit, or an unknown
            sort or filter name.
    """
    query = query or ListQuery()
    check_window(query.page, query.limit)

    selected = apply_search(items, query.search, fields)
    if filters:
        selected = apply_filters(selected, filters, fields)
    selected = apply_sort(selected, query.sort_by, query.sort_order, fields)
    return paginate(selected, query.page, query.limit)
