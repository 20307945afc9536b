"""
Query Options for listing requests.

QueryOptions is an immutable cursor: every setter returns a new value, so
a provider handle shared between tasks is never mutated behind a caller's
back.

Usage:
    options = (
        QueryOptions.for_provider(readable=["Code", "Description"])
        .with_page(2)
        .with_limit(50)
        .with_sort_by("Code")
        .with_sort_order("DESC")
    )
    options.to_params()
    # {"page": 2, "limit": 50, "sortby": "code", "sortorder": "descending"}
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Iterable

from .converters import DateConverter

DEFAULT_PAGE = 1
DEFAULT_OFFSET = 0
DEFAULT_LIMIT = 100
UNLIMITED = -1
MAX_PAGE_SIZE = 500


class SortOrder(str, Enum):
    """Sort direction of listed resources."""
    ASCENDING = "ascending"
    DESCENDING = "descending"

    @classmethod
    def normalize(cls, value: Any) -> "SortOrder":
        """Map 0 / "DESC" / "descending" to DESCENDING, anything else to ASCENDING."""
        if isinstance(value, SortOrder):
            return value
        if str(value) in ("0", "DESC", "descending"):
            return cls.DESCENDING
        return cls.ASCENDING


@dataclass(frozen=True)
class QueryOptions:
    """
    Listing cursor of one provider.

    Attributes:
        page: Page to fetch, starting at 1
        offset: Item offset
        limit: Items per page, -1 for all pages
        timespan: Only items modified since this time
        filter: Fortnox filter, one of ``available_filters``
        sort_by: Attribute to sort by, one of ``sortable``, lower-cased
        sort_order: Sort direction
        available_filters: Filters accepted by ``filter``
        sortable: Attributes accepted by ``sort_by``
    """
    page: int = DEFAULT_PAGE
    offset: int = DEFAULT_OFFSET
    limit: int = DEFAULT_LIMIT
    timespan: Any = None
    filter: str | None = None
    sort_by: str | None = None
    sort_order: SortOrder | None = None
    available_filters: frozenset[str] = frozenset()
    sortable: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.offset < 0:
            raise ValueError(f"offset must be >= 0, got {self.offset}")
        if self.limit < UNLIMITED:
            raise ValueError(f"limit must be >= -1, got {self.limit}")

    @classmethod
    def for_provider(
        cls,
        readable: Iterable[str] = (),
        available_filters: Iterable[str] = (),
    ) -> "QueryOptions":
        return cls(
            available_filters=frozenset(available_filters),
            sortable=frozenset(readable),
        )

    @property
    def is_unlimited(self) -> bool:
        return self.limit == UNLIMITED

    def with_page(self, page: int) -> "QueryOptions":
        return replace(self, page=int(page))

    def with_offset(self, offset: int) -> "QueryOptions":
        return replace(self, offset=int(offset))

    def with_limit(self, limit: int) -> "QueryOptions":
        return replace(self, limit=int(limit))

    def with_unlimited(self) -> "QueryOptions":
        return replace(self, limit=UNLIMITED)

    def with_timespan(self, timespan: Any) -> "QueryOptions":
        return replace(self, timespan=timespan)

    def with_filter(self, filter: str | None) -> "QueryOptions":
        """Unknown filters are ignored; None clears the filter."""
        if filter is None:
            return replace(self, filter=None)
        if filter not in self.available_filters:
            return self
        return replace(self, filter=filter)

    def with_sort_by(self, sort_by: str) -> "QueryOptions":
        """Attributes the provider cannot return are ignored."""
        if sort_by not in self.sortable:
            return self
        return replace(self, sort_by=sort_by.lower())

    def with_sort_order(self, sort_order: Any) -> "QueryOptions":
        return replace(self, sort_order=SortOrder.normalize(sort_order))

    def to_params(
        self,
        now: Callable[[], datetime] = datetime.now,
    ) -> dict[str, Any]:
        """Render the Fortnox query parameters."""
        params: dict[str, Any] = {
            "page": self.page,
            "limit": MAX_PAGE_SIZE if self.is_unlimited else self.limit,
        }
        if self.offset:
            params["offset"] = self.offset
        if self.timespan is not None:
            params["lastmodified"] = DateConverter.to_lastmodified(self.timespan, now=now)
        if self.filter:
            params["filter"] = self.filter
        if self.sort_by:
            params["sortby"] = self.sort_by
        if self.sort_order:
            params["sortorder"] = self.sort_order.value
        return params
