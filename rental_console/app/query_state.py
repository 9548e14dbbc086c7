from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from rental_console.app.ui.filters import clean_filters
from rental_console.app.ui.pagination import PaginationState

DEFAULT_SORT_FIELD = "created_at"


class Section(str, Enum):
    ACCOUNTS = "accounts"
    LISTINGS = "listings"
    LINKED_LISTINGS = "linked-listings"
    OPERATOR_ACCOUNTS = "operator-accounts"
    COMPLEXES = "complexes"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass
class SortState:
    field: str = DEFAULT_SORT_FIELD
    direction: SortDirection = SortDirection.DESC

    def toggle(self, field_name: str) -> None:
        if field_name == self.field:
            self.direction = SortDirection.ASC if self.direction == SortDirection.DESC else SortDirection.DESC
            return
        self.field = field_name
        self.direction = SortDirection.ASC


@dataclass(frozen=True)
class QuerySnapshot:
    """Request-relevant view of a QueryState. Equal snapshots mean equal requests."""

    section: Section
    search: str
    sort_field: str
    sort_direction: SortDirection
    filters: tuple[tuple[str, Any], ...]
    page: int
    limit: int


@dataclass
class QueryState:
    search: str = ""
    sort: SortState = field(default_factory=SortState)
    filters: dict[str, Any] = field(default_factory=dict)
    pagination: PaginationState = field(default_factory=PaginationState)

    @classmethod
    def fresh(cls, limit: int = 10) -> "QueryState":
        return cls(pagination=PaginationState(limit=limit))

    def snapshot(self, section: Section) -> QuerySnapshot:
        active = clean_filters(self.filters)
        return QuerySnapshot(
            section=section,
            search=self.search.strip(),
            sort_field=self.sort.field,
            sort_direction=self.sort.direction,
            filters=tuple(sorted((key, value) for key, value in active.items())),
            page=self.pagination.page,
            limit=self.pagination.limit,
        )
