"""Paginated list results."""

import math
from dataclasses import dataclass
from typing import Any, Generic, Sequence, TypeVar

from .builder import PageWindow

T = TypeVar("T")


@dataclass(frozen=True)
class Pagination:
    """Pagination metadata returned alongside a page of results."""

    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        if self.total <= 0:
            return 0
        return math.ceil(self.total / self.limit)

    def to_dict(self) -> dict[str, int]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
        }


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    """One page of entities plus pagination metadata."""

    data: Sequence[T]
    pagination: Pagination

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": [item.to_dict() for item in self.data],
            "pagination": self.pagination.to_dict(),
        }


def create_paginated_result(
    data: Sequence[T], total: int, window: PageWindow
) -> PaginatedResult[T]:
    """Wrap a fetched page and the total match count."""
    return PaginatedResult(
        data=list(data),
        pagination=Pagination(page=window.page, limit=window.limit, total=total),
    )
