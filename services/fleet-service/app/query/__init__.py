"""
Query layer - request parameters to structured storage queries.

Produces validated predicate sets, pagination windows and sort keys
without touching storage.
"""

from .builder import (
    EntityQueryConfig,
    FieldFilter,
    PageWindow,
    QueryBuilder,
    QuerySpec,
    SortDirection,
    SortSpec,
)
from .pagination import PaginatedResult, Pagination, create_paginated_result
from .predicates import DateWindow, Equals, Predicate, Range, SubstringAnyOf

__all__ = [
    "DateWindow",
    "EntityQueryConfig",
    "Equals",
    "FieldFilter",
    "PageWindow",
    "PaginatedResult",
    "Pagination",
    "Predicate",
    "QueryBuilder",
    "QuerySpec",
    "Range",
    "SortDirection",
    "SortSpec",
    "SubstringAnyOf",
    "create_paginated_result",
]
