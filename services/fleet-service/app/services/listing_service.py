"""
Listing service.

Serves the paginated list endpoints of every entity collection.
"""

from typing import Any, Mapping

import structlog

from ..context import RequestContext
from ..metrics import track_list_query
from ..query.builder import MAX_WINDOW_DAYS, QueryBuilder
from ..query.entity_queries import ENTITY_QUERIES
from ..query.pagination import PaginatedResult, create_paginated_result
from ..repositories.fleet_repository import IFleetRepository

logger = structlog.get_logger(__name__)


class ListingService:
    """Paginated, filtered and sorted entity lists."""

    def __init__(
        self,
        repository: IFleetRepository,
        default_limit: int,
        max_limit: int,
        expiry_window_days: int,
        max_window_days: int = MAX_WINDOW_DAYS,
    ):
        """
        Initialize listing service.

        Args:
            repository: Fleet data access
            default_limit: Page size when ``limit`` is missing or invalid
            max_limit: Upper bound for ``limit``
            expiry_window_days: Window for ``expiring`` when not a positive number
            max_window_days: Upper bound for ``expiring``
        """
        self.repository = repository
        self.builders = {
            entity: QueryBuilder(
                config,
                default_limit=default_limit,
                max_limit=max_limit,
                default_window_days=expiry_window_days,
                max_window_days=max_window_days,
            )
            for entity, config in ENTITY_QUERIES.items()
        }

    async def list(
        self, entity: str, params: Mapping[str, str], context: RequestContext
    ) -> PaginatedResult[Any]:
        """
        Fetch one page of an entity collection.

        Args:
            entity: Collection name (``trips``, ``drivers``...)
            params: Raw query parameters
            context: Request context supplying ``now``

        Returns:
            Page of entities with pagination metadata

        Raises:
            ValidationException: On invalid parameters, before storage is queried
        """
        try:
            spec = self.builders[entity].build(params, context.now)
        except Exception:
            track_list_query(entity, success=False)
            raise

        rows, total = await self.repository.find_page(spec)
        track_list_query(entity, success=True, rows=len(rows))

        logger.debug(
            "List query served",
            entity=entity,
            page=spec.window.page,
            limit=spec.window.limit,
            total=total,
        )
        return create_paginated_result(rows, total, spec.window)
