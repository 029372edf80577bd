"""
Fleet repository interface (Abstract Base Class).

Defines the contract for fleet data retrieval and the few writes the
service performs, independent of the underlying storage mechanism.
Queries are expressed with the tagged predicates of the query layer.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..domain.entities import FinanceOperation, Trip
from ..query.builder import QuerySpec, SortSpec
from ..query.predicates import Predicate

TRIPS = "trips"
FINANCE = "finance"
MAINTENANCE = "maintenance"
DOCUMENTS = "documents"
DRIVERS = "drivers"
TRACTORS = "tractors"
TRAILERS = "trailers"
COUPLINGS = "couplings"
USERS = "users"


class IFleetRepository(ABC):
    """
    Abstract repository interface for fleet data operations.

    Entities are addressed by their collection name (``TRIPS``,
    ``DRIVERS``...) and returned as domain entities.
    """

    @abstractmethod
    async def get(self, entity: str, entity_id: str) -> Optional[Any]:
        """
        Fetch a single entity by id.

        Args:
            entity: Collection name
            entity_id: Primary key

        Returns:
            Domain entity if found, None otherwise
        """
        pass

    @abstractmethod
    async def exists(self, entity: str, entity_id: str) -> bool:
        """Check whether an entity with this id exists."""
        pass

    @abstractmethod
    async def find_page(self, spec: QuerySpec) -> tuple[list[Any], int]:
        """
        Fetch one page of entities matching a query.

        Args:
            spec: Predicates, pagination window and sort key

        Returns:
            Tuple of (entities on the page, total number of matches)
        """
        pass

    @abstractmethod
    async def find_all(
        self,
        entity: str,
        predicates: Sequence[Predicate] = (),
        sort: Optional[SortSpec] = None,
    ) -> list[Any]:
        """
        Fetch every entity matching the predicates, without pagination.

        Used by reports, which must aggregate over the complete set.
        """
        pass

    @abstractmethod
    async def find_by_ids(self, entity: str, ids: Iterable[str]) -> dict[str, Any]:
        """Fetch entities by id, keyed by id. Unknown ids are skipped."""
        pass

    @abstractmethod
    async def find_trip_by_number(self, number: str) -> Optional[Trip]:
        """Find a trip by its unique number."""
        pass

    @abstractmethod
    async def create_trip(self, values: Mapping[str, Any]) -> Trip:
        """Persist a new trip from attribute values (``amount`` included)."""
        pass

    @abstractmethod
    async def update_trip(self, trip_id: str, values: Mapping[str, Any]) -> Trip:
        """Apply attribute changes to an existing trip."""
        pass

    @abstractmethod
    async def create_finance_operation(self, values: Mapping[str, Any]) -> FinanceOperation:
        """Persist a new finance operation from attribute values."""
        pass
