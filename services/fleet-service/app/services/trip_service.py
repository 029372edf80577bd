"""
Trip and finance write path.

Keeps ``Trip.amount`` equal to ``weight * rate_per_ton`` on every write
and checks that referenced drivers, vehicles, couplings and trips exist.
"""

import asyncio
from typing import Iterable, Optional

import structlog

from ..context import RequestContext
from ..domain.entities import FinanceOperation, Trip, calculate_trip_amount
from ..domain.exceptions import DuplicateEntityException, EntityNotFoundException
from ..metrics import track_write
from ..repositories.fleet_repository import (
    COUPLINGS,
    DRIVERS,
    TRACTORS,
    TRAILERS,
    TRIPS,
    IFleetRepository,
)
from ..validators import FinanceOperationCreate, TripCreate, TripUpdate

logger = structlog.get_logger(__name__)

# Reference attribute -> (entity label, collection)
REFERENCES = {
    "tractor_id": ("tractor", TRACTORS),
    "trailer_id": ("trailer", TRAILERS),
    "driver_id": ("driver", DRIVERS),
    "coupling_id": ("coupling", COUPLINGS),
    "trip_id": ("trip", TRIPS),
}

NULLABLE_TRIP_FIELDS = {"coupling_id", "arrival_date"}


class TripService:
    """Creates and updates trips and records finance operations."""

    def __init__(self, repository: IFleetRepository):
        self.repository = repository

    async def _ensure_references(self, values: dict, fields: Iterable[str]) -> None:
        """
        Check that every referenced entity exists.

        Raises:
            EntityNotFoundException: For the first missing reference, in ``fields`` order
        """
        checks = [(name, values[name]) for name in fields if values.get(name)]
        if not checks:
            return
        results = await asyncio.gather(
            *(self.repository.exists(REFERENCES[name][1], ref_id) for name, ref_id in checks)
        )
        for (name, ref_id), found in zip(checks, results):
            if not found:
                raise EntityNotFoundException(REFERENCES[name][0], ref_id)

    async def _ensure_unique_number(self, number: str, trip_id: Optional[str] = None) -> None:
        existing = await self.repository.find_trip_by_number(number)
        if existing is not None and existing.id != trip_id:
            raise DuplicateEntityException("trip", "number", number)

    async def create_trip(self, data: TripCreate, context: RequestContext) -> Trip:
        """
        Create a trip with its amount computed from weight and rate.

        Raises:
            DuplicateEntityException: If the trip number is taken
            EntityNotFoundException: If a referenced entity does not exist
        """
        values = data.model_dump()
        try:
            await self._ensure_unique_number(data.number)
            await self._ensure_references(
                values, ("tractor_id", "trailer_id", "driver_id", "coupling_id")
            )
            values["amount"] = calculate_trip_amount(data.weight, data.rate_per_ton)
            trip = await self.repository.create_trip(values)
        except Exception:
            track_write("create_trip", success=False)
            raise

        track_write("create_trip", success=True)
        logger.info(
            "Trip created",
            trip_id=trip.id,
            number=trip.number,
            amount=str(trip.amount),
            request_id=context.request_id,
        )
        return trip

    async def update_trip(
        self, trip_id: str, data: TripUpdate, context: RequestContext
    ) -> Trip:
        """
        Apply a partial update and recompute the amount.

        Raises:
            EntityNotFoundException: If the trip or a newly referenced entity does not exist
            DuplicateEntityException: If the new trip number is taken
        """
        changes = {
            name: value
            for name, value in data.changes().items()
            if value is not None or name in NULLABLE_TRIP_FIELDS
        }
        try:
            trip = await self.repository.get(TRIPS, trip_id)
            if trip is None:
                raise EntityNotFoundException("trip", trip_id)

            if "number" in changes and changes["number"] != trip.number:
                await self._ensure_unique_number(changes["number"], trip_id)
            await self._ensure_references(
                changes, ("tractor_id", "trailer_id", "driver_id", "coupling_id")
            )

            weight = changes.get("weight", trip.weight)
            rate_per_ton = changes.get("rate_per_ton", trip.rate_per_ton)
            changes["amount"] = calculate_trip_amount(weight, rate_per_ton)

            updated = await self.repository.update_trip(trip_id, changes)
        except Exception:
            track_write("update_trip", success=False)
            raise

        track_write("update_trip", success=True)
        logger.info(
            "Trip updated",
            trip_id=trip_id,
            fields=sorted(changes),
            request_id=context.request_id,
        )
        return updated

    async def create_finance_operation(
        self, data: FinanceOperationCreate, context: RequestContext
    ) -> FinanceOperation:
        """
        Record a finance operation; the date defaults to the request time.

        Raises:
            EntityNotFoundException: If a referenced entity does not exist
        """
        values = data.model_dump()
        if values.get("date") is None:
            values["date"] = context.now
        try:
            await self._ensure_references(
                values, ("driver_id", "trip_id", "tractor_id", "trailer_id")
            )
            operation = await self.repository.create_finance_operation(values)
        except Exception:
            track_write("create_finance_operation", success=False)
            raise

        track_write("create_finance_operation", success=True)
        logger.info(
            "Finance operation recorded",
            operation_id=operation.id,
            type=operation.type.value,
            amount=str(operation.amount),
            request_id=context.request_id,
        )
        return operation
