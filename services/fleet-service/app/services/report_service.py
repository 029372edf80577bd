"""
Report service.

Fetches the inputs of each report through the repository and hands them
to the aggregation engine. Independent reads of one report are awaited
together; the reduction runs only once all of them have completed.
"""

import asyncio
import time
from typing import Awaitable, Mapping, Optional, TypeVar

import structlog

from ..context import RequestContext
from ..domain.entities import Document, MaintenanceRecord, TransportType
from ..domain.exceptions import EntityNotFoundException, ValidationException
from ..metrics import track_report
from ..query.builder import MAX_WINDOW_DAYS, QueryBuilder, parse_date_window, parse_days
from ..query.entity_queries import TRIP_REGISTER_QUERY
from ..query.pagination import PaginatedResult, create_paginated_result
from ..query.predicates import (
    DateWindow,
    Equals,
    Predicate,
    expired_before,
    expiring_within,
)
from ..reports import aggregation
from ..reports.results import (
    CompanyFinanceReport,
    DriverFinanceReport,
    DriverWorkload,
    MaintenanceHistoryEntry,
    TripProfitLoss,
    TripRegisterEntry,
    VehicleExpenseReport,
)
from ..repositories.fleet_repository import (
    DOCUMENTS,
    DRIVERS,
    FINANCE,
    MAINTENANCE,
    TRACTORS,
    TRAILERS,
    TRIPS,
    USERS,
    IFleetRepository,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")

VEHICLE_COLLECTIONS = {
    TransportType.TRACTOR: (TRACTORS, "tractor_id"),
    TransportType.TRAILER: (TRAILERS, "trailer_id"),
}


def _linked_in_window(
    link_field: str, link_id: str, date_field: str, window: DateWindow
) -> tuple[Predicate, ...]:
    predicates: list[Predicate] = [Equals(link_field, link_id)]
    date_range = window.to_range(date_field)
    if date_range is not None:
        predicates.append(date_range)
    return tuple(predicates)


def _in_window(date_field: str, window: DateWindow) -> tuple[Predicate, ...]:
    date_range = window.to_range(date_field)
    return (date_range,) if date_range is not None else ()


class ReportService:
    """Financial, operational and document reports."""

    def __init__(
        self,
        repository: IFleetRepository,
        default_limit: int,
        max_limit: int,
        expiry_window_days: int,
        maintenance_window_days: int,
        max_window_days: int = MAX_WINDOW_DAYS,
    ):
        """
        Initialize report service.

        Args:
            repository: Fleet data access
            default_limit: Page size of the trip register
            max_limit: Upper bound for the trip register page size
            expiry_window_days: Default ``days`` of the expiring documents report
            maintenance_window_days: Default ``days`` of the upcoming maintenance report
            max_window_days: Upper bound for ``days`` of both reports
        """
        self.repository = repository
        self.expiry_window_days = expiry_window_days
        self.maintenance_window_days = maintenance_window_days
        self.max_window_days = max_window_days
        self.register_builder = QueryBuilder(
            TRIP_REGISTER_QUERY, default_limit=default_limit, max_limit=max_limit
        )

    async def _run(self, report: str, build: Awaitable[T]) -> T:
        start_time = time.time()
        try:
            result = await build
        except Exception:
            track_report(report, success=False, duration=time.time() - start_time)
            raise
        duration = time.time() - start_time
        track_report(report, success=True, duration=duration)
        logger.info("Report generated", report=report, duration_ms=round(duration * 1000, 2))
        return result

    # Finance reports

    async def trip_profit_loss(self, trip_id: str, context: RequestContext) -> TripProfitLoss:
        """
        Profit and loss of one trip.

        Raises:
            EntityNotFoundException: If the trip does not exist
        """
        return await self._run("trip_profit_loss", self._trip_profit_loss(trip_id))

    async def _trip_profit_loss(self, trip_id: str) -> TripProfitLoss:
        trip, operations = await asyncio.gather(
            self.repository.get(TRIPS, trip_id),
            self.repository.find_all(FINANCE, (Equals("trip_id", trip_id),)),
        )
        if trip is None:
            raise EntityNotFoundException("trip", trip_id)
        return aggregation.trip_profit_loss(trip, operations)

    async def driver_finance(
        self, driver_id: str, params: Mapping[str, str], context: RequestContext
    ) -> DriverFinanceReport:
        """
        Income, expenses and balance of a driver over an optional period.

        Raises:
            ValidationException: On a malformed or inverted period
            EntityNotFoundException: If the driver does not exist
        """
        window = parse_date_window(params)
        return await self._run("driver_finance", self._driver_finance(driver_id, window))

    async def _driver_finance(self, driver_id: str, window: DateWindow) -> DriverFinanceReport:
        exists, trips, operations = await asyncio.gather(
            self.repository.exists(DRIVERS, driver_id),
            self.repository.find_all(
                TRIPS, _linked_in_window("driver_id", driver_id, "departure_date", window)
            ),
            self.repository.find_all(
                FINANCE, _linked_in_window("driver_id", driver_id, "date", window)
            ),
        )
        if not exists:
            raise EntityNotFoundException("driver", driver_id)
        return aggregation.driver_finance(driver_id, trips, operations, window)

    async def vehicle_expenses(
        self,
        vehicle_type: TransportType,
        vehicle_id: str,
        params: Mapping[str, str],
        context: RequestContext,
    ) -> VehicleExpenseReport:
        """
        Expense breakdown of a tractor or trailer.

        Raises:
            ValidationException: On a malformed or inverted period
            EntityNotFoundException: If the vehicle does not exist
        """
        window = parse_date_window(params)
        return await self._run(
            f"{vehicle_type.value}_expenses",
            self._vehicle_expenses(vehicle_type, vehicle_id, window),
        )

    async def _vehicle_expenses(
        self, vehicle_type: TransportType, vehicle_id: str, window: DateWindow
    ) -> VehicleExpenseReport:
        collection, link_field = VEHICLE_COLLECTIONS[vehicle_type]
        exists, operations = await asyncio.gather(
            self.repository.exists(collection, vehicle_id),
            self.repository.find_all(
                FINANCE, _linked_in_window(link_field, vehicle_id, "date", window)
            ),
        )
        if not exists:
            raise EntityNotFoundException(vehicle_type.value, vehicle_id)
        return aggregation.vehicle_expenses(vehicle_type, vehicle_id, operations, window)

    async def company_finance(
        self, params: Mapping[str, str], context: RequestContext
    ) -> CompanyFinanceReport:
        """Company-wide income, expenses, profit and margin."""
        window = parse_date_window(params)
        return await self._run("company_finance", self._company_finance(window))

    async def _company_finance(self, window: DateWindow) -> CompanyFinanceReport:
        trips, operations = await asyncio.gather(
            self.repository.find_all(TRIPS, _in_window("departure_date", window)),
            self.repository.find_all(FINANCE, _in_window("date", window)),
        )
        return aggregation.company_finance(trips, operations, window)

    # Operational reports

    async def trip_register(
        self, params: Mapping[str, str], context: RequestContext
    ) -> PaginatedResult[TripRegisterEntry]:
        """
        Paginated trip register filtered by status and departure period.

        Each trip carries its driver's name and its tractor and trailer plates.
        """
        spec = self.register_builder.build(params, context.now)
        return await self._run("trip_register", self._trip_register(spec))

    async def _trip_register(self, spec) -> PaginatedResult[TripRegisterEntry]:
        trips, total = await self.repository.find_page(spec)
        drivers, tractors, trailers = await asyncio.gather(
            self.repository.find_by_ids(DRIVERS, {trip.driver_id for trip in trips}),
            self.repository.find_by_ids(TRACTORS, {trip.tractor_id for trip in trips}),
            self.repository.find_by_ids(TRAILERS, {trip.trailer_id for trip in trips}),
        )
        entries = aggregation.trip_register_entries(trips, drivers, tractors, trailers)
        return create_paginated_result(entries, total, spec.window)

    async def maintenance_history(
        self, params: Mapping[str, str], context: RequestContext
    ) -> list[MaintenanceHistoryEntry]:
        """
        Maintenance records of one vehicle with their mechanics, newest first.

        Raises:
            ValidationException: If ``transportId`` or ``entityType`` is missing or invalid
        """
        transport_id = (params.get("transportId") or "").strip()
        raw_type = (params.get("entityType") or "").strip()
        if not transport_id or not raw_type:
            missing = "transportId" if not transport_id else "entityType"
            raise ValidationException(
                missing, params.get(missing), "transportId and entityType are required"
            )
        try:
            entity_type = TransportType(raw_type)
        except ValueError:
            raise ValidationException(
                "entityType", raw_type, "expected one of: tractor, trailer"
            )
        return await self._run(
            "maintenance_history", self._maintenance_history(entity_type, transport_id)
        )

    async def _maintenance_history(
        self, entity_type: TransportType, transport_id: str
    ) -> list[MaintenanceHistoryEntry]:
        records = await self.repository.find_all(
            MAINTENANCE,
            (Equals("entity_type", entity_type), Equals("transport_id", transport_id)),
        )
        history = aggregation.maintenance_history(records, entity_type, transport_id)
        mechanics = await self.repository.find_by_ids(
            USERS, {record.mechanic_id for record in history}
        )
        return aggregation.with_mechanics(history, mechanics)

    async def upcoming_maintenance(
        self, params: Mapping[str, str], context: RequestContext
    ) -> list[MaintenanceRecord]:
        """Maintenance records dated within the next ``days`` days."""
        days = parse_days(
            params.get("days"), self.maintenance_window_days, self.max_window_days
        )
        return await self._run(
            "upcoming_maintenance", self._upcoming_maintenance(context.now, days)
        )

    async def _upcoming_maintenance(self, now, days: int) -> list[MaintenanceRecord]:
        records = await self.repository.find_all(
            MAINTENANCE, (expiring_within("date", now, days),)
        )
        return aggregation.upcoming_maintenance(records, now, days)

    async def driver_workload(
        self, params: Mapping[str, str], context: RequestContext
    ) -> list[DriverWorkload]:
        """Trips, mileage and billed amount per driver, optionally for one driver."""
        window = parse_date_window(params)
        driver_id: Optional[str] = (params.get("driverId") or "").strip() or None
        return await self._run("driver_workload", self._driver_workload(driver_id, window))

    async def _driver_workload(
        self, driver_id: Optional[str], window: DateWindow
    ) -> list[DriverWorkload]:
        predicates = list(_in_window("departure_date", window))
        if driver_id:
            predicates.append(Equals("driver_id", driver_id))

        trips = await self.repository.find_all(TRIPS, tuple(predicates))
        drivers = await self.repository.find_by_ids(
            DRIVERS, {trip.driver_id for trip in trips}
        )
        return aggregation.driver_workload(trips, drivers)

    # Document reports

    async def expiring_documents(
        self, params: Mapping[str, str], context: RequestContext
    ) -> list[Document]:
        """Documents expiring within the next ``days`` days, soonest first."""
        days = parse_days(params.get("days"), self.expiry_window_days, self.max_window_days)
        return await self._run(
            "expiring_documents", self._expiring_documents(context.now, days)
        )

    async def _expiring_documents(self, now, days: int) -> list[Document]:
        documents = await self.repository.find_all(
            DOCUMENTS, (expiring_within("expiry_date", now, days),)
        )
        return aggregation.expiring_documents(documents, now, days)

    async def expired_documents(self, context: RequestContext) -> list[Document]:
        """Documents whose expiry date has passed, oldest first."""
        return await self._run("expired_documents", self._expired_documents(context.now))

    async def _expired_documents(self, now) -> list[Document]:
        documents = await self.repository.find_all(
            DOCUMENTS, (expired_before("expiry_date", now),)
        )
        return aggregation.expired_documents(documents, now)
