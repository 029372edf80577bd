"""
Aggregation engine for fleet reports.

Pure reductions over entity collections that were already fetched by the
caller. Nothing here performs I/O or reads the clock: the reference
instant ``now`` is always passed in, so one request compares every row
against the same value.

Each reduction selects its own inputs by linkage (trip, driver, vehicle)
and period, so handing it a superset of the relevant rows is harmless.
Sums are taken over the complete collection, never per page.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Sequence

from ..domain.entities import (
    Document,
    Driver,
    FinanceOperation,
    FinanceOperationType,
    MaintenanceRecord,
    Tractor,
    Trailer,
    TransportType,
    Trip,
    User,
)
from ..query.predicates import DateWindow, expired_before, expiring_within
from .results import (
    CompanyFinanceReport,
    DriverFinanceReport,
    DriverWorkload,
    MaintenanceHistoryEntry,
    TripProfitLoss,
    TripRegisterEntry,
    VehicleExpenseReport,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

ALL_TIME = DateWindow()


def sum_amounts(values: Iterable[Decimal]) -> Decimal:
    """Sum of amounts; zero for an empty collection."""
    return sum(values, ZERO)


def profit_margin(profit: Decimal, base: Decimal) -> Decimal:
    """Profit as a percentage of ``base``; zero when ``base`` is not positive."""
    if base > 0:
        return profit / base * HUNDRED
    return ZERO


def group_expenses_by_type(
    operations: Iterable[FinanceOperation],
) -> dict[FinanceOperationType, Decimal]:
    """
    Sum operation amounts per category.

    Only categories that occur are present in the result.
    """
    totals: defaultdict[FinanceOperationType, Decimal] = defaultdict(lambda: ZERO)
    for operation in operations:
        totals[operation.type] += operation.amount
    return dict(totals)


def trip_profit_loss(trip: Trip, operations: Iterable[FinanceOperation]) -> TripProfitLoss:
    """
    Profit and loss of one trip.

    Args:
        trip: Trip being evaluated
        operations: Finance operations; only those linked to ``trip`` count

    Returns:
        Expenses, profit and margin (0 when the trip amount is 0)
    """
    expenses = sum_amounts(op.amount for op in operations if op.trip_id == trip.id)
    amount = trip.amount
    profit = amount - expenses
    return TripProfitLoss(
        trip_id=trip.id,
        trip_number=trip.number,
        amount=amount,
        expenses=expenses,
        profit=profit,
        profit_margin=profit_margin(profit, amount),
    )


def driver_finance(
    driver_id: str,
    trips: Iterable[Trip],
    operations: Iterable[FinanceOperation],
    window: DateWindow = ALL_TIME,
) -> DriverFinanceReport:
    """
    Balance of trip income against expenses booked on a driver.

    Trips count when their departure date lies in ``window``; operations
    when their own date does. An unbounded window covers all time.
    """
    driver_trips = [
        trip
        for trip in trips
        if trip.driver_id == driver_id and window.contains(trip.departure_date)
    ]
    driver_operations = [
        op for op in operations if op.driver_id == driver_id and window.contains(op.date)
    ]

    income = sum_amounts(trip.amount for trip in driver_trips)
    expenses = sum_amounts(op.amount for op in driver_operations)
    return DriverFinanceReport(
        driver_id=driver_id,
        window=window,
        income=income,
        expenses=expenses,
        balance=income - expenses,
        operations=len(driver_operations),
        trips=len(driver_trips),
    )


def _vehicle_id(operation: FinanceOperation, vehicle_type: TransportType) -> Optional[str]:
    if vehicle_type is TransportType.TRACTOR:
        return operation.tractor_id
    return operation.trailer_id


def vehicle_expenses(
    vehicle_type: TransportType,
    vehicle_id: str,
    operations: Iterable[FinanceOperation],
    window: DateWindow = ALL_TIME,
) -> VehicleExpenseReport:
    """Expense total and per-category breakdown of a tractor or trailer."""
    selected = [
        op
        for op in operations
        if _vehicle_id(op, vehicle_type) == vehicle_id and window.contains(op.date)
    ]
    return VehicleExpenseReport(
        vehicle_type=vehicle_type,
        vehicle_id=vehicle_id,
        window=window,
        total_expenses=sum_amounts(op.amount for op in selected),
        expenses_by_type=group_expenses_by_type(selected),
    )


def company_finance(
    trips: Iterable[Trip],
    operations: Iterable[FinanceOperation],
    window: DateWindow = ALL_TIME,
) -> CompanyFinanceReport:
    """Company-wide income, expenses, profit and margin for a period."""
    period_trips = [trip for trip in trips if window.contains(trip.departure_date)]
    period_operations = [op for op in operations if window.contains(op.date)]

    income = sum_amounts(trip.amount for trip in period_trips)
    expenses = sum_amounts(op.amount for op in period_operations)
    profit = income - expenses
    return CompanyFinanceReport(
        window=window,
        income=income,
        expenses=expenses,
        profit=profit,
        profit_margin=profit_margin(profit, income),
        trips=len(period_trips),
        expenses_by_type=group_expenses_by_type(period_operations),
    )


@dataclass
class _WorkloadTotals:
    trips: int = 0
    mileage: Decimal = ZERO
    amount: Decimal = ZERO


def driver_workload(
    trips: Iterable[Trip],
    drivers: Optional[Mapping[str, Driver]] = None,
) -> list[DriverWorkload]:
    """
    Group trips by driver.

    Args:
        trips: Trips to group
        drivers: Known drivers by id, used for display names

    Returns:
        One entry per driver id; order is not significant
    """
    drivers = drivers or {}
    totals: dict[str, _WorkloadTotals] = {}
    for trip in trips:
        entry = totals.setdefault(trip.driver_id, _WorkloadTotals())
        entry.trips += 1
        entry.mileage += trip.mileage
        entry.amount += trip.amount

    return [
        DriverWorkload(
            driver_id=driver_id,
            trips=entry.trips,
            total_mileage=entry.mileage,
            total_amount=entry.amount,
            driver=drivers.get(driver_id),
        )
        for driver_id, entry in totals.items()
    ]


def _by_expiry(documents: Iterable[Document]) -> list[Document]:
    return sorted(documents, key=lambda document: document.expiry_date)


def expiring_documents(
    documents: Iterable[Document], now: datetime, days: int
) -> list[Document]:
    """Documents with ``now <= expiry_date <= now + days``, soonest first."""
    window = expiring_within("expiry_date", now, days)
    return _by_expiry(doc for doc in documents if window.matches(doc.expiry_date))


def expired_documents(documents: Iterable[Document], now: datetime) -> list[Document]:
    """Documents with ``expiry_date < now``, oldest first."""
    window = expired_before("expiry_date", now)
    return _by_expiry(doc for doc in documents if window.matches(doc.expiry_date))


def maintenance_history(
    records: Iterable[MaintenanceRecord],
    entity_type: TransportType,
    transport_id: str,
) -> list[MaintenanceRecord]:
    """Maintenance records of one vehicle, newest first."""
    return sorted(
        (
            record
            for record in records
            if record.entity_type is entity_type and record.transport_id == transport_id
        ),
        key=lambda record: record.date,
        reverse=True,
    )


def with_mechanics(
    records: Iterable[MaintenanceRecord], mechanics: Mapping[str, User]
) -> list[MaintenanceHistoryEntry]:
    """Attach the performing mechanic to each record, keeping record order."""
    return [
        MaintenanceHistoryEntry(record=record, mechanic=mechanics.get(record.mechanic_id))
        for record in records
    ]


def trip_register_entries(
    trips: Iterable[Trip],
    drivers: Mapping[str, Driver],
    tractors: Mapping[str, Tractor],
    trailers: Mapping[str, Trailer],
) -> list[TripRegisterEntry]:
    """Attach driver and vehicles to each trip, keeping trip order."""
    return [
        TripRegisterEntry(
            trip=trip,
            driver=drivers.get(trip.driver_id),
            tractor=tractors.get(trip.tractor_id),
            trailer=trailers.get(trip.trailer_id),
        )
        for trip in trips
    ]


def upcoming_maintenance(
    records: Sequence[MaintenanceRecord], now: datetime, days: int
) -> list[MaintenanceRecord]:
    """
    Maintenance records dated within the next ``days`` days, oldest first.

    Mileage-based service intervals are not taken into account.
    """
    window = expiring_within("date", now, days)
    return sorted(
        (record for record in records if window.matches(record.date)),
        key=lambda record: record.date,
    )
