"""
Report result objects.

Immutable values produced by the aggregation functions. ``to_dict``
renders the public response shape: camelCase keys, amounts as numbers
and timestamps as ISO-8601 strings.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from ..domain.entities import (
    Driver,
    FinanceOperationType,
    MaintenanceRecord,
    Tractor,
    Trailer,
    TransportType,
    Trip,
    User,
    format_amount,
    format_datetime,
)
from ..query.predicates import DateWindow


def _period(window: DateWindow) -> dict[str, Optional[str]]:
    return {
        "dateFrom": format_datetime(window.date_from),
        "dateTo": format_datetime(window.date_to),
    }


def _expenses_by_type(
    breakdown: Mapping[FinanceOperationType, Decimal],
) -> list[dict[str, Any]]:
    return [
        {"type": op_type.value, "amount": format_amount(amount)}
        for op_type, amount in sorted(breakdown.items(), key=lambda item: item[0].value)
    ]


@dataclass(frozen=True)
class TripProfitLoss:
    """Profit and loss of a single trip."""

    trip_id: str
    trip_number: str
    amount: Decimal
    expenses: Decimal
    profit: Decimal
    profit_margin: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "trip": {
                "id": self.trip_id,
                "number": self.trip_number,
                "amount": format_amount(self.amount),
            },
            "expenses": format_amount(self.expenses),
            "profit": format_amount(self.profit),
            "profitMargin": format_amount(self.profit_margin),
        }


@dataclass(frozen=True)
class DriverFinanceReport:
    """Income from trips against expenses booked on a driver."""

    driver_id: str
    window: DateWindow
    income: Decimal
    expenses: Decimal
    balance: Decimal
    operations: int
    trips: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "driverId": self.driver_id,
            "period": _period(self.window),
            "income": format_amount(self.income),
            "expenses": format_amount(self.expenses),
            "balance": format_amount(self.balance),
            "operations": self.operations,
            "trips": self.trips,
        }


@dataclass(frozen=True)
class VehicleExpenseReport:
    """
    Expense breakdown of a tractor or trailer.

    ``expenses_by_type`` is sparse: categories without operations are absent.
    """

    vehicle_type: TransportType
    vehicle_id: str
    window: DateWindow
    total_expenses: Decimal
    expenses_by_type: Mapping[FinanceOperationType, Decimal] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            f"{self.vehicle_type.value}Id": self.vehicle_id,
            "period": _period(self.window),
            "totalExpenses": format_amount(self.total_expenses),
            "expensesByType": _expenses_by_type(self.expenses_by_type),
        }


@dataclass(frozen=True)
class CompanyFinanceReport:
    """Company-wide income, expenses and margin for a period."""

    window: DateWindow
    income: Decimal
    expenses: Decimal
    profit: Decimal
    profit_margin: Decimal
    trips: int
    expenses_by_type: Mapping[FinanceOperationType, Decimal] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": _period(self.window),
            "income": format_amount(self.income),
            "expenses": format_amount(self.expenses),
            "profit": format_amount(self.profit),
            "profitMargin": format_amount(self.profit_margin),
            "trips": self.trips,
            "expensesByType": _expenses_by_type(self.expenses_by_type),
        }


@dataclass(frozen=True)
class DriverWorkload:
    """Trip count, mileage and billed amount of one driver."""

    driver_id: str
    trips: int
    total_mileage: Decimal
    total_amount: Decimal
    driver: Optional[Driver] = None

    def to_dict(self) -> dict[str, Any]:
        driver: dict[str, Any] = {"id": self.driver_id}
        if self.driver is not None:
            driver["firstName"] = self.driver.first_name
            driver["lastName"] = self.driver.last_name
        return {
            "driver": driver,
            "trips": self.trips,
            "totalMileage": format_amount(self.total_mileage),
            "totalAmount": format_amount(self.total_amount),
        }


def _person(person: Optional[Union[Driver, User]]) -> Optional[dict[str, str]]:
    if person is None:
        return None
    return {"firstName": person.first_name, "lastName": person.last_name}


def _plate(vehicle: Optional[Union[Tractor, Trailer]]) -> Optional[dict[str, str]]:
    if vehicle is None:
        return None
    return {"plateNumber": vehicle.plate_number}


@dataclass(frozen=True)
class TripRegisterEntry:
    """Trip row of the register with its driver's name and vehicle plates."""

    trip: Trip
    driver: Optional[Driver] = None
    tractor: Optional[Tractor] = None
    trailer: Optional[Trailer] = None

    def to_dict(self) -> dict[str, Any]:
        data = self.trip.to_dict()
        data["driver"] = _person(self.driver)
        data["tractor"] = _plate(self.tractor)
        data["trailer"] = _plate(self.trailer)
        return data


@dataclass(frozen=True)
class MaintenanceHistoryEntry:
    """Maintenance record with the name of the mechanic who performed it."""

    record: MaintenanceRecord
    mechanic: Optional[User] = None

    def to_dict(self) -> dict[str, Any]:
        data = self.record.to_dict()
        data["mechanic"] = _person(self.mechanic)
        return data
