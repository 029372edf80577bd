"""
Tests for the aggregation engine.

Reductions are pure, so these tests work on in-memory entities only.
"""

from datetime import datetime, timedelta
from decimal import Decimal

from app.domain.entities import FinanceOperationType, TransportType
from app.query.predicates import DateWindow
from app.reports import aggregation

NOW = datetime(2024, 1, 1)


class TestTripProfitLoss:
    """Test trip profit and loss."""

    def test_profit_and_margin(self, make_trip, make_operation):
        trip = make_trip(id="trip-1", weight=Decimal("10"), rate_per_ton=Decimal("1000"))
        operations = [
            make_operation(trip_id="trip-1", amount=Decimal("1200")),
            make_operation(trip_id="trip-1", amount=Decimal("1800")),
        ]

        report = aggregation.trip_profit_loss(trip, operations)

        assert report.expenses == Decimal("3000")
        assert report.profit == Decimal("7000")
        assert report.profit_margin == Decimal("70")
        assert report.to_dict() == {
            "trip": {"id": "trip-1", "number": trip.number, "amount": 10000.0},
            "expenses": 3000.0,
            "profit": 7000.0,
            "profitMargin": 70.0,
        }

    def test_zero_amount_gives_zero_margin(self, make_trip, make_operation):
        trip = make_trip(id="trip-1", weight=Decimal("0"), rate_per_ton=Decimal("1000"))
        operations = [make_operation(trip_id="trip-1", amount=Decimal("50"))]

        report = aggregation.trip_profit_loss(trip, operations)

        assert report.profit == Decimal("-50")
        assert report.profit_margin == 0

    def test_no_operations(self, make_trip):
        report = aggregation.trip_profit_loss(make_trip(), [])
        assert report.expenses == 0
        assert report.profit_margin == Decimal("100")

    def test_operations_of_other_trips_ignored(self, make_trip, make_operation):
        trip = make_trip(id="trip-1")
        operations = [
            make_operation(trip_id="trip-1", amount=Decimal("300")),
            make_operation(trip_id="trip-2", amount=Decimal("9999")),
            make_operation(trip_id=None, amount=Decimal("9999")),
        ]
        assert aggregation.trip_profit_loss(trip, operations).expenses == Decimal("300")


class TestDriverFinance:
    """Test the driver finance report."""

    def test_income_expenses_balance(self, make_trip, make_operation):
        trips = [
            make_trip(driver_id="driver-1", weight=Decimal("5"), rate_per_ton=Decimal("1000")),
            make_trip(driver_id="driver-1", weight=Decimal("8"), rate_per_ton=Decimal("1000")),
        ]
        operations = [
            make_operation(driver_id="driver-1", amount=Decimal("1000")),
            make_operation(driver_id="driver-1", amount=Decimal("500")),
            make_operation(driver_id="driver-1", amount=Decimal("200")),
        ]

        report = aggregation.driver_finance("driver-1", trips, operations)

        assert report.income == Decimal("13000")
        assert report.expenses == Decimal("1700")
        assert report.balance == Decimal("11300")
        assert report.trips == 2
        assert report.operations == 3

    def test_window_applies_to_departure_and_operation_dates(self, make_trip, make_operation):
        window = DateWindow(datetime(2024, 1, 1), datetime(2024, 1, 31))
        trips = [
            make_trip(driver_id="driver-1", departure_date=datetime(2024, 1, 15)),
            make_trip(driver_id="driver-1", departure_date=datetime(2024, 2, 15)),
        ]
        operations = [
            make_operation(driver_id="driver-1", date=datetime(2024, 1, 31)),
            make_operation(driver_id="driver-1", date=datetime(2023, 12, 31)),
        ]

        report = aggregation.driver_finance("driver-1", trips, operations, window)

        assert report.trips == 1
        assert report.operations == 1
        assert report.to_dict()["period"] == {
            "dateFrom": "2024-01-01T00:00:00",
            "dateTo": "2024-01-31T00:00:00",
        }

    def test_other_drivers_ignored(self, make_trip, make_operation):
        report = aggregation.driver_finance(
            "driver-1",
            [make_trip(driver_id="driver-2")],
            [make_operation(driver_id="driver-2")],
        )
        assert report.income == 0
        assert report.expenses == 0
        assert report.to_dict()["period"] == {"dateFrom": None, "dateTo": None}


class TestVehicleExpenses:
    """Test tractor and trailer expense breakdowns."""

    def test_breakdown_is_sparse(self, make_operation):
        operations = [
            make_operation(tractor_id="tractor-1", type=FinanceOperationType.FUEL, amount=Decimal("300")),
            make_operation(tractor_id="tractor-1", type=FinanceOperationType.FUEL, amount=Decimal("200")),
            make_operation(tractor_id="tractor-1", type=FinanceOperationType.REPAIR, amount=Decimal("1000")),
            make_operation(tractor_id="tractor-2", type=FinanceOperationType.TOLLS, amount=Decimal("70")),
        ]

        report = aggregation.vehicle_expenses(TransportType.TRACTOR, "tractor-1", operations)

        assert report.total_expenses == Decimal("1500")
        assert report.expenses_by_type == {
            FinanceOperationType.FUEL: Decimal("500"),
            FinanceOperationType.REPAIR: Decimal("1000"),
        }
        data = report.to_dict()
        assert data["tractorId"] == "tractor-1"
        assert {item["type"] for item in data["expensesByType"]} == {"fuel", "repair"}

    def test_trailer_uses_trailer_link(self, make_operation):
        operations = [
            make_operation(trailer_id="trailer-1", tractor_id="tractor-1", amount=Decimal("40")),
        ]

        trailer = aggregation.vehicle_expenses(TransportType.TRAILER, "trailer-1", operations)
        tractor = aggregation.vehicle_expenses(TransportType.TRAILER, "tractor-1", operations)

        assert trailer.total_expenses == Decimal("40")
        assert trailer.to_dict()["trailerId"] == "trailer-1"
        assert tractor.total_expenses == 0
        assert tractor.expenses_by_type == {}


class TestCompanyFinance:
    """Test the company finance report."""

    def test_totals(self, make_trip, make_operation):
        trips = [make_trip(), make_trip(weight=Decimal("20"))]
        operations = [
            make_operation(type=FinanceOperationType.SALARY, amount=Decimal("5000")),
            make_operation(type=FinanceOperationType.FUEL, amount=Decimal("1000")),
        ]

        report = aggregation.company_finance(trips, operations)

        assert report.income == Decimal("30000")
        assert report.expenses == Decimal("6000")
        assert report.profit == Decimal("24000")
        assert report.profit_margin == Decimal("80")
        assert report.trips == 2

    def test_no_income_gives_zero_margin(self, make_operation):
        report = aggregation.company_finance([], [make_operation()])
        assert report.profit == Decimal("-100")
        assert report.profit_margin == 0

    def test_empty_period(self):
        report = aggregation.company_finance([], [])
        assert report.to_dict()["income"] == 0.0
        assert report.to_dict()["expensesByType"] == []

    def test_paged_sums_match_single_pass(self, make_trip, make_operation):
        trips = [make_trip(weight=Decimal(n)) for n in range(1, 48)]
        operations = [make_operation(amount=Decimal(n)) for n in range(1, 35)]

        full = aggregation.company_finance(trips, operations)

        limit = 20
        paged_income = sum(
            (
                aggregation.sum_amounts(trip.amount for trip in trips[offset : offset + limit])
                for offset in range(0, len(trips), limit)
            ),
            Decimal("0"),
        )
        paged_expenses = sum(
            (
                aggregation.sum_amounts(op.amount for op in operations[offset : offset + limit])
                for offset in range(0, len(operations), limit)
            ),
            Decimal("0"),
        )
        assert full.income == paged_income
        assert full.expenses == paged_expenses


class TestDriverWorkload:
    """Test grouping trips by driver."""

    def test_grouping(self, make_trip, driver):
        trips = [
            make_trip(driver_id="driver-1", mileage=Decimal("800")),
            make_trip(driver_id="driver-1", mileage=Decimal("200")),
            make_trip(driver_id="driver-2", mileage=Decimal("50")),
        ]

        workload = aggregation.driver_workload(trips, {"driver-1": driver})

        by_driver = {entry.driver_id: entry for entry in workload}
        assert set(by_driver) == {"driver-1", "driver-2"}
        assert by_driver["driver-1"].trips == 2
        assert by_driver["driver-1"].total_mileage == Decimal("1000")
        assert by_driver["driver-1"].total_amount == Decimal("20000")
        assert by_driver["driver-1"].to_dict()["driver"] == {
            "id": "driver-1",
            "firstName": "Ivan",
            "lastName": "Petrov",
        }
        assert by_driver["driver-2"].to_dict()["driver"] == {"id": "driver-2"}

    def test_no_trips(self):
        assert aggregation.driver_workload([]) == []


class TestDocumentExpiry:
    """Test the expiring/expired partition."""

    def test_partition_is_disjoint(self, make_document):
        expired = make_document(expiry_date=datetime(2023, 12, 31))
        expiring = make_document(expiry_date=datetime(2024, 1, 15))
        later = make_document(expiry_date=datetime(2024, 6, 1))
        undated = make_document(expiry_date=None)
        documents = [expired, expiring, later, undated]

        expiring_set = aggregation.expiring_documents(documents, NOW, 30)
        expired_set = aggregation.expired_documents(documents, NOW)

        assert expiring_set == [expiring]
        assert expired_set == [expired]

    def test_boundaries(self, make_document):
        at_now = make_document(expiry_date=NOW)
        at_end = make_document(expiry_date=NOW + timedelta(days=30))
        past_end = make_document(expiry_date=NOW + timedelta(days=30, seconds=1))

        expiring_set = aggregation.expiring_documents([at_now, at_end, past_end], NOW, 30)

        assert expiring_set == [at_now, at_end]
        assert aggregation.expired_documents([at_now], NOW) == []

    def test_sorted_by_expiry(self, make_document):
        late = make_document(expiry_date=datetime(2023, 12, 20))
        early = make_document(expiry_date=datetime(2023, 11, 1))
        assert aggregation.expired_documents([late, early], NOW) == [early, late]


class TestMaintenance:
    """Test maintenance history and upcoming maintenance."""

    def test_history_newest_first(self, make_maintenance):
        older = make_maintenance(date=datetime(2023, 5, 1))
        newer = make_maintenance(date=datetime(2023, 9, 1))
        other_vehicle = make_maintenance(transport_id="tractor-2")
        trailer = make_maintenance(entity_type=TransportType.TRAILER)

        history = aggregation.maintenance_history(
            [older, other_vehicle, newer, trailer], TransportType.TRACTOR, "tractor-1"
        )

        assert history == [newer, older]

    def test_upcoming_within_window(self, make_maintenance):
        past = make_maintenance(date=datetime(2023, 12, 1))
        soon = make_maintenance(date=datetime(2024, 1, 20))
        sooner = make_maintenance(date=datetime(2024, 1, 3))
        far = make_maintenance(date=datetime(2024, 3, 1))

        upcoming = aggregation.upcoming_maintenance([past, soon, sooner, far], NOW, 30)

        assert upcoming == [sooner, soon]
