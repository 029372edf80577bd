"""
Tests for the report service.

The repository is mocked; these tests check which inputs each report
requests and how missing entities and bad parameters are reported.
"""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from app.domain.entities import (
    FuelType,
    Tractor,
    Trailer,
    TrailerType,
    TransportType,
    User,
    UserRole,
)
from app.domain.exceptions import EntityNotFoundException, ValidationException
from app.query.predicates import Equals, Range
from app.repositories.fleet_repository import (
    DOCUMENTS,
    DRIVERS,
    FINANCE,
    MAINTENANCE,
    TRACTORS,
    TRAILERS,
    TRIPS,
    USERS,
)
from app.services.report_service import ReportService


@pytest.fixture
def service(mock_repository):
    return ReportService(
        mock_repository,
        default_limit=20,
        max_limit=100,
        expiry_window_days=30,
        maintenance_window_days=14,
    )


class TestTripProfitLoss:
    """Test the trip profit and loss report."""

    @pytest.mark.asyncio
    async def test_report(self, service, mock_repository, context, make_trip, make_operation):
        trip = make_trip(id="trip-1")
        mock_repository.get.return_value = trip
        mock_repository.find_all.return_value = [
            make_operation(trip_id="trip-1", amount=Decimal("3000"))
        ]

        report = await service.trip_profit_loss("trip-1", context)

        assert report.profit == Decimal("7000")
        mock_repository.get.assert_awaited_once_with(TRIPS, "trip-1")
        mock_repository.find_all.assert_awaited_once_with(
            FINANCE, (Equals("trip_id", "trip-1"),)
        )

    @pytest.mark.asyncio
    async def test_missing_trip(self, service, mock_repository, context):
        mock_repository.get.return_value = None

        with pytest.raises(EntityNotFoundException) as exc_info:
            await service.trip_profit_loss("missing", context)

        assert exc_info.value.details == {"entity": "trip", "id": "missing"}


class TestDriverFinance:
    """Test the driver finance report."""

    @pytest.mark.asyncio
    async def test_window_passed_to_storage(
        self, service, mock_repository, context, make_trip, make_operation
    ):
        mock_repository.find_all.side_effect = [
            [make_trip(driver_id="driver-1", departure_date=datetime(2024, 1, 5))],
            [make_operation(driver_id="driver-1", date=datetime(2024, 1, 6))],
        ]

        report = await service.driver_finance(
            "driver-1", {"dateFrom": "2024-01-01", "dateTo": "2024-01-31"}, context
        )

        assert report.income == Decimal("10000")
        assert report.expenses == Decimal("100")
        start, end = datetime(2024, 1, 1), datetime(2024, 1, 31)
        trips_call, operations_call = mock_repository.find_all.await_args_list
        assert trips_call.args == (
            TRIPS,
            (Equals("driver_id", "driver-1"), Range("departure_date", gte=start, lte=end)),
        )
        assert operations_call.args == (
            FINANCE,
            (Equals("driver_id", "driver-1"), Range("date", gte=start, lte=end)),
        )

    @pytest.mark.asyncio
    async def test_missing_driver(self, service, mock_repository, context):
        mock_repository.exists.return_value = False

        with pytest.raises(EntityNotFoundException):
            await service.driver_finance("missing", {}, context)

        mock_repository.exists.assert_awaited_once_with(DRIVERS, "missing")

    @pytest.mark.asyncio
    async def test_inverted_window_rejected_before_storage(
        self, service, mock_repository, context
    ):
        with pytest.raises(ValidationException):
            await service.driver_finance(
                "driver-1", {"dateFrom": "2024-02-01", "dateTo": "2024-01-01"}, context
            )

        mock_repository.find_all.assert_not_awaited()


class TestVehicleExpenses:
    """Test tractor and trailer expense reports."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "vehicle_type, collection, link_field",
        [
            (TransportType.TRACTOR, TRACTORS, "tractor_id"),
            (TransportType.TRAILER, TRAILERS, "trailer_id"),
        ],
    )
    async def test_uses_vehicle_link(
        self, service, mock_repository, context, vehicle_type, collection, link_field
    ):
        await service.vehicle_expenses(vehicle_type, "v-1", {}, context)

        mock_repository.exists.assert_awaited_once_with(collection, "v-1")
        mock_repository.find_all.assert_awaited_once_with(FINANCE, (Equals(link_field, "v-1"),))

    @pytest.mark.asyncio
    async def test_missing_vehicle(self, service, mock_repository, context):
        mock_repository.exists.return_value = False

        with pytest.raises(EntityNotFoundException) as exc_info:
            await service.vehicle_expenses(TransportType.TRAILER, "t-9", {}, context)

        assert exc_info.value.details["entity"] == "trailer"


class TestCompanyFinance:
    """Test the company finance report."""

    @pytest.mark.asyncio
    async def test_unbounded_period_reads_everything(
        self, service, mock_repository, context, make_trip
    ):
        mock_repository.find_all.side_effect = [[make_trip()], []]

        report = await service.company_finance({}, context)

        assert report.income == Decimal("10000")
        assert report.profit_margin == Decimal("100")
        assert [call.args for call in mock_repository.find_all.await_args_list] == [
            (TRIPS, ()),
            (FINANCE, ()),
        ]


class TestTripRegister:
    """Test the paginated trip register."""

    @pytest.mark.asyncio
    async def test_register(self, service, mock_repository, context, make_trip):
        mock_repository.find_page.return_value = ([make_trip()], 41)

        result = await service.trip_register({"status": "completed", "limit": "20"}, context)

        assert result.pagination.total_pages == 3
        spec = mock_repository.find_page.await_args.args[0]
        assert spec.entity == "trips"

    @pytest.mark.asyncio
    async def test_rows_carry_driver_and_vehicles(
        self, service, mock_repository, context, make_trip, driver
    ):
        tractor = Tractor(
            id="tractor-1",
            brand="Volvo",
            model="FH16",
            vin="YV2RT40A8LB000001",
            plate_number="A001AA77",
            year=2020,
            fuel_type=FuelType.DIESEL,
            consumption=Decimal("32.5"),
        )
        trailer = Trailer(
            id="trailer-1",
            type=TrailerType.TENT,
            model="Schmitz S.CS",
            plate_number="AA0001 77",
            year=2019,
            payload=Decimal("20"),
        )
        references = {
            DRIVERS: {"driver-1": driver},
            TRACTORS: {"tractor-1": tractor},
            TRAILERS: {"trailer-1": trailer},
        }

        async def find_by_ids(collection, ids):
            return {key: value for key, value in references[collection].items() if key in ids}

        mock_repository.find_page.return_value = ([make_trip()], 1)
        mock_repository.find_by_ids.side_effect = find_by_ids

        result = await service.trip_register({}, context)

        row = result.to_dict()["data"][0]
        assert row["driver"] == {"firstName": "Ivan", "lastName": "Petrov"}
        assert row["tractor"] == {"plateNumber": "A001AA77"}
        assert row["trailer"] == {"plateNumber": "AA0001 77"}

    @pytest.mark.asyncio
    async def test_unknown_references_render_as_null(
        self, service, mock_repository, context, make_trip
    ):
        mock_repository.find_page.return_value = ([make_trip()], 1)

        result = await service.trip_register({}, context)

        row = result.to_dict()["data"][0]
        assert (row["driver"], row["tractor"], row["trailer"]) == (None, None, None)
        assert row["number"] == "T-0001"

    @pytest.mark.asyncio
    async def test_search_is_not_a_register_filter(self, service, mock_repository, context):
        mock_repository.find_page.return_value = ([], 0)

        await service.trip_register({"search": "kazan", "driverId": "d-1"}, context)

        spec = mock_repository.find_page.await_args.args[0]
        assert spec.predicates == ()


class TestMaintenanceReports:
    """Test maintenance history and upcoming maintenance."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "params",
        [{}, {"transportId": "tractor-1"}, {"entityType": "tractor"}],
    )
    async def test_history_requires_vehicle(self, service, mock_repository, context, params):
        with pytest.raises(ValidationException):
            await service.maintenance_history(params, context)

        mock_repository.find_all.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_history_rejects_unknown_entity_type(self, service, context):
        with pytest.raises(ValidationException):
            await service.maintenance_history(
                {"transportId": "x", "entityType": "driver"}, context
            )

    @pytest.mark.asyncio
    async def test_history(self, service, mock_repository, context, make_maintenance):
        older = make_maintenance(date=datetime(2023, 1, 1))
        newer = make_maintenance(date=datetime(2023, 6, 1))
        mock_repository.find_all.return_value = [older, newer]

        records = await service.maintenance_history(
            {"transportId": "tractor-1", "entityType": "tractor"}, context
        )

        assert [entry.record for entry in records] == [newer, older]
        mock_repository.find_all.assert_awaited_once_with(
            MAINTENANCE,
            (
                Equals("entity_type", TransportType.TRACTOR),
                Equals("transport_id", "tractor-1"),
            ),
        )

    @pytest.mark.asyncio
    async def test_history_names_mechanic(
        self, service, mock_repository, context, make_maintenance
    ):
        mock_repository.find_all.return_value = [make_maintenance(mechanic_id="user-1")]
        mock_repository.find_by_ids.return_value = {
            "user-1": User(
                id="user-1",
                email="mechanic@example.com",
                first_name="Oleg",
                last_name="Sidorov",
                role=UserRole.MECHANIC,
            )
        }

        records = await service.maintenance_history(
            {"transportId": "tractor-1", "entityType": "tractor"}, context
        )

        assert records[0].to_dict()["mechanic"] == {"firstName": "Oleg", "lastName": "Sidorov"}
        mock_repository.find_by_ids.assert_awaited_once_with(USERS, {"user-1"})

    @pytest.mark.asyncio
    async def test_upcoming_uses_configured_default(self, service, mock_repository, context):
        await service.upcoming_maintenance({"days": "abc"}, context)

        mock_repository.find_all.assert_awaited_once_with(
            MAINTENANCE, (Range("date", gte=context.now, lte=context.now + timedelta(days=14)),)
        )

    @pytest.mark.asyncio
    async def test_upcoming_window_clamped(self, mock_repository, context):
        service = ReportService(
            mock_repository,
            default_limit=20,
            max_limit=100,
            expiry_window_days=30,
            maintenance_window_days=14,
            max_window_days=365,
        )

        await service.upcoming_maintenance({"days": "3000000"}, context)

        mock_repository.find_all.assert_awaited_once_with(
            MAINTENANCE, (Range("date", gte=context.now, lte=context.now + timedelta(days=365)),)
        )


class TestDriverWorkload:
    """Test the driver workload report."""

    @pytest.mark.asyncio
    async def test_names_resolved(self, service, mock_repository, context, make_trip, driver):
        mock_repository.find_all.return_value = [
            make_trip(driver_id="driver-1"),
            make_trip(driver_id="driver-1"),
        ]
        mock_repository.find_by_ids.return_value = {"driver-1": driver}

        workload = await service.driver_workload({}, context)

        assert len(workload) == 1
        assert workload[0].to_dict()["driver"]["lastName"] == "Petrov"
        mock_repository.find_by_ids.assert_awaited_once_with(DRIVERS, {"driver-1"})

    @pytest.mark.asyncio
    async def test_driver_filter(self, service, mock_repository, context):
        await service.driver_workload({"driverId": "driver-7"}, context)

        mock_repository.find_all.assert_awaited_once_with(
            TRIPS, (Equals("driver_id", "driver-7"),)
        )


class TestDocumentReports:
    """Test expiring and expired document reports."""

    @pytest.mark.asyncio
    async def test_expiring_window(self, service, mock_repository, context, make_document):
        inside = make_document(expiry_date=context.now + timedelta(days=3))
        mock_repository.find_all.return_value = [inside]

        documents = await service.expiring_documents({"days": "7"}, context)

        assert documents == [inside]
        mock_repository.find_all.assert_awaited_once_with(
            DOCUMENTS,
            (Range("expiry_date", gte=context.now, lte=context.now + timedelta(days=7)),),
        )

    @pytest.mark.asyncio
    async def test_expired_uses_request_now(self, service, mock_repository, context):
        await service.expired_documents(context)

        mock_repository.find_all.assert_awaited_once_with(
            DOCUMENTS, (Range("expiry_date", lt=context.now),)
        )
