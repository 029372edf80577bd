"""
Test configuration and fixtures
"""

from datetime import datetime
from decimal import Decimal
from itertools import count
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.app import app
from app.context import RequestContext
from app.database import get_db
from app.domain.entities import (
    Document,
    DocumentEntityType,
    DocumentType,
    Driver,
    FinanceOperation,
    FinanceOperationType,
    MaintenanceRecord,
    MaintenanceType,
    TransportType,
    Trip,
    TripStatus,
)
from app.models import Base, DriverModel, TractorModel, TrailerModel, UserModel
from app.repositories.fleet_repository import IFleetRepository

# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

NOW = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database dependency override"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    # Mock init_db to prevent creating the local database file
    with patch("app.app.init_db"):
        app.dependency_overrides[get_db] = override_get_db
        with TestClient(app) as test_client:
            yield test_client
        app.dependency_overrides.clear()


@pytest.fixture
def fleet(db_session):
    """Persist one driver, tractor, trailer and mechanic; return their ids."""
    driver = DriverModel(
        first_name="Ivan",
        last_name="Petrov",
        phone="+7 900 000 00 01",
        license_number="77AA000001",
        license_expiry=datetime(2026, 5, 1),
    )
    tractor = TractorModel(
        brand="Volvo",
        model="FH16",
        vin="YV2RT40A8LB000001",
        plate_number="A001AA77",
        year=2020,
        status="active",
        fuel_type="diesel",
        consumption=32.5,
    )
    trailer = TrailerModel(
        type="tent",
        model="Schmitz S.CS",
        plate_number="AA0001 77",
        year=2019,
        payload=20.0,
    )
    mechanic = UserModel(
        email="mechanic@example.com",
        first_name="Oleg",
        last_name="Sidorov",
        role="mechanic",
    )
    db_session.add_all([driver, tractor, trailer, mechanic])
    db_session.commit()
    return {
        "driver_id": driver.id,
        "tractor_id": tractor.id,
        "trailer_id": trailer.id,
        "mechanic_id": mechanic.id,
    }


@pytest.fixture
def context():
    """Request context with a fixed reference instant."""
    return RequestContext(request_id="req-test", now=NOW)


@pytest.fixture
def mock_repository():
    """Repository double with every method mocked."""
    repository = AsyncMock(spec=IFleetRepository)
    repository.find_all.return_value = []
    repository.find_by_ids.return_value = {}
    repository.exists.return_value = True
    return repository


@pytest.fixture
def make_trip():
    """Factory for trip entities."""
    ids = count(1)

    def _make(**overrides) -> Trip:
        n = next(ids)
        values = {
            "id": f"trip-{n}",
            "number": f"T-{n:04d}",
            "route_from": "Moscow",
            "route_to": "Kazan",
            "customer": "Acme Logistics",
            "cargo_type": "pallets",
            "departure_date": datetime(2024, 1, 10),
            "weight": Decimal("10"),
            "rate_per_ton": Decimal("1000"),
            "driver_id": "driver-1",
            "tractor_id": "tractor-1",
            "trailer_id": "trailer-1",
            "status": TripStatus.COMPLETED,
            "mileage": Decimal("800"),
        }
        values.update(overrides)
        return Trip(**values)

    return _make


@pytest.fixture
def make_operation():
    """Factory for finance operations."""
    ids = count(1)

    def _make(**overrides) -> FinanceOperation:
        values = {
            "id": f"op-{next(ids)}",
            "type": FinanceOperationType.FUEL,
            "amount": Decimal("100"),
            "date": datetime(2024, 1, 10),
        }
        values.update(overrides)
        return FinanceOperation(**values)

    return _make


@pytest.fixture
def make_document():
    """Factory for documents."""
    ids = count(1)

    def _make(**overrides) -> Document:
        n = next(ids)
        values = {
            "id": f"doc-{n}",
            "type": DocumentType.DRIVER_LICENSE,
            "entity_type": DocumentEntityType.DRIVER,
            "entity_id": "driver-1",
            "file_name": f"scan-{n}.pdf",
        }
        values.update(overrides)
        return Document(**values)

    return _make


@pytest.fixture
def make_maintenance():
    """Factory for maintenance records."""
    ids = count(1)

    def _make(**overrides) -> MaintenanceRecord:
        values = {
            "id": f"mnt-{next(ids)}",
            "type": MaintenanceType.SCHEDULED,
            "entity_type": TransportType.TRACTOR,
            "transport_id": "tractor-1",
            "date": datetime(2024, 1, 5),
            "mileage": Decimal("120000"),
            "cost": Decimal("450"),
            "mechanic_id": "user-1",
        }
        values.update(overrides)
        return MaintenanceRecord(**values)

    return _make


@pytest.fixture
def driver():
    return Driver(
        id="driver-1",
        first_name="Ivan",
        last_name="Petrov",
        phone="+7 900 000 00 01",
        license_number="77AA000001",
        license_expiry=datetime(2026, 5, 1),
    )
