"""
Domain entities for fleet data.

Core business objects representing trips, vehicles, drivers and the
records attached to them. These entities are framework-agnostic read
snapshots; persistence is handled by the repository layer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional


class TripStatus(str, Enum):
    """Lifecycle states of a trip."""

    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class FinanceOperationType(str, Enum):
    """Categories of finance operations."""

    FUEL = "fuel"
    CAR_WASH = "carWash"
    PARKING = "parking"
    PER_DIEM = "perDiem"
    ADVANCE = "advance"
    SALARY = "salary"
    REPAIR = "repair"
    MAINTENANCE = "maintenance"
    TOLLS = "tolls"
    MISC = "misc"


class MaintenanceType(str, Enum):
    """Kinds of maintenance events."""

    SCHEDULED = "scheduled"
    UNSCHEDULED = "unscheduled"


class TransportType(str, Enum):
    """Vehicles that can be serviced or charged."""

    TRACTOR = "tractor"
    TRAILER = "trailer"


class DocumentType(str, Enum):
    """Kinds of documents kept for drivers, vehicles and trips."""

    DRIVER_LICENSE = "driver_license"
    MEDICAL_CERTIFICATE = "medical_certificate"
    PASSPORT = "passport"
    DRIVER_INSURANCE = "driver_insurance"
    STS = "sts"
    PTS = "pts"
    TRANSPORT_INSURANCE = "transport_insurance"
    DIAGNOSTIC_CARD = "diagnostic_card"
    SERVICE_BOOK = "service_book"
    CERTIFICATE = "certificate"
    CONTRACT = "contract"
    TTN = "ttn"
    WAYBILL = "waybill"
    ACT = "act"
    ATTACHMENT = "attachment"


class DocumentEntityType(str, Enum):
    """Entities a document can be attached to."""

    TRACTOR = "tractor"
    TRAILER = "trailer"
    DRIVER = "driver"
    TRIP = "trip"


class TractorStatus(str, Enum):
    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    INACTIVE = "inactive"


class FuelType(str, Enum):
    DIESEL = "diesel"
    GASOLINE = "gasoline"
    GAS = "gas"


class TrailerType(str, Enum):
    TENT = "tent"
    REFRIGERATOR = "refrigerator"
    CURTAIN = "curtain"
    BOARD = "board"


class UserRole(str, Enum):
    ADMIN = "admin"
    DISPATCHER = "dispatcher"
    ACCOUNTANT = "accountant"
    MECHANIC = "mechanic"


def format_amount(value: Optional[Decimal]) -> Optional[float]:
    """Render a monetary or measured value as a JSON number."""
    if value is None:
        return None
    return float(value)


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    """Render a timestamp as ISO-8601."""
    if value is None:
        return None
    return value.isoformat()


@dataclass(frozen=True)
class Driver:
    """Driver employed by the company."""

    id: str
    first_name: str
    last_name: str
    phone: str
    license_number: str
    license_expiry: datetime
    middle_name: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "middleName": self.middle_name,
            "phone": self.phone,
            "licenseNumber": self.license_number,
            "licenseExpiry": format_datetime(self.license_expiry),
            "createdAt": format_datetime(self.created_at),
        }


@dataclass(frozen=True)
class Tractor:
    """Tractor unit (truck head)."""

    id: str
    brand: str
    model: str
    vin: str
    plate_number: str
    year: int
    fuel_type: FuelType
    consumption: Decimal
    mileage: Decimal = Decimal("0")
    status: TractorStatus = TractorStatus.ACTIVE
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "brand": self.brand,
            "model": self.model,
            "vin": self.vin,
            "plateNumber": self.plate_number,
            "year": self.year,
            "fuelType": self.fuel_type.value,
            "consumption": format_amount(self.consumption),
            "mileage": format_amount(self.mileage),
            "status": self.status.value,
            "createdAt": format_datetime(self.created_at),
        }


@dataclass(frozen=True)
class Trailer:
    """Trailer hauled by a tractor."""

    id: str
    type: TrailerType
    model: str
    plate_number: str
    year: int
    payload: Decimal
    mileage: Decimal = Decimal("0")
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "model": self.model,
            "plateNumber": self.plate_number,
            "year": self.year,
            "payload": format_amount(self.payload),
            "mileage": format_amount(self.mileage),
            "createdAt": format_datetime(self.created_at),
        }


@dataclass(frozen=True)
class Coupling:
    """Operating unit: one tractor, one trailer and one driver."""

    id: str
    tractor_id: str
    trailer_id: str
    driver_id: str
    is_active: bool = True
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "tractorId": self.tractor_id,
            "trailerId": self.trailer_id,
            "driverId": self.driver_id,
            "isActive": self.is_active,
            "createdAt": format_datetime(self.created_at),
        }


@dataclass(frozen=True)
class User:
    """Staff account. Password material never leaves the storage layer."""

    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "role": self.role.value,
            "createdAt": format_datetime(self.created_at),
        }


@dataclass(frozen=True)
class Trip:
    """
    Cargo-carrying journey billed to a customer.

    ``amount`` is derived from ``weight`` and ``rate_per_ton`` and cannot
    be set independently.
    """

    id: str
    number: str
    route_from: str
    route_to: str
    customer: str
    cargo_type: str
    departure_date: datetime
    weight: Decimal
    rate_per_ton: Decimal
    driver_id: str
    tractor_id: str
    trailer_id: str
    status: TripStatus = TripStatus.PLANNED
    mileage: Decimal = Decimal("0")
    arrival_date: Optional[datetime] = None
    coupling_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def amount(self) -> Decimal:
        return calculate_trip_amount(self.weight, self.rate_per_ton)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "number": self.number,
            "routeFrom": self.route_from,
            "routeTo": self.route_to,
            "customer": self.customer,
            "cargoType": self.cargo_type,
            "departureDate": format_datetime(self.departure_date),
            "arrivalDate": format_datetime(self.arrival_date),
            "mileage": format_amount(self.mileage),
            "weight": format_amount(self.weight),
            "ratePerTon": format_amount(self.rate_per_ton),
            "amount": format_amount(self.amount),
            "status": self.status.value,
            "driverId": self.driver_id,
            "tractorId": self.tractor_id,
            "trailerId": self.trailer_id,
            "couplingId": self.coupling_id,
            "createdAt": format_datetime(self.created_at),
        }


def calculate_trip_amount(weight: Decimal, rate_per_ton: Decimal) -> Decimal:
    """Billed amount of a trip: weight times rate per ton."""
    return Decimal(weight) * Decimal(rate_per_ton)


@dataclass(frozen=True)
class FinanceOperation:
    """Dated monetary transaction attributable to a driver, trip or vehicle."""

    id: str
    type: FinanceOperationType
    amount: Decimal
    date: datetime
    driver_id: Optional[str] = None
    trip_id: Optional[str] = None
    tractor_id: Optional[str] = None
    trailer_id: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate amount on creation."""
        if self.amount <= 0:
            raise ValueError(f"Finance operation amount must be positive: {self.amount}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "amount": format_amount(self.amount),
            "date": format_datetime(self.date),
            "driverId": self.driver_id,
            "tripId": self.trip_id,
            "tractorId": self.tractor_id,
            "trailerId": self.trailer_id,
            "description": self.description,
            "createdAt": format_datetime(self.created_at),
        }


@dataclass(frozen=True)
class MaintenanceRecord:
    """Logged service or repair event for a tractor or trailer."""

    id: str
    type: MaintenanceType
    entity_type: TransportType
    transport_id: str
    date: datetime
    mileage: Decimal
    cost: Decimal
    mechanic_id: str
    tasks: tuple[str, ...] = field(default_factory=tuple)
    materials: tuple[str, ...] = field(default_factory=tuple)
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "entityType": self.entity_type.value,
            "transportId": self.transport_id,
            "date": format_datetime(self.date),
            "mileage": format_amount(self.mileage),
            "cost": format_amount(self.cost),
            "mechanicId": self.mechanic_id,
            "tasks": list(self.tasks),
            "materials": list(self.materials),
            "createdAt": format_datetime(self.created_at),
        }


@dataclass(frozen=True)
class Document:
    """Document attached to a driver, vehicle or trip."""

    id: str
    type: DocumentType
    entity_type: DocumentEntityType
    entity_id: str
    file_name: str
    number: Optional[str] = None
    issue_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "entityType": self.entity_type.value,
            "entityId": self.entity_id,
            "number": self.number,
            "fileName": self.file_name,
            "issueDate": format_datetime(self.issue_date),
            "expiryDate": format_datetime(self.expiry_date),
            "description": self.description,
            "createdAt": format_datetime(self.created_at),
        }
