"""
Database models for fleet service.

This module defines SQLAlchemy ORM models for the fleet: staff users,
drivers, vehicles, couplings, trips and the finance, maintenance and
document records attached to them.
"""

import uuid
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base: Any = declarative_base()


def generate_id() -> str:
    """Generate a UUID4 primary key."""
    return str(uuid.uuid4())


class UserModel(Base):
    """
    Staff account.

    Attributes:
        id: Primary key (UUID)
        email: Unique login email
        password_hash: Hashed password, never exposed by the service
        first_name: First name
        last_name: Last name
        role: One of admin, dispatcher, accountant, mechanic
        created_at: Creation timestamp
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False, index=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)


class DriverModel(Base):
    """Driver employed by the company."""

    __tablename__ = "drivers"

    id = Column(String(36), primary_key=True, default=generate_id)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    middle_name = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=False)
    license_number = Column(String(50), nullable=False)
    license_expiry = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)


class TractorModel(Base):
    """Tractor unit."""

    __tablename__ = "tractors"

    id = Column(String(36), primary_key=True, default=generate_id)
    brand = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    vin = Column(String(50), unique=True, nullable=False)
    plate_number = Column(String(20), unique=True, nullable=False)
    mileage = Column(Float, default=0, nullable=False)
    year = Column(Integer, nullable=False)
    status = Column(String(20), default="active", nullable=False, index=True)
    fuel_type = Column(String(20), nullable=False)
    consumption = Column(Float, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)


class TrailerModel(Base):
    """Trailer hauled by a tractor."""

    __tablename__ = "trailers"

    id = Column(String(36), primary_key=True, default=generate_id)
    type = Column(String(20), nullable=False, index=True)
    model = Column(String(100), nullable=False)
    plate_number = Column(String(20), unique=True, nullable=False)
    year = Column(Integer, nullable=False)
    mileage = Column(Float, default=0, nullable=False)
    payload = Column(Float, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)


class CouplingModel(Base):
    """Assignment of a tractor, a trailer and a driver as one operating unit."""

    __tablename__ = "couplings"

    id = Column(String(36), primary_key=True, default=generate_id)
    tractor_id = Column(String(36), ForeignKey("tractors.id"), nullable=False, index=True)
    trailer_id = Column(String(36), ForeignKey("trailers.id"), nullable=False, index=True)
    driver_id = Column(String(36), ForeignKey("drivers.id"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)


class TripModel(Base):
    """
    Cargo-carrying journey.

    ``amount`` is stored for sorting and reporting but is always written as
    ``weight * rate_per_ton`` by the trip service.
    """

    __tablename__ = "trips"

    id = Column(String(36), primary_key=True, default=generate_id)
    number = Column(String(50), unique=True, nullable=False, index=True)
    coupling_id = Column(String(36), ForeignKey("couplings.id"), nullable=True)
    tractor_id = Column(String(36), ForeignKey("tractors.id"), nullable=False, index=True)
    trailer_id = Column(String(36), ForeignKey("trailers.id"), nullable=False, index=True)
    driver_id = Column(String(36), ForeignKey("drivers.id"), nullable=False, index=True)
    route_from = Column(String(255), nullable=False)
    route_to = Column(String(255), nullable=False)
    departure_date = Column(DateTime, nullable=False, index=True)
    arrival_date = Column(DateTime, nullable=True)
    mileage = Column(Float, default=0, nullable=False)
    customer = Column(String(255), nullable=False)
    cargo_type = Column(String(100), nullable=False)
    weight = Column(Float, nullable=False)
    rate_per_ton = Column(Float, nullable=False)
    amount = Column(Float, nullable=False)
    status = Column(String(20), default="planned", nullable=False, index=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)


class FinanceOperationModel(Base):
    """Dated monetary transaction."""

    __tablename__ = "finance_operations"

    id = Column(String(36), primary_key=True, default=generate_id)
    type = Column(String(20), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    date = Column(DateTime, nullable=False, index=True)
    driver_id = Column(String(36), ForeignKey("drivers.id"), nullable=True, index=True)
    trip_id = Column(String(36), ForeignKey("trips.id"), nullable=True, index=True)
    tractor_id = Column(String(36), ForeignKey("tractors.id"), nullable=True, index=True)
    trailer_id = Column(String(36), ForeignKey("trailers.id"), nullable=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)


class MaintenanceModel(Base):
    """Service or repair event for a tractor or trailer."""

    __tablename__ = "maintenance_records"

    id = Column(String(36), primary_key=True, default=generate_id)
    type = Column(String(20), nullable=False)
    entity_type = Column(String(20), nullable=False)
    transport_id = Column(String(36), nullable=False)
    date = Column(DateTime, nullable=False, index=True)
    mileage = Column(Float, nullable=False)
    tasks = Column(JSON, default=list, nullable=False)
    materials = Column(JSON, default=list, nullable=False)
    cost = Column(Float, nullable=False)
    mechanic_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    __table_args__ = (Index("ix_maintenance_transport", "entity_type", "transport_id"),)


class DocumentModel(Base):
    """Document metadata; file contents live in external storage."""

    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=generate_id)
    type = Column(String(30), nullable=False)
    entity_type = Column(String(20), nullable=False)
    entity_id = Column(String(36), nullable=False)
    number = Column(String(100), nullable=True)
    issue_date = Column(DateTime, nullable=True)
    expiry_date = Column(DateTime, nullable=True, index=True)
    file_path = Column(String(500), nullable=False, default="")
    file_name = Column(String(255), nullable=False)
    mime_type = Column(String(100), nullable=True)
    size = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    __table_args__ = (Index("ix_documents_entity", "entity_type", "entity_id"),)
