"""
Request models for the trip and finance write endpoints.

Bodies use the camelCase field names of the public API. Timestamps with
an offset are normalized to naive UTC, the storage representation.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .domain.entities import FinanceOperationType, TripStatus


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware timestamp to naive UTC; naive values are kept as is."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class FleetRequest(BaseModel):
    """Base for request bodies: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )


class TripCreate(FleetRequest):
    """
    Body of ``POST /api/v1/trips``.

    ``amount`` is not accepted; it is always computed from weight and rate.
    """

    number: str = Field(..., min_length=1, max_length=50)
    coupling_id: Optional[str] = None
    tractor_id: str = Field(..., min_length=1)
    trailer_id: str = Field(..., min_length=1)
    driver_id: str = Field(..., min_length=1)
    route_from: str = Field(..., min_length=1)
    route_to: str = Field(..., min_length=1)
    departure_date: datetime
    arrival_date: Optional[datetime] = None
    mileage: Decimal = Field(default=Decimal("0"), ge=0)
    customer: str = Field(..., min_length=1)
    cargo_type: str = Field(..., min_length=1)
    weight: Decimal = Field(..., gt=0)
    rate_per_ton: Decimal = Field(..., gt=0)
    status: TripStatus = TripStatus.PLANNED

    @field_validator("departure_date", "arrival_date")
    @classmethod
    def normalize_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)


class TripUpdate(FleetRequest):
    """Body of ``PATCH /api/v1/trips/{trip_id}``; every field is optional."""

    number: Optional[str] = Field(default=None, min_length=1, max_length=50)
    coupling_id: Optional[str] = None
    tractor_id: Optional[str] = Field(default=None, min_length=1)
    trailer_id: Optional[str] = Field(default=None, min_length=1)
    driver_id: Optional[str] = Field(default=None, min_length=1)
    route_from: Optional[str] = Field(default=None, min_length=1)
    route_to: Optional[str] = Field(default=None, min_length=1)
    departure_date: Optional[datetime] = None
    arrival_date: Optional[datetime] = None
    mileage: Optional[Decimal] = Field(default=None, ge=0)
    customer: Optional[str] = Field(default=None, min_length=1)
    cargo_type: Optional[str] = Field(default=None, min_length=1)
    weight: Optional[Decimal] = Field(default=None, gt=0)
    rate_per_ton: Optional[Decimal] = Field(default=None, gt=0)
    status: Optional[TripStatus] = None

    @field_validator("departure_date", "arrival_date")
    @classmethod
    def normalize_dates(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)

    def changes(self) -> dict:
        """Fields present in the request body, by attribute name."""
        return self.model_dump(exclude_unset=True)


class FinanceOperationCreate(FleetRequest):
    """Body of ``POST /api/v1/finance``."""

    type: FinanceOperationType
    amount: Decimal = Field(..., gt=0)
    date: Optional[datetime] = None
    driver_id: Optional[str] = None
    trip_id: Optional[str] = None
    tractor_id: Optional[str] = None
    trailer_id: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)
