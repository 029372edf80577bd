"""
SQLAlchemy implementation of the fleet repository.

Translates tagged predicates into SQL filters and maps ORM rows to
domain entities.
"""

import logging
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..domain.entities import (
    Coupling,
    Document,
    DocumentEntityType,
    DocumentType,
    Driver,
    FinanceOperation,
    FinanceOperationType,
    FuelType,
    MaintenanceRecord,
    MaintenanceType,
    Tractor,
    TractorStatus,
    Trailer,
    TrailerType,
    TransportType,
    Trip,
    TripStatus,
    User,
    UserRole,
)
from ..domain.exceptions import EntityNotFoundException
from ..models import (
    CouplingModel,
    DocumentModel,
    DriverModel,
    FinanceOperationModel,
    MaintenanceModel,
    TractorModel,
    TrailerModel,
    TripModel,
    UserModel,
)
from ..query.builder import QuerySpec, SortDirection, SortSpec
from ..query.predicates import Equals, Predicate, Range, SubstringAnyOf
from .fleet_repository import (
    COUPLINGS,
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

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


def _decimal(value: Optional[float]) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


def _map_driver(row: DriverModel) -> Driver:
    return Driver(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        middle_name=row.middle_name,
        phone=row.phone,
        license_number=row.license_number,
        license_expiry=row.license_expiry,
        created_at=row.created_at,
    )


def _map_tractor(row: TractorModel) -> Tractor:
    return Tractor(
        id=row.id,
        brand=row.brand,
        model=row.model,
        vin=row.vin,
        plate_number=row.plate_number,
        year=row.year,
        fuel_type=FuelType(row.fuel_type),
        consumption=_decimal(row.consumption),
        mileage=_decimal(row.mileage),
        status=TractorStatus(row.status),
        created_at=row.created_at,
    )


def _map_trailer(row: TrailerModel) -> Trailer:
    return Trailer(
        id=row.id,
        type=TrailerType(row.type),
        model=row.model,
        plate_number=row.plate_number,
        year=row.year,
        payload=_decimal(row.payload),
        mileage=_decimal(row.mileage),
        created_at=row.created_at,
    )


def _map_coupling(row: CouplingModel) -> Coupling:
    return Coupling(
        id=row.id,
        tractor_id=row.tractor_id,
        trailer_id=row.trailer_id,
        driver_id=row.driver_id,
        is_active=bool(row.is_active),
        created_at=row.created_at,
    )


def _map_user(row: UserModel) -> User:
    return User(
        id=row.id,
        email=row.email,
        first_name=row.first_name,
        last_name=row.last_name,
        role=UserRole(row.role),
        created_at=row.created_at,
    )


def _map_trip(row: TripModel) -> Trip:
    return Trip(
        id=row.id,
        number=row.number,
        route_from=row.route_from,
        route_to=row.route_to,
        customer=row.customer,
        cargo_type=row.cargo_type,
        departure_date=row.departure_date,
        arrival_date=row.arrival_date,
        mileage=_decimal(row.mileage),
        weight=_decimal(row.weight),
        rate_per_ton=_decimal(row.rate_per_ton),
        status=TripStatus(row.status),
        driver_id=row.driver_id,
        tractor_id=row.tractor_id,
        trailer_id=row.trailer_id,
        coupling_id=row.coupling_id,
        created_at=row.created_at,
    )


def _map_finance_operation(row: FinanceOperationModel) -> FinanceOperation:
    return FinanceOperation(
        id=row.id,
        type=FinanceOperationType(row.type),
        amount=_decimal(row.amount),
        date=row.date,
        driver_id=row.driver_id,
        trip_id=row.trip_id,
        tractor_id=row.tractor_id,
        trailer_id=row.trailer_id,
        description=row.description,
        created_at=row.created_at,
    )


def _map_maintenance(row: MaintenanceModel) -> MaintenanceRecord:
    return MaintenanceRecord(
        id=row.id,
        type=MaintenanceType(row.type),
        entity_type=TransportType(row.entity_type),
        transport_id=row.transport_id,
        date=row.date,
        mileage=_decimal(row.mileage),
        cost=_decimal(row.cost),
        mechanic_id=row.mechanic_id,
        tasks=tuple(row.tasks or ()),
        materials=tuple(row.materials or ()),
        created_at=row.created_at,
    )


def _map_document(row: DocumentModel) -> Document:
    return Document(
        id=row.id,
        type=DocumentType(row.type),
        entity_type=DocumentEntityType(row.entity_type),
        entity_id=row.entity_id,
        number=row.number,
        file_name=row.file_name,
        issue_date=row.issue_date,
        expiry_date=row.expiry_date,
        description=row.description,
        created_at=row.created_at,
    )


ENTITY_MODELS: dict[str, tuple[Any, Callable[[Any], Any]]] = {
    TRIPS: (TripModel, _map_trip),
    FINANCE: (FinanceOperationModel, _map_finance_operation),
    MAINTENANCE: (MaintenanceModel, _map_maintenance),
    DOCUMENTS: (DocumentModel, _map_document),
    DRIVERS: (DriverModel, _map_driver),
    TRACTORS: (TractorModel, _map_tractor),
    TRAILERS: (TrailerModel, _map_trailer),
    COUPLINGS: (CouplingModel, _map_coupling),
    USERS: (UserModel, _map_user),
}


def _db_value(value: Any) -> Any:
    """Convert domain values to column values."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return float(value)
    return value


def _escape_like(term: str) -> str:
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def build_condition(model: Any, predicate: Predicate):
    """
    Translate one tagged predicate into a SQL expression.

    Field names come from query allow-lists and are resolved as mapped
    attributes of ``model``.
    """
    if isinstance(predicate, Equals):
        return getattr(model, predicate.field) == _db_value(predicate.value)

    if isinstance(predicate, Range):
        column = getattr(model, predicate.field)
        bounds = []
        if predicate.gte is not None:
            bounds.append(column >= predicate.gte)
        if predicate.lte is not None:
            bounds.append(column <= predicate.lte)
        if predicate.lt is not None:
            bounds.append(column < predicate.lt)
        if not bounds:
            return column.isnot(None)
        return and_(*bounds)

    if isinstance(predicate, SubstringAnyOf):
        pattern = f"%{_escape_like(predicate.term)}%"
        return or_(
            *(
                getattr(model, field).ilike(pattern, escape=LIKE_ESCAPE)
                for field in predicate.fields
            )
        )

    raise TypeError(f"Unsupported predicate: {predicate!r}")


class SqlAlchemyFleetRepository(IFleetRepository):
    """SQLAlchemy implementation for fleet data access."""

    def __init__(self, db: Session):
        """
        Initialize repository.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def _resolve(self, entity: str) -> tuple[Any, Callable[[Any], Any]]:
        try:
            return ENTITY_MODELS[entity]
        except KeyError:
            raise ValueError(f"Unknown entity collection: {entity}")

    def _filtered(self, model: Any, predicates: Sequence[Predicate]) -> Query:
        query = self.db.query(model)
        for predicate in predicates:
            query = query.filter(build_condition(model, predicate))
        return query

    @staticmethod
    def _ordered(query: Query, model: Any, sort: Optional[SortSpec]) -> Query:
        if sort is None:
            return query
        column = getattr(model, sort.field)
        ordering = column.asc() if sort.direction is SortDirection.ASC else column.desc()
        # Primary key as tiebreaker keeps pages stable
        return query.order_by(ordering, model.id.asc())

    async def get(self, entity: str, entity_id: str) -> Optional[Any]:
        """Fetch a single entity by id."""
        model, mapper = self._resolve(entity)
        row = self.db.get(model, entity_id)
        return mapper(row) if row is not None else None

    async def exists(self, entity: str, entity_id: str) -> bool:
        """Check whether an entity with this id exists."""
        model, _ = self._resolve(entity)
        count = (
            self.db.query(func.count(model.id)).filter(model.id == entity_id).scalar()
        )
        return bool(count)

    async def find_page(self, spec: QuerySpec) -> tuple[list[Any], int]:
        """Fetch one page of entities plus the total match count."""
        model, mapper = self._resolve(spec.entity)
        query = self._filtered(model, spec.predicates)

        total = query.order_by(None).count()
        rows = (
            self._ordered(query, model, spec.sort)
            .offset(spec.window.offset)
            .limit(spec.window.limit)
            .all()
        )
        logger.debug(
            f"Fetched page {spec.window.page} of {spec.entity}: "
            f"{len(rows)} rows, {total} total"
        )
        return [mapper(row) for row in rows], total

    async def find_all(
        self,
        entity: str,
        predicates: Sequence[Predicate] = (),
        sort: Optional[SortSpec] = None,
    ) -> list[Any]:
        """Fetch every matching entity."""
        model, mapper = self._resolve(entity)
        rows = self._ordered(self._filtered(model, predicates), model, sort).all()
        return [mapper(row) for row in rows]

    async def find_by_ids(self, entity: str, ids: Iterable[str]) -> dict[str, Any]:
        """Fetch entities by id, keyed by id."""
        wanted = set(ids)
        if not wanted:
            return {}
        model, mapper = self._resolve(entity)
        rows = self.db.query(model).filter(model.id.in_(wanted)).all()
        return {row.id: mapper(row) for row in rows}

    async def find_trip_by_number(self, number: str) -> Optional[Trip]:
        """Find a trip by its unique number."""
        row = self.db.query(TripModel).filter(TripModel.number == number).first()
        return _map_trip(row) if row is not None else None

    async def create_trip(self, values: Mapping[str, Any]) -> Trip:
        """Persist a new trip."""
        row = TripModel(**{key: _db_value(value) for key, value in values.items()})
        self._commit_new(row, "trip")
        return _map_trip(row)

    async def update_trip(self, trip_id: str, values: Mapping[str, Any]) -> Trip:
        """Apply attribute changes to an existing trip."""
        row = self.db.get(TripModel, trip_id)
        if row is None:
            raise EntityNotFoundException("trip", trip_id)
        for key, value in values.items():
            setattr(row, key, _db_value(value))
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error updating trip {trip_id}: {e}")
            raise
        self.db.refresh(row)
        return _map_trip(row)

    async def create_finance_operation(self, values: Mapping[str, Any]) -> FinanceOperation:
        """Persist a new finance operation."""
        row = FinanceOperationModel(
            **{key: _db_value(value) for key, value in values.items()}
        )
        self._commit_new(row, "finance operation")
        return _map_finance_operation(row)

    def _commit_new(self, row: Any, label: str) -> None:
        try:
            self.db.add(row)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error saving {label}: {e}")
            raise
        self.db.refresh(row)
