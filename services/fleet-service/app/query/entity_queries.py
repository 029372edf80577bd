"""
Per-entity allow-lists for list and report queries.

Request parameter and sort names follow the public API (camelCase);
the values they map to are entity attribute names.
"""

from ..domain.entities import (
    DocumentEntityType,
    DocumentType,
    FinanceOperationType,
    MaintenanceType,
    TractorStatus,
    TrailerType,
    TransportType,
    TripStatus,
    UserRole,
)
from .builder import EntityQueryConfig, FieldFilter

TRIP_QUERY = EntityQueryConfig(
    entity="trips",
    sortable={
        "createdAt": "created_at",
        "number": "number",
        "departureDate": "departure_date",
        "arrivalDate": "arrival_date",
        "customer": "customer",
        "status": "status",
        "weight": "weight",
        "mileage": "mileage",
        "amount": "amount",
    },
    filters={
        "status": FieldFilter("status", enum=TripStatus),
        "driverId": FieldFilter("driver_id"),
        "tractorId": FieldFilter("tractor_id"),
        "trailerId": FieldFilter("trailer_id"),
    },
    search_fields=("number", "customer", "route_from", "route_to"),
    date_field="departure_date",
)

# Trip register report: status and departure window only
TRIP_REGISTER_QUERY = EntityQueryConfig(
    entity="trips",
    sortable=TRIP_QUERY.sortable,
    filters={"status": FieldFilter("status", enum=TripStatus)},
    date_field="departure_date",
)

FINANCE_QUERY = EntityQueryConfig(
    entity="finance",
    sortable={
        "createdAt": "created_at",
        "date": "date",
        "amount": "amount",
        "type": "type",
    },
    filters={
        "type": FieldFilter("type", enum=FinanceOperationType),
        "driverId": FieldFilter("driver_id"),
        "tripId": FieldFilter("trip_id"),
        "tractorId": FieldFilter("tractor_id"),
        "trailerId": FieldFilter("trailer_id"),
    },
    date_field="date",
)

MAINTENANCE_QUERY = EntityQueryConfig(
    entity="maintenance",
    sortable={
        "createdAt": "created_at",
        "date": "date",
        "cost": "cost",
        "mileage": "mileage",
        "type": "type",
    },
    filters={
        "type": FieldFilter("type", enum=MaintenanceType),
        "entityType": FieldFilter("entity_type", enum=TransportType),
        "transportId": FieldFilter("transport_id"),
        "mechanicId": FieldFilter("mechanic_id"),
    },
    date_field="date",
)

DOCUMENT_QUERY = EntityQueryConfig(
    entity="documents",
    sortable={
        "createdAt": "created_at",
        "issueDate": "issue_date",
        "expiryDate": "expiry_date",
        "type": "type",
    },
    filters={
        "type": FieldFilter("type", enum=DocumentType),
        "entityType": FieldFilter("entity_type", enum=DocumentEntityType),
        "entityId": FieldFilter("entity_id"),
    },
    expiry_field="expiry_date",
)

DRIVER_QUERY = EntityQueryConfig(
    entity="drivers",
    sortable={
        "createdAt": "created_at",
        "firstName": "first_name",
        "lastName": "last_name",
        "licenseExpiry": "license_expiry",
    },
    search_fields=("first_name", "last_name", "phone", "license_number"),
)

TRACTOR_QUERY = EntityQueryConfig(
    entity="tractors",
    sortable={
        "createdAt": "created_at",
        "brand": "brand",
        "model": "model",
        "plateNumber": "plate_number",
        "year": "year",
        "mileage": "mileage",
    },
    filters={"status": FieldFilter("status", enum=TractorStatus)},
    search_fields=("brand", "model", "plate_number", "vin"),
)

TRAILER_QUERY = EntityQueryConfig(
    entity="trailers",
    sortable={
        "createdAt": "created_at",
        "model": "model",
        "plateNumber": "plate_number",
        "year": "year",
        "payload": "payload",
    },
    filters={"type": FieldFilter("type", enum=TrailerType)},
    search_fields=("model", "plate_number"),
)

COUPLING_QUERY = EntityQueryConfig(
    entity="couplings",
    sortable={"createdAt": "created_at"},
    filters={
        "isActive": FieldFilter("is_active", flag=True),
        "driverId": FieldFilter("driver_id"),
        "tractorId": FieldFilter("tractor_id"),
    },
)

USER_QUERY = EntityQueryConfig(
    entity="users",
    sortable={
        "createdAt": "created_at",
        "email": "email",
        "lastName": "last_name",
    },
    filters={"role": FieldFilter("role", enum=UserRole)},
    search_fields=("first_name", "last_name", "email"),
)

ENTITY_QUERIES: dict[str, EntityQueryConfig] = {
    config.entity: config
    for config in (
        TRIP_QUERY,
        FINANCE_QUERY,
        MAINTENANCE_QUERY,
        DOCUMENT_QUERY,
        DRIVER_QUERY,
        TRACTOR_QUERY,
        TRAILER_QUERY,
        COUPLING_QUERY,
        USER_QUERY,
    )
}
