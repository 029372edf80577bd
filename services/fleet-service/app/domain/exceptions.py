"""
Custom exceptions for the fleet service domain.

These exceptions represent domain-level errors and are independent
of infrastructure concerns (HTTP, database, etc.).
"""

from typing import Any, Iterable, Optional


class FleetServiceException(Exception):
    """Base exception for all fleet service errors."""

    error_code = "fleet_service_error"

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(FleetServiceException):
    """Raised when input validation fails."""

    error_code = "validation_error"

    def __init__(self, field: str, value: Any, reason: str):
        message = f"Validation failed for {field}: {reason}"
        super().__init__(
            message=message,
            details={"field": field, "value": str(value), "reason": reason},
        )


class InvalidSortFieldException(ValidationException):
    """Raised when a sort field is not in the entity's allow-list."""

    def __init__(self, entity: str, field: str, allowed: Iterable[str]):
        allowed_fields = sorted(allowed)
        super().__init__(
            field="sortBy",
            value=field,
            reason=f"'{field}' is not a sortable field for {entity}; "
            f"expected one of: {', '.join(allowed_fields)}",
        )
        self.details["allowed"] = allowed_fields


class EntityNotFoundException(FleetServiceException):
    """Raised when a referenced entity does not exist."""

    error_code = "not_found"

    def __init__(self, entity: str, entity_id: str):
        message = f"{entity.capitalize()} not found: {entity_id}"
        super().__init__(
            message=message, details={"entity": entity, "id": entity_id}
        )


class DuplicateEntityException(FleetServiceException):
    """Raised when a unique attribute is already taken."""

    error_code = "duplicate"

    def __init__(self, entity: str, field: str, value: Any):
        message = f"{entity.capitalize()} with {field} '{value}' already exists"
        super().__init__(
            message=message,
            details={"entity": entity, "field": field, "value": str(value)},
        )
