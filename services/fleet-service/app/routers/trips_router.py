"""
Trip and finance write router.

Request bodies are validated by pydantic; validation failures are
rendered as 400 responses by the application's exception handlers.
"""

from fastapi import APIRouter, Depends, status

from ..context import RequestContext
from ..dependencies import get_request_context, get_trip_service
from ..services.trip_service import TripService
from ..validators import FinanceOperationCreate, TripCreate, TripUpdate
from .responses import ErrorResponse

router = APIRouter(prefix="/api/v1", tags=["trips"])

WRITE_RESPONSES = {
    400: {"description": "Invalid request body", "model": ErrorResponse},
    404: {"description": "Referenced entity not found", "model": ErrorResponse},
    409: {"description": "Trip number already exists", "model": ErrorResponse},
}


@router.post(
    "/trips",
    status_code=status.HTTP_201_CREATED,
    responses=WRITE_RESPONSES,
    summary="Create trip",
)
async def create_trip(
    body: TripCreate,
    service: TripService = Depends(get_trip_service),
    context: RequestContext = Depends(get_request_context),
):
    """Create a trip. The amount is computed as weight x ratePerTon."""
    trip = await service.create_trip(body, context)
    return trip.to_dict()


@router.patch("/trips/{trip_id}", responses=WRITE_RESPONSES, summary="Update trip")
async def update_trip(
    trip_id: str,
    body: TripUpdate,
    service: TripService = Depends(get_trip_service),
    context: RequestContext = Depends(get_request_context),
):
    """Partially update a trip; the amount is recomputed."""
    trip = await service.update_trip(trip_id, body, context)
    return trip.to_dict()


@router.post(
    "/finance",
    status_code=status.HTTP_201_CREATED,
    responses={400: WRITE_RESPONSES[400], 404: WRITE_RESPONSES[404]},
    summary="Record finance operation",
)
async def create_finance_operation(
    body: FinanceOperationCreate,
    service: TripService = Depends(get_trip_service),
    context: RequestContext = Depends(get_request_context),
):
    operation = await service.create_finance_operation(body, context)
    return operation.to_dict()
