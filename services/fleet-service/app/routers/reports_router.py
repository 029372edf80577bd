"""
Report router.

Financial, operational and document reports. Reports are always computed
over the complete matching set; only the trip register is paginated.
"""

from fastapi import APIRouter, Depends, Request

from ..context import RequestContext
from ..dependencies import get_report_service, get_request_context
from ..domain.entities import TransportType
from ..services.report_service import ReportService
from .responses import ERROR_RESPONSES

router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


# Finance reports


@router.get(
    "/finance/trip/{trip_id}",
    responses={404: ERROR_RESPONSES[404]},
    summary="Trip profit and loss",
)
async def trip_profit_loss(
    trip_id: str,
    service: ReportService = Depends(get_report_service),
    context: RequestContext = Depends(get_request_context),
):
    """Expenses, profit and profit margin of one trip."""
    report = await service.trip_profit_loss(trip_id, context)
    return report.to_dict()


@router.get(
    "/finance/driver/{driver_id}",
    responses=ERROR_RESPONSES,
    summary="Driver finance report",
)
async def driver_finance(
    driver_id: str,
    request: Request,
    service: ReportService = Depends(get_report_service),
    context: RequestContext = Depends(get_request_context),
):
    """Income, expenses and balance of a driver for an optional dateFrom/dateTo period."""
    report = await service.driver_finance(driver_id, request.query_params, context)
    return report.to_dict()


@router.get(
    "/finance/tractor/{tractor_id}",
    responses=ERROR_RESPONSES,
    summary="Tractor expenses",
)
async def tractor_expenses(
    tractor_id: str,
    request: Request,
    service: ReportService = Depends(get_report_service),
    context: RequestContext = Depends(get_request_context),
):
    """Expense total and breakdown by operation type for a tractor."""
    report = await service.vehicle_expenses(
        TransportType.TRACTOR, tractor_id, request.query_params, context
    )
    return report.to_dict()


@router.get(
    "/finance/trailer/{trailer_id}",
    responses=ERROR_RESPONSES,
    summary="Trailer expenses",
)
async def trailer_expenses(
    trailer_id: str,
    request: Request,
    service: ReportService = Depends(get_report_service),
    context: RequestContext = Depends(get_request_context),
):
    """Expense total and breakdown by operation type for a trailer."""
    report = await service.vehicle_expenses(
        TransportType.TRAILER, trailer_id, request.query_params, context
    )
    return report.to_dict()


@router.get(
    "/finance/company",
    responses={400: ERROR_RESPONSES[400]},
    summary="Company finance report",
)
async def company_finance(
    request: Request,
    service: ReportService = Depends(get_report_service),
    context: RequestContext = Depends(get_request_context),
):
    report = await service.company_finance(request.query_params, context)
    return report.to_dict()


# Operational reports


@router.get("/trips/register", responses={400: ERROR_RESPONSES[400]}, summary="Trip register")
async def trip_register(
    request: Request,
    service: ReportService = Depends(get_report_service),
    context: RequestContext = Depends(get_request_context),
):
    """Paginated trips filtered by status and departure period."""
    result = await service.trip_register(request.query_params, context)
    return result.to_dict()


@router.get(
    "/maintenance/history",
    responses={400: ERROR_RESPONSES[400]},
    summary="Maintenance history of a vehicle",
)
async def maintenance_history(
    request: Request,
    service: ReportService = Depends(get_report_service),
    context: RequestContext = Depends(get_request_context),
):
    """Requires transportId and entityType (tractor or trailer)."""
    records = await service.maintenance_history(request.query_params, context)
    return [record.to_dict() for record in records]


@router.get("/maintenance/upcoming", summary="Upcoming maintenance")
async def upcoming_maintenance(
    request: Request,
    service: ReportService = Depends(get_report_service),
    context: RequestContext = Depends(get_request_context),
):
    """Maintenance records dated within the next `days` days (default 30)."""
    records = await service.upcoming_maintenance(request.query_params, context)
    return [record.to_dict() for record in records]


@router.get(
    "/drivers/workload",
    responses={400: ERROR_RESPONSES[400]},
    summary="Driver workload",
)
async def driver_workload(
    request: Request,
    service: ReportService = Depends(get_report_service),
    context: RequestContext = Depends(get_request_context),
):
    """Trips, mileage and billed amount per driver; optional driverId, dateFrom, dateTo."""
    workload = await service.driver_workload(request.query_params, context)
    return [entry.to_dict() for entry in workload]


# Document reports


@router.get("/documents/expiring", summary="Expiring documents")
async def expiring_documents(
    request: Request,
    service: ReportService = Depends(get_report_service),
    context: RequestContext = Depends(get_request_context),
):
    documents = await service.expiring_documents(request.query_params, context)
    return [document.to_dict() for document in documents]


@router.get("/documents/expired", summary="Expired documents")
async def expired_documents(
    service: ReportService = Depends(get_report_service),
    context: RequestContext = Depends(get_request_context),
):
    documents = await service.expired_documents(context)
    return [document.to_dict() for document in documents]
