"""
Shared dependencies for the application.

Provides dependency injection functions used across routers. Services
are built per request around the request's database session.
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from .config import settings
from .context import RequestContext
from .database import get_db
from .repositories.fleet_repository import IFleetRepository
from .repositories.sqlalchemy_repository import SqlAlchemyFleetRepository
from .services.listing_service import ListingService
from .services.report_service import ReportService
from .services.trip_service import TripService


def get_repository(db: Session = Depends(get_db)) -> IFleetRepository:
    """Repository bound to the request's session."""
    return SqlAlchemyFleetRepository(db)


def get_request_context(request: Request) -> RequestContext:
    """
    Context of the current request.

    Reuses the request id assigned by the request-id middleware and fixes
    ``now`` once for the whole request.
    """
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        return RequestContext(request_id=request_id)
    return RequestContext()


def get_listing_service(
    repository: IFleetRepository = Depends(get_repository),
) -> ListingService:
    return ListingService(
        repository,
        default_limit=settings.DEFAULT_PAGE_SIZE,
        max_limit=settings.MAX_PAGE_SIZE,
        expiry_window_days=settings.DEFAULT_EXPIRY_WINDOW_DAYS,
        max_window_days=settings.MAX_WINDOW_DAYS,
    )


def get_report_service(
    repository: IFleetRepository = Depends(get_repository),
) -> ReportService:
    return ReportService(
        repository,
        default_limit=settings.DEFAULT_PAGE_SIZE,
        max_limit=settings.MAX_PAGE_SIZE,
        expiry_window_days=settings.DEFAULT_EXPIRY_WINDOW_DAYS,
        max_window_days=settings.MAX_WINDOW_DAYS,
        maintenance_window_days=settings.DEFAULT_MAINTENANCE_WINDOW_DAYS,
    )


def get_trip_service(
    repository: IFleetRepository = Depends(get_repository),
) -> TripService:
    return TripService(repository)
