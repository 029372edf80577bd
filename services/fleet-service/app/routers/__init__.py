"""
API routers for fleet service endpoints.
"""

from . import health_router, lists_router, reports_router, trips_router

__all__ = ["health_router", "lists_router", "reports_router", "trips_router"]
