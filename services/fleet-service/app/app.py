"""
Main FastAPI application for the fleet service.

Wires the layers together:
- Domain: entities and exceptions
- Query: request parameters to structured queries
- Reports: aggregation over fetched collections
- Repositories: data access
- Services: orchestration
- Routers: HTTP endpoints
"""

import time
from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .database import init_db
from .domain.exceptions import (
    DuplicateEntityException,
    EntityNotFoundException,
    FleetServiceException,
    ValidationException,
)
from .logging_config import configure_logging
from .metrics import metrics_endpoint, track_request_metrics
from .routers import health_router, lists_router, reports_router, trips_router

configure_logging(
    log_level=settings.LOG_LEVEL,
    service_name=settings.SERVICE_NAME,
    use_json=settings.LOG_JSON,
)

logger = structlog.get_logger(__name__)

EXCEPTION_STATUS_CODES = (
    (ValidationException, status.HTTP_400_BAD_REQUEST),
    (EntityNotFoundException, status.HTTP_404_NOT_FOUND),
    (DuplicateEntityException, status.HTTP_409_CONFLICT),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting Fleet Service...", version=settings.SERVICE_VERSION)

    try:
        init_db()
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    logger.info("Fleet Service started successfully")

    yield

    logger.info("Fleet Service shut down complete")


app = FastAPI(
    title="Fleet Service",
    description="Fleet and logistics backend: entity lists, financial and operational reports",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)


# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request metrics middleware
@app.middleware("http")
async def track_metrics(request: Request, call_next):
    """Record request count and latency, labelled by route template when one matched."""
    start_time = time.time()
    response = await call_next(request)

    route = request.scope.get("route")
    track_request_metrics(
        method=request.method,
        endpoint=getattr(route, "path", None) or request.url.path,
        status_code=response.status_code,
        duration=time.time() - start_time,
    )
    return response


# Request ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Assign a request id and bind it to the log context."""
    request_id = request.headers.get("X-Request-ID") or f"req-{uuid4().hex[:12]}"
    request.state.request_id = request_id

    structlog.contextvars.bind_contextvars(request_id=request_id)
    try:
        response = await call_next(request)
    finally:
        structlog.contextvars.clear_contextvars()

    response.headers["X-Request-ID"] = request_id
    return response


# Include routers
app.include_router(health_router.router)
app.include_router(lists_router.router)
app.include_router(reports_router.router)
app.include_router(trips_router.router)

app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], include_in_schema=False)


@app.get("/")
async def root():
    """Root endpoint with service information."""
    return {
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "status": "operational",
        "docs": "/api/docs",
        "health": "/api/v1/health",
    }


def _error_body(error: str, message: str, details: dict) -> dict:
    return {"success": False, "error": error, "message": message, "details": details}


@app.exception_handler(FleetServiceException)
async def fleet_exception_handler(request: Request, exc: FleetServiceException):
    """Map domain exceptions to HTTP responses."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for exception_type, code in EXCEPTION_STATUS_CODES:
        if isinstance(exc, exception_type):
            status_code = code
            break

    log = logger.error if status_code >= 500 else logger.info
    log(
        "Request rejected",
        path=request.url.path,
        error=exc.error_code,
        message=exc.message,
        status_code=status_code,
    )
    return JSONResponse(
        status_code=status_code,
        content=_error_body(exc.error_code, exc.message, exc.details),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Render body and parameter validation failures as 400 responses."""
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    message = errors[0]["message"] if errors else "Invalid request"
    logger.info("Request validation failed", path=request.url.path, errors=len(errors))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("validation_error", message, {"errors": errors}),
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions."""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            **_error_body("internal_server_error", "An unexpected error occurred", {}),
            "request_id": getattr(request.state, "request_id", None),
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.app:app",
        host=settings.SERVICE_HOST,
        port=settings.SERVICE_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
