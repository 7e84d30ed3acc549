"""
HTTP API for schedule collection and queries.

Endpoints:
    POST /flights/collect-month   Collect a whole month for one airport
    GET  /flights/collect-month   Recent collection runs
    POST /flights/collect         Collect one airport/date/half-day unit
    GET  /flights/schedules       Query stored schedules
    GET  /flights/routes          Routes with stored schedules
    GET  /health                  Liveness (no auth)

Handlers are plain ``def`` so FastAPI runs them in its threadpool; a monthly
collection blocks for minutes.
"""

from functools import lru_cache
from typing import Callable

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.utils import logger
from src.utils.exceptions import (
    FlightServiceError,
    ValidationError,
    AuthError,
    ProviderError,
    RateLimitError,
    categorize_error,
)
from src.schedules.models import normalize_iata, parse_date, parse_month, parse_time_slot
from src.schedules.query import ScheduleQueryService
from src.storage import ScheduleStore, create_store
from src.ingestion.components.client import ScheduleClient, create_client
from src.ingestion.db import CollectionRunRepository, create_repository
from src.ingestion.jobs.collect_month import MonthlyCollector
from src.api.auth import Principal, require_principal
from src.api.schemas import CollectMonthRequest, CollectUnitRequest


GENERIC_ERROR = "Internal server error"


# =============================================================================
# Dependency providers (overridden in tests)
# =============================================================================

@lru_cache
def get_store() -> ScheduleStore:
    return create_store()


@lru_cache
def get_run_repository() -> CollectionRunRepository:
    return create_repository()


def get_query_service(store: ScheduleStore = Depends(get_store)) -> ScheduleQueryService:
    return ScheduleQueryService(store=store)


def get_client(store: ScheduleStore = Depends(get_store)) -> Callable[[], ScheduleClient]:
    # Built on first call so request validation runs before provider config is checked
    return lambda: create_client(store=store)


def get_collector(
    client_factory: Callable[[], ScheduleClient] = Depends(get_client),
    repository: CollectionRunRepository = Depends(get_run_repository),
) -> Callable[[], MonthlyCollector]:
    return lambda: MonthlyCollector(client=client_factory(), repository=repository)


# =============================================================================
# Routes
# =============================================================================

router = APIRouter(prefix="/flights")


@router.post("/collect-month")
def collect_month(
    body: CollectMonthRequest,
    principal: Principal = Depends(require_principal),
    collector_factory: Callable[[], MonthlyCollector] = Depends(get_collector),
):
    if not body.departure_iata or not body.month:
        raise ValidationError("departureIata and month are required")

    departure_iata = normalize_iata(body.departure_iata, "departureIata")
    parse_month(body.month)

    logger.info(f"{principal.subject} requested collection of {departure_iata} {body.month}")
    summary = collector_factory().collect_month(departure_iata, body.month)

    message = (
        f"Monthly collection complete: {summary.total_saved} flights saved "
        f"over {summary.total_days} days ({summary.total_api_calls} API calls)"
    )
    if summary.failed_dates:
        message += f", skipped {', '.join(summary.failed_dates)}"

    return {
        "success": True,
        "totalSaved": summary.total_saved,
        "totalDays": summary.total_days,
        "totalApiCalls": summary.total_api_calls,
        "failedDates": summary.failed_dates,
        "message": message,
    }


@router.get("/collect-month")
def list_collection_runs(
    limit: int = Query(default=50, ge=1, le=500),
    principal: Principal = Depends(require_principal),
    repository: CollectionRunRepository = Depends(get_run_repository),
):
    runs = repository.get_latest(limit=limit)
    return {"success": True, "runs": [run.to_dict() for run in runs], "count": len(runs)}


@router.post("/collect")
def collect_unit(
    body: CollectUnitRequest,
    principal: Principal = Depends(require_principal),
    client_factory: Callable[[], ScheduleClient] = Depends(get_client),
):
    if not body.departure_iata or not body.date or not body.time_slot:
        raise ValidationError("departureIata, date and timeSlot are required")

    departure_iata = normalize_iata(body.departure_iata, "departureIata")
    parse_date(body.date)
    slot = parse_time_slot(body.time_slot)

    saved = client_factory().fetch_and_store(departure_iata, body.date, slot)
    return {
        "success": True,
        "savedCount": saved,
        "message": f"Saved {saved} flights for {departure_iata} {body.date} {slot.value}",
    }


@router.get("/schedules")
def get_schedules(
    date: str | None = None,
    year: str | None = None,
    month: str | None = None,
    route: str | None = None,
    departure_iata: str | None = Query(default=None, alias="departureIata"),
    principal: Principal = Depends(require_principal),
    service: ScheduleQueryService = Depends(get_query_service),
):
    records = service.query(
        date=date,
        year=year,
        month=month,
        route=route,
        departure_iata=departure_iata,
    )
    return {
        "success": True,
        "flights": [record.to_document() for record in records],
        "count": len(records),
    }


@router.get("/routes")
def get_routes(
    principal: Principal = Depends(require_principal),
    store: ScheduleStore = Depends(get_store),
):
    return {"success": True, "routes": store.list_routes()}


# =============================================================================
# Error handlers
# =============================================================================

def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return _error(400, exc.message)


def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
    detail = first.get("msg", "Invalid request")
    return _error(400, f"{field}: {detail}" if field else detail)


def handle_auth_error(request: Request, exc: AuthError) -> JSONResponse:
    return _error(401, exc.message)


def handle_rate_limit_error(request: Request, exc: RateLimitError) -> JSONResponse:
    logger.warning(f"Provider throttled {request.url.path}, retry after {exc.retry_after}s")
    headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else None
    return _error(429, exc.message, headers)


def handle_provider_error(request: Request, exc: ProviderError) -> JSONResponse:
    category, message = categorize_error(exc)
    logger.error(f"[{category}] {message}")
    return _error(502, "Schedule provider request failed")


def handle_service_error(request: Request, exc: FlightServiceError) -> JSONResponse:
    category, message = categorize_error(exc)
    logger.opt(exception=exc).error(f"[{category}] {message} on {request.url.path}")
    return _error(500, GENERIC_ERROR)


def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(f"Unhandled error on {request.url.path}: {exc}")
    return _error(500, GENERIC_ERROR)


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(title="Flight Schedule API")

    app.add_exception_handler(ValidationError, handle_validation_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(AuthError, handle_auth_error)
    app.add_exception_handler(RateLimitError, handle_rate_limit_error)
    app.add_exception_handler(ProviderError, handle_provider_error)
    app.add_exception_handler(FlightServiceError, handle_service_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(router)
    return app


app = create_app()

__all__ = [
    "app",
    "create_app",
    "router",
    "get_store",
    "get_run_repository",
    "get_query_service",
    "get_client",
    "get_collector",
]
