"""customer-service FastAPI application.

Responsibilities:
- Serve CRUD and statistics endpoints under `/api/customers`
- Translate service errors into HTTP responses
- Build the store and notification sink once, on startup

The routes are thin: every decision lives in CustomerOperations.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import NOTIFICATION_BACKEND, STORE_BACKEND
from .errors import CustomerServiceError
from .kafka_producer import KafkaNotificationSink, create_producer
from .logger import configure_logging, get_logger
from .models import (
    CreateRequest,
    CustomerView,
    ErrorResponse,
    StatsResult,
    UpdateRequest,
    ValidationErrorResponse,
)
from .mongo import MongoCustomerStore, get_database
from .notifications import LoggingNotificationSink, NotificationSink
from .service import CustomerOperations
from .store import CustomerStore, InMemoryCustomerStore

log = get_logger(__name__)

app = FastAPI(title="Customer Service")

# Set on startup; routes reach it through get_operations().
operations: CustomerOperations | None = None

# Request locations that prefix pydantic error paths.
_LOCATION_PREFIXES = ("body", "path", "query")


def build_store() -> CustomerStore:
    if STORE_BACKEND == "memory":
        return InMemoryCustomerStore()
    return MongoCustomerStore(get_database())


def build_sink() -> NotificationSink:
    if NOTIFICATION_BACKEND == "log":
        return LoggingNotificationSink()
    return KafkaNotificationSink(create_producer())


@app.on_event("startup")
def on_startup() -> None:
    """Startup hook.

    - Configure logging.
    - Connect the store and the notification sink.
    """
    global operations

    configure_logging()
    operations = CustomerOperations(build_store(), build_sink())
    log.info("service_started", store=STORE_BACKEND, notifications=NOTIFICATION_BACKEND)


@app.on_event("shutdown")
def on_shutdown() -> None:
    """Shutdown hook: flush anything the sink still holds."""
    if operations is not None and isinstance(operations.sink, KafkaNotificationSink):
        operations.sink.close()


def get_operations() -> CustomerOperations:
    if operations is None:
        raise RuntimeError("customer service is not initialised")
    return operations


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _error_field(loc: tuple) -> str:
    """Name the request field an error belongs to.

    Errors raised by a model-level validator have no field of their own and
    are reported under "validation".
    """
    parts = list(loc)
    if parts and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:]
    return str(parts[0]) if parts else "validation"


@app.exception_handler(RequestValidationError)
def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, str] = {}
    for error in exc.errors():
        errors.setdefault(_error_field(error["loc"]), error["msg"])

    log.warning("validation_failed", path=request.url.path, errors=errors)
    body = ValidationErrorResponse(
        status=400,
        message="Validation error",
        timestamp=_now(),
        errors=errors,
    )
    return JSONResponse(status_code=400, content=body.model_dump(mode="json"))


@app.exception_handler(CustomerServiceError)
def handle_service_error(request: Request, exc: CustomerServiceError) -> JSONResponse:
    log.warning(
        "request_failed",
        path=request.url.path,
        status=exc.status_code,
        error=exc.message,
    )
    body = ErrorResponse(status=exc.status_code, message=exc.message, timestamp=_now())
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


@app.exception_handler(Exception)
def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    log.error("unexpected_error", path=request.url.path, exc_info=exc)
    body = ErrorResponse(status=500, message="An unexpected error occurred", timestamp=_now())
    return JSONResponse(status_code=500, content=body.model_dump(mode="json"))


@app.get("/health")
def health() -> dict[str, str]:
    """Basic liveness endpoint."""
    return {"status": "ok"}


@app.post("/api/customers", response_model=CustomerView)
def create_customer(
    req: CreateRequest,
    ops: CustomerOperations = Depends(get_operations),
):
    """Create a customer.

    Returns the stored customer, including its id, the estimated milestone
    date and the audit timestamps.
    """
    return ops.create(req)


@app.get("/api/customers", response_model=list[CustomerView])
def get_all_customers(ops: CustomerOperations = Depends(get_operations)):
    """Return all customers, newest first."""
    return ops.get_all()


# Statistics routes are declared before /{customer_id} so "stats" is not
# parsed as an id.
@app.get("/api/customers/stats", response_model=StatsResult)
def get_customer_stats(ops: CustomerOperations = Depends(get_operations)):
    return ops.get_stats()


@app.get("/api/customers/stats/average-age")
def get_average_age(ops: CustomerOperations = Depends(get_operations)) -> float | None:
    return ops.get_average_age()


@app.get("/api/customers/stats/age-standard-deviation")
def get_age_standard_deviation(ops: CustomerOperations = Depends(get_operations)) -> float | None:
    return ops.get_age_standard_deviation()


@app.get("/api/customers/{customer_id}", response_model=CustomerView)
def get_customer(customer_id: int, ops: CustomerOperations = Depends(get_operations)):
    return ops.get_by_id(customer_id)


@app.patch("/api/customers/{customer_id}", response_model=CustomerView)
def update_customer(
    customer_id: int,
    req: UpdateRequest,
    ops: CustomerOperations = Depends(get_operations),
):
    """Partially update a customer.

    Only fields present in the body are changed; omitted or null fields keep
    their stored values.
    """
    return ops.update(customer_id, req)


@app.delete("/api/customers/{customer_id}", status_code=204)
def delete_customer(customer_id: int, ops: CustomerOperations = Depends(get_operations)):
    ops.delete(customer_id)
    return Response(status_code=204)
