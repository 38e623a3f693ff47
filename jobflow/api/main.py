"""
FastAPI application entry point.

Relays lifecycle results and errors unchanged. Every LifecycleError is
returned as ``{"detail": <message>, "kind": <kind>}`` with the status code
for its kind.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from jobflow import __version__
from jobflow.infra.config import Settings, ensure_data_directories
from jobflow.lifecycle.errors import ErrorKind, LifecycleError
from .routers import customers, technicians, jobs, invoices, payments
from ._service_state import (
    init_lifecycle_service,
    shutdown_lifecycle_service,
)


logger = logging.getLogger(__name__)

KIND_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.BAD_REQUEST: 400,
    ErrorKind.INTERNAL: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup: resolve settings, create the database directory, wire the
    LifecycleService (and optionally seed technicians).
    Shutdown: drop the service singleton.
    """
    settings = Settings.from_env()
    ensure_data_directories(settings)

    service = init_lifecycle_service(settings.db_path, busy_timeout=settings.busy_timeout)
    if settings.seed_technicians:
        service.technicians.seed_defaults()

    yield

    shutdown_lifecycle_service()


tags_metadata = [
    {"name": "customers", "description": "Customer directory"},
    {"name": "technicians", "description": "Technician directory and seeding"},
    {
        "name": "jobs",
        "description": "Job creation, status edits, appointment scheduling and invoicing",
    },
    {"name": "invoices", "description": "Invoice reads and payment recording"},
    {"name": "payments", "description": "Payment reads"},
]

app = FastAPI(
    title="jobflow API",
    lifespan=lifespan,
    description="""
## jobflow API

Service job lifecycle: creation, technician scheduling, execution, invoicing
and payment.

### Lifecycle
`new -> scheduled -> in_progress -> done -> invoiced -> paid`

- `new -> scheduled`: POST /jobs/{id}/schedule-appointment
- `scheduled -> in_progress -> done`: PATCH /jobs/{id}/status
- `done -> invoiced`: POST /jobs/{id}/invoice
- `invoiced -> paid`: POST /invoices/{id}/payments

### Usage
```bash
uvicorn jobflow.api.main:app --host 127.0.0.1 --port 8000
```
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=tags_metadata,
)


@app.exception_handler(LifecycleError)
async def lifecycle_error_handler(request: Request, exc: LifecycleError):
    status_code = KIND_STATUS_CODES.get(exc.kind, 500)
    if status_code >= 500:
        logger.error(f"[API] {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "kind": exc.kind.value},
    )


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


app.include_router(customers.router, prefix="/customers", tags=["customers"])
app.include_router(technicians.router, prefix="/technicians", tags=["technicians"])
app.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
app.include_router(invoices.router, prefix="/invoices", tags=["invoices"])
app.include_router(payments.router, prefix="/payments", tags=["payments"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8000)
