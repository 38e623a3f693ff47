"""
Jobs router for the job lifecycle API.

- POST /jobs - Create job (status NEW)
- GET /jobs - List jobs, newest first, optional status filter
- GET /jobs/{job_id} - Get job details
- PATCH /jobs/{job_id}/status - Direct status edit (SCHEDULED -> IN_PROGRESS -> DONE)
- POST /jobs/{job_id}/schedule-appointment - NEW -> SCHEDULED saga
- POST /jobs/{job_id}/invoice - DONE -> INVOICED saga

Lifecycle errors propagate to the application error handler, which maps
their kind to an HTTP status. Handlers are plain functions so FastAPI runs
them in its worker thread pool.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from jobflow.lifecycle.entities import InvoiceItem
from jobflow.lifecycle.errors import LifecycleError

from ..schemas.billing import InvoiceCreateRequest, InvoiceResponse
from ..schemas.jobs import (
    AppointmentCreateRequest,
    AppointmentResponse,
    JobCreateRequest,
    JobListResponse,
    JobResponse,
)
from .._service_state import get_lifecycle_service
from ._convert import (
    appointment_to_response,
    invoice_to_response,
    job_page_to_response,
    job_to_response,
)


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=JobResponse, status_code=201)
def create_job(request: JobCreateRequest):
    """Create a job for an existing customer. Titles are unique per customer."""
    service = get_lifecycle_service()

    try:
        job = service.jobs.create_job(
            customer_id=request.customer_id,
            title=request.title,
            description=request.description,
        )
        return job_to_response(job)

    except LifecycleError:
        raise
    except Exception as e:
        logger.exception("[API] create_job failed")
        raise HTTPException(status_code=500, detail=f"Failed to create job: {str(e)}")


@router.get("", response_model=JobListResponse)
def list_jobs(
    status: Optional[str] = Query(default=None, description="Filter by job status"),
    page: int = Query(default=1, ge=1, description="Page number (1-based)"),
    limit: int = Query(default=10, ge=1, le=100, description="Jobs per page"),
):
    """List jobs ordered by created_at (newest first)."""
    service = get_lifecycle_service()

    try:
        return job_page_to_response(service.jobs.find_all(status=status, page=page, limit=limit))

    except LifecycleError:
        raise
    except Exception as e:
        logger.exception("[API] list_jobs failed")
        raise HTTPException(status_code=500, detail=f"Failed to list jobs: {str(e)}")


@router.get("/{job_id}", response_model=JobResponse)
def get_job(job_id: str):
    service = get_lifecycle_service()

    try:
        return job_to_response(service.jobs.find_one(job_id))

    except LifecycleError:
        raise
    except Exception as e:
        logger.exception("[API] get_job failed")
        raise HTTPException(status_code=500, detail=f"Failed to get job: {str(e)}")


@router.patch("/{job_id}/status", response_model=JobResponse)
def update_job_status(
    job_id: str,
    status: str = Query(..., description="Target status"),
):
    """
    Direct status edit.

    Only SCHEDULED -> IN_PROGRESS and IN_PROGRESS -> DONE are accepted here;
    the other edges belong to the scheduling, invoicing and payment endpoints.
    """
    service = get_lifecycle_service()

    try:
        return job_to_response(service.jobs.update_status(job_id, status))

    except LifecycleError:
        raise
    except Exception as e:
        logger.exception("[API] update_job_status failed")
        raise HTTPException(status_code=500, detail=f"Failed to update job status: {str(e)}")


@router.post(
    "/{job_id}/schedule-appointment",
    response_model=AppointmentResponse,
    status_code=201,
)
def schedule_appointment(job_id: str, request: AppointmentCreateRequest):
    """Book a technician for a NEW job and mark it SCHEDULED."""
    service = get_lifecycle_service()

    try:
        appointment = service.jobs.schedule_appointment(
            job_id=job_id,
            technician_id=request.technician_id,
            start_at=request.start_date,
            end_at=request.end_date,
        )
        return appointment_to_response(appointment)

    except LifecycleError:
        raise
    except Exception as e:
        logger.exception("[API] schedule_appointment failed")
        raise HTTPException(status_code=500, detail=f"Failed to schedule appointment: {str(e)}")


@router.post("/{job_id}/invoice", response_model=InvoiceResponse, status_code=201)
def create_invoice(job_id: str, request: InvoiceCreateRequest):
    """Invoice a DONE job and mark it INVOICED."""
    service = get_lifecycle_service()

    try:
        items = [
            InvoiceItem(description=item.description, price=item.price, quantity=item.quantity)
            for item in request.items
        ]
        invoice = service.jobs.create_invoice(job_id, items, request.tax)
        return invoice_to_response(invoice)

    except LifecycleError:
        raise
    except Exception as e:
        logger.exception("[API] create_invoice failed")
        raise HTTPException(status_code=500, detail=f"Failed to create invoice: {str(e)}")
