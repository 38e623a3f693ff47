"""
Invoices router.

- GET /invoices - List invoices, optionally for one job
- GET /invoices/{invoice_id} - Get invoice
- POST /invoices/{invoice_id}/payments - Settle invoice (INVOICED -> PAID saga)

Invoices are created through POST /jobs/{job_id}/invoice.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from jobflow.lifecycle.errors import LifecycleError

from ..schemas.billing import (
    InvoiceListResponse,
    InvoiceResponse,
    PaymentCreateRequest,
    PaymentResponse,
)
from .._service_state import get_lifecycle_service
from ._convert import invoice_page_to_response, invoice_to_response, payment_to_response


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=InvoiceListResponse)
def list_invoices(
    job_id: Optional[str] = Query(default=None, description="Only invoices for this job"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
):
    service = get_lifecycle_service()

    try:
        return invoice_page_to_response(
            service.jobs.list_invoices(job_id=job_id, page=page, limit=limit)
        )

    except LifecycleError:
        raise
    except Exception as e:
        logger.exception("[API] list_invoices failed")
        raise HTTPException(status_code=500, detail=f"Failed to list invoices: {str(e)}")


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(invoice_id: str):
    service = get_lifecycle_service()

    try:
        return invoice_to_response(service.jobs.get_invoice(invoice_id))

    except LifecycleError:
        raise
    except Exception as e:
        logger.exception("[API] get_invoice failed")
        raise HTTPException(status_code=500, detail=f"Failed to get invoice: {str(e)}")


@router.post("/{invoice_id}/payments", response_model=PaymentResponse, status_code=201)
def create_payment(invoice_id: str, request: PaymentCreateRequest):
    """
    Record a full payment for the invoice.

    The amount must equal the invoice total exactly; no partial payments.
    """
    service = get_lifecycle_service()

    try:
        payment = service.payments.create(
            invoice_id=invoice_id,
            amount=request.amount,
            method=request.payment_method,
        )
        return payment_to_response(payment)

    except LifecycleError:
        raise
    except Exception as e:
        logger.exception("[API] create_payment failed")
        raise HTTPException(status_code=500, detail=f"Failed to record payment: {str(e)}")
