"""
Payments router (read-only).

- GET /payments - List payments, newest first
- GET /payments/{payment_id} - Get payment
"""

import logging

from fastapi import APIRouter, HTTPException, Query

from jobflow.lifecycle.errors import LifecycleError

from ..schemas.billing import PaymentListResponse, PaymentResponse
from .._service_state import get_lifecycle_service
from ._convert import payment_page_to_response, payment_to_response


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=PaymentListResponse)
def list_payments(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
):
    service = get_lifecycle_service()

    try:
        return payment_page_to_response(service.payments.find_all(page=page, limit=limit))

    except LifecycleError:
        raise
    except Exception as e:
        logger.exception("[API] list_payments failed")
        raise HTTPException(status_code=500, detail=f"Failed to list payments: {str(e)}")


@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(payment_id: str):
    service = get_lifecycle_service()

    try:
        return payment_to_response(service.payments.find_one(payment_id))

    except LifecycleError:
        raise
    except Exception as e:
        logger.exception("[API] get_payment failed")
        raise HTTPException(status_code=500, detail=f"Failed to get payment: {str(e)}")
