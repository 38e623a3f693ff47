"""
Customers router.

- POST /customers - Register customer (email and phone unique)
- GET /customers - List customers, newest first
- GET /customers/{customer_id} - Get customer
"""

import logging

from fastapi import APIRouter, HTTPException, Query

from jobflow.lifecycle.errors import LifecycleError

from ..schemas.directory import (
    CustomerCreateRequest,
    CustomerListResponse,
    CustomerResponse,
)
from .._service_state import get_lifecycle_service
from ._convert import customer_page_to_response, customer_to_response


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=CustomerResponse, status_code=201)
def create_customer(request: CustomerCreateRequest):
    service = get_lifecycle_service()

    try:
        customer = service.customers.create(
            name=request.name,
            email=request.email,
            phone=request.phone,
            address=request.address,
        )
        return customer_to_response(customer)

    except LifecycleError:
        raise
    except Exception as e:
        logger.exception("[API] create_customer failed")
        raise HTTPException(status_code=500, detail=f"Failed to create customer: {str(e)}")


@router.get("", response_model=CustomerListResponse)
def list_customers(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
):
    service = get_lifecycle_service()

    try:
        return customer_page_to_response(service.customers.find_all(page=page, limit=limit))

    except LifecycleError:
        raise
    except Exception as e:
        logger.exception("[API] list_customers failed")
        raise HTTPException(status_code=500, detail=f"Failed to list customers: {str(e)}")


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: str):
    service = get_lifecycle_service()

    try:
        return customer_to_response(service.customers.find_one(customer_id))

    except LifecycleError:
        raise
    except Exception as e:
        logger.exception("[API] get_customer failed")
        raise HTTPException(status_code=500, detail=f"Failed to get customer: {str(e)}")
