"""
Technicians router.

- POST /technicians - Register technician
- POST /technicians/seed - Insert the default technicians (idempotent)
- GET /technicians - List technicians
- GET /technicians/{technician_id} - Get technician
"""

import logging

from fastapi import APIRouter, HTTPException, Query

from jobflow.lifecycle.errors import LifecycleError

from ..schemas.directory import (
    TechnicianCreateRequest,
    TechnicianListResponse,
    TechnicianResponse,
    TechnicianSeedResponse,
)
from .._service_state import get_lifecycle_service
from ._convert import technician_page_to_response, technician_to_response


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=TechnicianResponse, status_code=201)
def create_technician(request: TechnicianCreateRequest):
    service = get_lifecycle_service()

    try:
        technician = service.technicians.create(
            name=request.name,
            email=request.email,
            phone=request.phone,
            role=request.role,
        )
        return technician_to_response(technician)

    except LifecycleError:
        raise
    except Exception as e:
        logger.exception("[API] create_technician failed")
        raise HTTPException(status_code=500, detail=f"Failed to create technician: {str(e)}")


@router.post("/seed", response_model=TechnicianSeedResponse, status_code=201)
def seed_technicians():
    """Insert the default technicians. Emails already present are skipped."""
    service = get_lifecycle_service()

    try:
        created = service.technicians.seed_defaults()
        return TechnicianSeedResponse(
            created=[technician_to_response(t) for t in created],
            created_count=len(created),
        )

    except LifecycleError:
        raise
    except Exception as e:
        logger.exception("[API] seed_technicians failed")
        raise HTTPException(status_code=500, detail=f"Failed to seed technicians: {str(e)}")


@router.get("", response_model=TechnicianListResponse)
def list_technicians(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
):
    service = get_lifecycle_service()

    try:
        return technician_page_to_response(service.technicians.find_all(page=page, limit=limit))

    except LifecycleError:
        raise
    except Exception as e:
        logger.exception("[API] list_technicians failed")
        raise HTTPException(status_code=500, detail=f"Failed to list technicians: {str(e)}")


@router.get("/{technician_id}", response_model=TechnicianResponse)
def get_technician(technician_id: str):
    service = get_lifecycle_service()

    try:
        return technician_to_response(service.technicians.find_one(technician_id))

    except LifecycleError:
        raise
    except Exception as e:
        logger.exception("[API] get_technician failed")
        raise HTTPException(status_code=500, detail=f"Failed to get technician: {str(e)}")
