"""
Job API schemas.

Supports /jobs CRUD, status edits and the schedule-appointment saga.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


# =============================================================================
# Job Schemas
# =============================================================================


class JobCreateRequest(BaseModel):
    """Request to create a new job."""

    customer_id: str = Field(..., min_length=1, description="ID of the customer the job is for")
    title: str = Field(
        ...,
        min_length=1,
        description="Job title, unique per customer",
        examples=["Air Conditioner Maintenance"],
    )
    description: str = Field(
        ...,
        min_length=1,
        description="Detailed description of the job",
        examples=["Routine maintenance for split AC unit in the main office."],
    )


class JobResponse(BaseModel):
    """Response representing a Job."""

    job_id: str = Field(..., description="Unique job identifier")
    customer_id: str = Field(..., description="Owning customer ID")
    title: str
    description: str
    status: str = Field(
        ...,
        description="Job status (new/scheduled/in_progress/done/invoiced/paid)",
    )
    created_at: str = Field(..., description="Creation timestamp (ISO format, UTC)")
    updated_at: str = Field(..., description="Last status change timestamp (ISO format, UTC)")


class JobListResponse(BaseModel):
    """One page of jobs, newest first."""

    items: List[JobResponse] = Field(default_factory=list)
    total: int = Field(..., description="Total number of matching jobs")
    page: int
    limit: int
    total_pages: int


# =============================================================================
# Appointment Schemas
# =============================================================================


class AppointmentCreateRequest(BaseModel):
    """Request to book a technician for a NEW job."""

    technician_id: str = Field(..., min_length=1, description="Technician assigned to the appointment")
    start_date: datetime = Field(
        ...,
        description="Start of the appointment (ISO 8601)",
        examples=["2025-10-15T09:00:00.000Z"],
    )
    end_date: datetime = Field(
        ...,
        description="End of the appointment, must be after start_date (ISO 8601)",
        examples=["2025-10-15T11:00:00.000Z"],
    )


class AppointmentResponse(BaseModel):
    """Response representing an Appointment."""

    appointment_id: str
    job_id: str
    technician_id: str
    start_date: str = Field(..., description="Start timestamp (ISO format, UTC)")
    end_date: str = Field(..., description="End timestamp (ISO format, UTC)")
    created_at: str
