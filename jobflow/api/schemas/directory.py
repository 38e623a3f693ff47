"""
Directory API schemas (customers and technicians).
"""

from typing import List

from pydantic import BaseModel, Field


class CustomerCreateRequest(BaseModel):
    """Request to register a customer."""

    name: str = Field(..., min_length=1, description="Full name of the customer", examples=["John Doe"])
    email: str = Field(
        ...,
        min_length=3,
        pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
        description="Unique email address of the customer",
        examples=["john.doe@example.com"],
    )
    phone: str = Field(
        ...,
        min_length=1,
        description="Unique phone number of the customer",
        examples=["08012345678"],
    )
    address: str = Field(
        ...,
        min_length=1,
        description="Residential or business address of the customer",
        examples=["123 Palm Street, Lagos, Nigeria"],
    )


class CustomerResponse(BaseModel):
    customer_id: str
    name: str
    email: str
    phone: str
    address: str
    created_at: str
    updated_at: str


class CustomerListResponse(BaseModel):
    items: List[CustomerResponse] = Field(default_factory=list)
    total: int
    page: int
    limit: int
    total_pages: int


class TechnicianCreateRequest(BaseModel):
    """Request to register a technician."""

    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    phone: str = Field(..., min_length=1)
    role: str = Field(default="technician", description="Directory role")


class TechnicianResponse(BaseModel):
    technician_id: str
    name: str
    email: str
    phone: str
    role: str
    created_at: str
    updated_at: str


class TechnicianListResponse(BaseModel):
    items: List[TechnicianResponse] = Field(default_factory=list)
    total: int
    page: int
    limit: int
    total_pages: int


class TechnicianSeedResponse(BaseModel):
    """Response from seeding the default technicians."""

    created: List[TechnicianResponse] = Field(default_factory=list)
    created_count: int = Field(..., description="Technicians inserted by this call")
