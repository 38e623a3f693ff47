"""
API Schemas package.

Pydantic models for request/response validation.
"""

from .jobs import (
    JobCreateRequest,
    JobResponse,
    JobListResponse,
    AppointmentCreateRequest,
    AppointmentResponse,
)
from .directory import (
    CustomerCreateRequest,
    CustomerResponse,
    CustomerListResponse,
    TechnicianCreateRequest,
    TechnicianResponse,
    TechnicianListResponse,
    TechnicianSeedResponse,
)
from .billing import (
    InvoiceItemSchema,
    InvoiceCreateRequest,
    InvoiceItemResponse,
    InvoiceResponse,
    InvoiceListResponse,
    PaymentCreateRequest,
    PaymentResponse,
    PaymentListResponse,
    ErrorResponse,
)

__all__ = [
    "JobCreateRequest",
    "JobResponse",
    "JobListResponse",
    "AppointmentCreateRequest",
    "AppointmentResponse",
    "CustomerCreateRequest",
    "CustomerResponse",
    "CustomerListResponse",
    "TechnicianCreateRequest",
    "TechnicianResponse",
    "TechnicianListResponse",
    "TechnicianSeedResponse",
    "InvoiceItemSchema",
    "InvoiceCreateRequest",
    "InvoiceItemResponse",
    "InvoiceResponse",
    "InvoiceListResponse",
    "PaymentCreateRequest",
    "PaymentResponse",
    "PaymentListResponse",
    "ErrorResponse",
]
