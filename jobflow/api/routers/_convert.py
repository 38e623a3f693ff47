"""
Entity -> API response converters shared by the routers.
"""

from jobflow.lifecycle.entities import format_ts

from ..schemas.billing import (
    InvoiceItemResponse,
    InvoiceListResponse,
    InvoiceResponse,
    PaymentListResponse,
    PaymentResponse,
)
from ..schemas.directory import (
    CustomerListResponse,
    CustomerResponse,
    TechnicianListResponse,
    TechnicianResponse,
)
from ..schemas.jobs import AppointmentResponse, JobListResponse, JobResponse


def job_to_response(job) -> JobResponse:
    return JobResponse(
        job_id=job.job_id,
        customer_id=job.customer_id,
        title=job.title,
        description=job.description,
        status=job.status.value,
        created_at=job.created_at,
        updated_at=job.updated_at,
    )


def job_page_to_response(page) -> JobListResponse:
    return JobListResponse(
        items=[job_to_response(job) for job in page.items],
        total=page.total,
        page=page.page,
        limit=page.limit,
        total_pages=page.total_pages,
    )


def appointment_to_response(appointment) -> AppointmentResponse:
    return AppointmentResponse(
        appointment_id=appointment.appointment_id,
        job_id=appointment.job_id,
        technician_id=appointment.technician_id,
        start_date=format_ts(appointment.start_at),
        end_date=format_ts(appointment.end_at),
        created_at=appointment.created_at,
    )


def customer_to_response(customer) -> CustomerResponse:
    return CustomerResponse(
        customer_id=customer.customer_id,
        name=customer.name,
        email=customer.email,
        phone=customer.phone,
        address=customer.address,
        created_at=customer.created_at,
        updated_at=customer.updated_at,
    )


def customer_page_to_response(page) -> CustomerListResponse:
    return CustomerListResponse(
        items=[customer_to_response(c) for c in page.items],
        total=page.total,
        page=page.page,
        limit=page.limit,
        total_pages=page.total_pages,
    )


def technician_to_response(technician) -> TechnicianResponse:
    return TechnicianResponse(
        technician_id=technician.technician_id,
        name=technician.name,
        email=technician.email,
        phone=technician.phone,
        role=technician.role,
        created_at=technician.created_at,
        updated_at=technician.updated_at,
    )


def technician_page_to_response(page) -> TechnicianListResponse:
    return TechnicianListResponse(
        items=[technician_to_response(t) for t in page.items],
        total=page.total,
        page=page.page,
        limit=page.limit,
        total_pages=page.total_pages,
    )


def invoice_to_response(invoice) -> InvoiceResponse:
    return InvoiceResponse(
        invoice_id=invoice.invoice_id,
        job_id=invoice.job_id,
        invoice_number=invoice.invoice_number,
        items=[
            InvoiceItemResponse(
                description=item.description,
                price=str(item.price),
                quantity=item.quantity,
            )
            for item in invoice.items
        ],
        sub_total=str(invoice.sub_total),
        tax=str(invoice.tax),
        total=str(invoice.total),
        created_at=invoice.created_at,
    )


def invoice_page_to_response(page) -> InvoiceListResponse:
    return InvoiceListResponse(
        items=[invoice_to_response(i) for i in page.items],
        total=page.total,
        page=page.page,
        limit=page.limit,
        total_pages=page.total_pages,
    )


def payment_to_response(payment) -> PaymentResponse:
    return PaymentResponse(
        payment_id=payment.payment_id,
        invoice_id=payment.invoice_id,
        amount=str(payment.amount),
        method=payment.method.value,
        created_at=payment.created_at,
    )


def payment_page_to_response(page) -> PaymentListResponse:
    return PaymentListResponse(
        items=[payment_to_response(p) for p in page.items],
        total=page.total,
        page=page.page,
        limit=page.limit,
        total_pages=page.total_pages,
    )
