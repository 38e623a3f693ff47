"""
Lifecycle exceptions.

Every failure raised by the core carries a kind:
- NOT_FOUND: referenced entity absent or identifier malformed
- CONFLICT: uniqueness or scheduling-overlap violation
- BAD_REQUEST: invalid transition, invalid time window, amount mismatch, unknown enum value
- INTERNAL: storage failure not otherwise classified

The request layer maps kinds to HTTP status codes and relays the message unchanged.
"""

from enum import Enum
from typing import Iterable


class ErrorKind(str, Enum):
    """Failure classification shared by all lifecycle errors."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    BAD_REQUEST = "bad_request"
    INTERNAL = "internal"


class LifecycleError(Exception):
    """Base exception for all lifecycle errors."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(LifecycleError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(LifecycleError):
    kind = ErrorKind.CONFLICT


class BadRequestError(LifecycleError):
    kind = ErrorKind.BAD_REQUEST


class InternalError(LifecycleError):
    kind = ErrorKind.INTERNAL


# =============================================================================
# NotFound
# =============================================================================


class JobNotFoundError(NotFoundError):
    """Raised when a requested job does not exist."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job with ID {job_id} not found")


class InvalidJobIdError(NotFoundError):
    """
    Raised when a job identifier is not a well-formed UUID.

    Surfaced to callers exactly like a missing job; only the message differs.
    """

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Invalid job ID: {job_id}")


class CustomerNotFoundError(NotFoundError):
    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(f"Customer with ID {customer_id} not found")


class TechnicianNotFoundError(NotFoundError):
    def __init__(self, technician_id: str):
        self.technician_id = technician_id
        super().__init__(f"Technician with ID {technician_id} not found")


class InvoiceNotFoundError(NotFoundError):
    def __init__(self, invoice_id: str):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice with ID {invoice_id} not found")


class OrphanedInvoiceError(NotFoundError):
    """Raised when an invoice references a job that no longer exists."""

    def __init__(self, invoice_id: str, job_id: str):
        self.invoice_id = invoice_id
        self.job_id = job_id
        super().__init__(f"Job {job_id} for invoice {invoice_id} not found")


class PaymentNotFoundError(NotFoundError):
    def __init__(self, payment_id: str):
        self.payment_id = payment_id
        super().__init__(f"Payment with ID {payment_id} not found")


# =============================================================================
# Conflict
# =============================================================================


class DuplicateJobError(ConflictError):
    """Raised when a customer already has a job with the same title."""

    def __init__(self, customer_id: str, title: str):
        self.customer_id = customer_id
        self.title = title
        super().__init__(
            f"A job with this title already exists for the customer "
            f"(customer {customer_id}, title '{title}')"
        )


class DuplicateCustomerError(ConflictError):
    """Raised when a customer email or phone number is already registered."""

    def __init__(self, fields: Iterable[str]):
        self.fields = tuple(fields)
        labels = {"email": "email", "phone": "phone number"}
        detail = " and ".join(labels.get(f, f) for f in self.fields)
        super().__init__(f"Customer with this {detail} already exists.")


class DuplicateTechnicianError(ConflictError):
    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Technician with email {email} already exists.")


class AppointmentOverlapError(ConflictError):
    """
    Raised when a technician is already booked during the requested window.

    Names both the requested window and the existing one it collides with.
    """

    def __init__(
        self,
        technician_id: str,
        requested_start: str,
        requested_end: str,
        existing_start: str | None = None,
        existing_end: str | None = None,
    ):
        self.technician_id = technician_id
        self.requested_start = requested_start
        self.requested_end = requested_end
        self.existing_start = existing_start
        self.existing_end = existing_end
        message = (
            f"Technician {technician_id} already has an active appointment during "
            f"this time frame: {requested_start} - {requested_end}"
        )
        if existing_start and existing_end:
            message += f" (conflicts with {existing_start} - {existing_end})"
        super().__init__(message)


class StaleJobStatusError(ConflictError):
    """
    Raised when a guarded status write finds the job in an unexpected state.

    The write is a compare-and-set on the status read earlier in the same unit
    of work; a mismatch means another writer got there first.
    """

    def __init__(self, job_id: str, expected_status: str, actual_status: str):
        self.job_id = job_id
        self.expected_status = expected_status
        self.actual_status = actual_status
        super().__init__(
            f"Concurrent status change for job {job_id}: "
            f"expected status '{expected_status}', got '{actual_status}'"
        )


class DuplicateInvoiceNumberError(ConflictError):
    def __init__(self, invoice_number: str):
        self.invoice_number = invoice_number
        super().__init__(f"Invoice number {invoice_number} already exists")


class DuplicateInvoiceError(ConflictError):
    """Raised by the storage constraint allowing one invoice per job."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job {job_id} already has an invoice")


class DuplicatePaymentError(ConflictError):
    """Raised by the storage constraint allowing one payment per invoice."""

    def __init__(self, invoice_id: str):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice {invoice_id} has already been paid")


# =============================================================================
# BadRequest
# =============================================================================


class InvalidTimeWindowError(BadRequestError):
    def __init__(self, start: str, end: str):
        self.start = start
        self.end = end
        super().__init__(f"End date must come after start date (start {start}, end {end})")


class UnknownStatusError(BadRequestError):
    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid job status: {value}")


class InvalidTransitionError(BadRequestError):
    """
    Raised when a direct status edit is not on an allowed edge.

    The message lists the edges a caller may request from the current state.
    """

    def __init__(self, job_id: str, current: str, target: str, allowed: Iterable[str]):
        self.job_id = job_id
        self.current = current
        self.target = target
        self.allowed = tuple(allowed)
        allowed_text = ", ".join(f"{current} -> {a}" for a in self.allowed) or "none"
        super().__init__(
            f"Invalid status transition for job {job_id}: {current} -> {target}. "
            f"Allowed transitions: {allowed_text}"
        )


class JobStateError(BadRequestError):
    """Raised when a saga requires the job to be in a specific state."""

    def __init__(self, job_id: str, expected: str, actual: str, action: str):
        self.job_id = job_id
        self.expected = expected
        self.actual = actual
        self.action = action
        super().__init__(
            f"Can only {action} for job with status {expected} "
            f"(job {job_id} is {actual})"
        )


class PaymentAmountMismatchError(BadRequestError):
    def __init__(self, invoice_id: str, amount, total):
        self.invoice_id = invoice_id
        self.amount = amount
        self.total = total
        super().__init__(
            f"Payment amount ({amount}) must equal invoice total ({total}) "
            f"for invoice {invoice_id}"
        )


class UnknownPaymentMethodError(BadRequestError):
    def __init__(self, value: str, allowed: Iterable[str]):
        self.value = value
        super().__init__(
            f"payment_method must be one of: {', '.join(allowed)} (got '{value}')"
        )


# =============================================================================
# Internal
# =============================================================================


class StorageError(InternalError):
    """Raised when the storage layer cannot open or complete a unit of work."""

    def __init__(self, message: str):
        super().__init__(f"Storage failure: {message}")
