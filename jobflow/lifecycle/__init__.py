"""
Job Lifecycle Core.

State machine and sagas for service jobs:
- JobLifecycleManager: job creation, status edits, scheduling and invoicing
- AppointmentScheduler: technician overlap detection, NEW -> SCHEDULED
- InvoiceGenerator: totals and invoice numbers
- PaymentProcessor: payment reconciliation, INVOICED -> PAID
"""

from .entities import (
    JobStatus,
    PaymentMethod,
    TRANSITIONS,
    DIRECT_TRANSITIONS,
    allowed_next,
    allowed_direct_next,
    Customer,
    Technician,
    Job,
    Appointment,
    InvoiceItem,
    Invoice,
    Payment,
    Page,
)
from .errors import (
    ErrorKind,
    LifecycleError,
    NotFoundError,
    ConflictError,
    BadRequestError,
    InternalError,
    JobNotFoundError,
    InvalidJobIdError,
    CustomerNotFoundError,
    TechnicianNotFoundError,
    InvoiceNotFoundError,
    OrphanedInvoiceError,
    PaymentNotFoundError,
    DuplicateJobError,
    DuplicateCustomerError,
    DuplicateTechnicianError,
    AppointmentOverlapError,
    StaleJobStatusError,
    DuplicateInvoiceNumberError,
    DuplicateInvoiceError,
    DuplicatePaymentError,
    InvalidTimeWindowError,
    UnknownStatusError,
    InvalidTransitionError,
    JobStateError,
    PaymentAmountMismatchError,
    UnknownPaymentMethodError,
    StorageError,
)
from .persistence import PersistenceAdapter, TransactionContext
from .appointments import AppointmentScheduler
from .invoicing import InvoiceGenerator
from .payments import PaymentProcessor
from .manager import JobLifecycleManager
from .directory import CustomerDirectory, TechnicianDirectory, DEFAULT_TECHNICIANS
from .service import LifecycleService

__all__ = [
    # Entities
    "JobStatus",
    "PaymentMethod",
    "TRANSITIONS",
    "DIRECT_TRANSITIONS",
    "allowed_next",
    "allowed_direct_next",
    "Customer",
    "Technician",
    "Job",
    "Appointment",
    "InvoiceItem",
    "Invoice",
    "Payment",
    "Page",
    # Errors
    "ErrorKind",
    "LifecycleError",
    "NotFoundError",
    "ConflictError",
    "BadRequestError",
    "InternalError",
    "JobNotFoundError",
    "InvalidJobIdError",
    "CustomerNotFoundError",
    "TechnicianNotFoundError",
    "InvoiceNotFoundError",
    "OrphanedInvoiceError",
    "PaymentNotFoundError",
    "DuplicateJobError",
    "DuplicateCustomerError",
    "DuplicateTechnicianError",
    "AppointmentOverlapError",
    "StaleJobStatusError",
    "DuplicateInvoiceNumberError",
    "DuplicateInvoiceError",
    "DuplicatePaymentError",
    "InvalidTimeWindowError",
    "UnknownStatusError",
    "InvalidTransitionError",
    "JobStateError",
    "PaymentAmountMismatchError",
    "UnknownPaymentMethodError",
    "StorageError",
    # Persistence
    "PersistenceAdapter",
    "TransactionContext",
    # Components
    "AppointmentScheduler",
    "InvoiceGenerator",
    "PaymentProcessor",
    "JobLifecycleManager",
    "CustomerDirectory",
    "TechnicianDirectory",
    "DEFAULT_TECHNICIANS",
    # Service
    "LifecycleService",
]
