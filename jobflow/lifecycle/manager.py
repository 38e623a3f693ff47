"""
Job Lifecycle Manager.

Owns the job state machine:

    NEW -> SCHEDULED -> IN_PROGRESS -> DONE -> INVOICED -> PAID

- NEW -> SCHEDULED happens only through schedule_appointment
- SCHEDULED -> IN_PROGRESS and IN_PROGRESS -> DONE through update_status
- DONE -> INVOICED happens only through create_invoice
- INVOICED -> PAID happens only through PaymentProcessor.create

Each saga opens one transaction, checks preconditions against the job read
inside it, and hands the same transaction to the sub-component that performs
the write. The transaction commits once at the end or rolls back as a whole.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from .appointments import AppointmentScheduler, validate_window
from .entities import (
    Appointment,
    Invoice,
    InvoiceItem,
    Job,
    JobStatus,
    Page,
    allowed_direct_next,
    is_valid_id,
    page_offset,
)
from .errors import (
    CustomerNotFoundError,
    DuplicateJobError,
    InvalidJobIdError,
    InvalidTransitionError,
    InvoiceNotFoundError,
    JobNotFoundError,
    JobStateError,
)
from .invoicing import InvoiceGenerator
from .persistence import PersistenceAdapter


logger = logging.getLogger(__name__)


class JobLifecycleManager:
    """
    Entry point for job creation, status edits and the scheduling and
    invoicing sagas.
    """

    def __init__(
        self,
        persistence: PersistenceAdapter,
        scheduler: AppointmentScheduler,
        invoice_generator: InvoiceGenerator,
    ):
        self.persistence = persistence
        self.scheduler = scheduler
        self.invoice_generator = invoice_generator

    # =========================================================================
    # Creation and reads
    # =========================================================================

    def create_job(self, customer_id: str, title: str, description: str) -> Job:
        """
        Create a job in status NEW.

        Raises:
            CustomerNotFoundError: If the customer doesn't exist
            DuplicateJobError: If the customer already has a job with this title
        """
        with self.persistence.transaction("create_job") as tx:
            if self.persistence.get_customer(customer_id, tx) is None:
                raise CustomerNotFoundError(customer_id)

            if self.persistence.find_job_by_title(customer_id, title, tx) is not None:
                raise DuplicateJobError(customer_id, title)

            job = Job.create(customer_id=customer_id, title=title, description=description)
            self.persistence.insert_job(tx, job)

        logger.info(f"[JobLifecycle] Job created: {job.job_id} '{title}' for customer {customer_id}")
        return job

    def find_all(
        self,
        status: "Optional[str | JobStatus]" = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page:
        """List jobs newest first, optionally filtered by status."""
        status_filter = JobStatus.parse(status) if status is not None else None
        items = self.persistence.list_jobs(
            status=status_filter,
            offset=page_offset(page, limit),
            limit=limit,
        )
        total = self.persistence.count_jobs(status=status_filter)
        return Page(items=items, total=total, page=page, limit=limit)

    def find_one(self, job_id: str) -> Job:
        if not is_valid_id(job_id):
            raise InvalidJobIdError(job_id)

        job = self.persistence.get_job(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    # =========================================================================
    # Direct status edits
    # =========================================================================

    def update_status(self, job_id: str, status: "str | JobStatus") -> Job:
        """
        Move a job along one of the direct edges.

        Raises:
            UnknownStatusError: Target is not a JobStatus (checked before lookup)
            JobNotFoundError: If job doesn't exist
            InvalidTransitionError: Target not reachable by a direct edit
            StaleJobStatusError: Job changed status concurrently
        """
        target = JobStatus.parse(status)

        with self.persistence.transaction("update_status") as tx:
            job = self.persistence.get_job(job_id, tx) if is_valid_id(job_id) else None
            if job is None:
                raise JobNotFoundError(job_id)

            allowed = allowed_direct_next(job.status)
            if target not in allowed:
                raise InvalidTransitionError(
                    job_id,
                    current=job.status.value,
                    target=target.value,
                    allowed=sorted(s.value for s in allowed),
                )

            updated = self.persistence.update_job_status(
                tx, job_id, target, expected=job.status
            )

        logger.info(f"[JobLifecycle] Job {job_id}: {job.status.value} -> {target.value}")
        return updated

    # =========================================================================
    # Sagas
    # =========================================================================

    def schedule_appointment(
        self,
        job_id: str,
        technician_id: str,
        start_at: datetime,
        end_at: datetime,
    ) -> Appointment:
        """
        NEW -> SCHEDULED saga.

        The time window is validated before any I/O; everything else happens in
        one transaction shared with AppointmentScheduler.
        """
        start_at, end_at = validate_window(start_at, end_at)

        with self.persistence.transaction("schedule_appointment") as tx:
            appointment = self.scheduler.schedule_appointment(
                job_id, technician_id, start_at, end_at, tx=tx
            )

        return appointment

    def create_invoice(
        self,
        job_id: str,
        items: list[InvoiceItem],
        tax: Decimal,
    ) -> Invoice:
        """
        DONE -> INVOICED saga.

        Args:
            job_id: Job to invoice
            items: Ordered line items
            tax: Tax percentage

        Returns:
            The committed Invoice

        Raises:
            JobNotFoundError: If job doesn't exist
            JobStateError: If job is not DONE
            DuplicateInvoiceNumberError: Generated number already taken
        """
        with self.persistence.transaction("create_invoice") as tx:
            job = self.persistence.get_job(job_id, tx) if is_valid_id(job_id) else None
            if job is None:
                raise JobNotFoundError(job_id)

            if job.status != JobStatus.DONE:
                raise JobStateError(
                    job_id,
                    expected=JobStatus.DONE.value,
                    actual=job.status.value,
                    action="create invoice",
                )

            self.persistence.update_job_status(
                tx, job_id, JobStatus.INVOICED, expected=JobStatus.DONE
            )
            invoice = self.invoice_generator.create_invoice(job_id, items, tax, tx)

        logger.info(f"[JobLifecycle] Job {job_id} invoiced: {invoice.invoice_number}")
        return invoice

    # =========================================================================
    # Invoice reads
    # =========================================================================

    def get_invoice(self, invoice_id: str) -> Invoice:
        invoice = self.persistence.get_invoice(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)
        return invoice

    def list_invoices(
        self,
        job_id: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Page:
        items = self.persistence.list_invoices(
            job_id=job_id, offset=page_offset(page, limit), limit=limit
        )
        total = self.persistence.count_invoices(job_id=job_id)
        return Page(items=items, total=total, page=page, limit=limit)
