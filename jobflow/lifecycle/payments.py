"""
Payment Processor.

Reconciles a payment against its invoice and moves the owning job
INVOICED -> PAID in one unit of work. No partial payments: the amount must
equal the invoice total exactly.
"""

import logging
from decimal import Decimal, InvalidOperation

from .entities import (
    JobStatus,
    Page,
    Payment,
    PaymentMethod,
    page_offset,
)
from .errors import (
    InvoiceNotFoundError,
    JobStateError,
    OrphanedInvoiceError,
    PaymentAmountMismatchError,
    PaymentNotFoundError,
)
from .persistence import PersistenceAdapter


logger = logging.getLogger(__name__)


def to_amount(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal("NaN")


class PaymentProcessor:
    def __init__(self, persistence: PersistenceAdapter):
        self.persistence = persistence

    def create(self, invoice_id: str, amount, method: "str | PaymentMethod") -> Payment:
        """
        Record a payment for an invoice.

        Raises:
            BadRequestError: Unknown method, amount mismatch, job not INVOICED
            NotFoundError: Invoice missing, or its job missing (orphaned invoice)
            ConflictError: Invoice already paid (storage constraint)
        """
        method = PaymentMethod.parse(method)
        amount = to_amount(amount)

        with self.persistence.transaction("create_payment") as tx:
            invoice = self.persistence.get_invoice(invoice_id, tx)
            if invoice is None:
                raise InvoiceNotFoundError(invoice_id)

            # Strict equality, no tolerance band. NaN never compares equal.
            if amount != invoice.total:
                raise PaymentAmountMismatchError(invoice_id, amount, invoice.total)

            job = self.persistence.get_job(invoice.job_id, tx)
            if job is None:
                raise OrphanedInvoiceError(invoice_id, invoice.job_id)

            if job.status != JobStatus.INVOICED:
                raise JobStateError(
                    job.job_id,
                    expected=JobStatus.INVOICED.value,
                    actual=job.status.value,
                    action="record payment",
                )

            self.persistence.update_job_status(
                tx, job.job_id, JobStatus.PAID, expected=JobStatus.INVOICED
            )

            payment = Payment.create(invoice_id=invoice_id, amount=amount, method=method)
            self.persistence.insert_payment(tx, payment)

        logger.info(
            f"[PaymentProcessor] Payment {payment.payment_id} of {amount} via "
            f"{method.value} settled invoice {invoice.invoice_number}; job {job.job_id} PAID"
        )
        return payment

    def find_all(self, page: int = 1, limit: int = 10) -> Page:
        items = self.persistence.list_payments(offset=page_offset(page, limit), limit=limit)
        return Page(items=items, total=self.persistence.count_payments(), page=page, limit=limit)

    def find_one(self, payment_id: str) -> Payment:
        payment = self.persistence.get_payment(payment_id)
        if payment is None:
            raise PaymentNotFoundError(payment_id)
        return payment
