"""
Invoice Generator.

Computes invoice totals and persists the invoice row:
- subTotal = sum(price * quantity)
- total = subTotal + subTotal * tax / 100
- invoice number INV-<unix ms>-<random 1000..9999999999>

InvoiceGenerator MUST NOT open its own transaction. It always participates in
the caller's unit of work (the DONE -> INVOICED saga in JobLifecycleManager).
A colliding invoice number is not retried; the storage unique constraint
raises DuplicateInvoiceNumberError and the whole saga aborts.
"""

import logging
import random
import time
from decimal import Decimal
from typing import Callable, Iterable, Optional

from .entities import Invoice, InvoiceItem, generate_uuid, now_iso
from .persistence import PersistenceAdapter, TransactionContext


logger = logging.getLogger(__name__)

INVOICE_PREFIX = "INV"
SUFFIX_MIN = 1000
SUFFIX_MAX = 9_999_999_999


def compute_sub_total(items: Iterable[InvoiceItem]) -> Decimal:
    return sum((item.line_total for item in items), Decimal("0"))


def compute_total(sub_total: Decimal, tax: Decimal) -> Decimal:
    return sub_total + sub_total * tax / Decimal(100)


class InvoiceGenerator:
    """
    Stateless invoice builder.

    The clock (milliseconds since epoch) and random source are injectable so
    invoice numbers are deterministic under test.
    """

    def __init__(
        self,
        persistence: PersistenceAdapter,
        clock_ms: Optional[Callable[[], int]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.persistence = persistence
        self._clock_ms = clock_ms or (lambda: int(time.time() * 1000))
        self._rng = rng or random.Random()

    def generate_invoice_number(self) -> str:
        suffix = self._rng.randint(SUFFIX_MIN, SUFFIX_MAX)
        return f"{INVOICE_PREFIX}-{self._clock_ms()}-{suffix}"

    def build_invoice(self, job_id: str, items: list[InvoiceItem], tax: Decimal) -> Invoice:
        """Compute totals for ``items`` without touching storage."""
        tax = Decimal(str(tax))
        sub_total = compute_sub_total(items)
        return Invoice(
            invoice_id=generate_uuid(),
            job_id=job_id,
            invoice_number=self.generate_invoice_number(),
            items=list(items),
            sub_total=sub_total,
            tax=tax,
            total=compute_total(sub_total, tax),
            created_at=now_iso(),
        )

    def create_invoice(
        self,
        job_id: str,
        items: list[InvoiceItem],
        tax: Decimal,
        tx: TransactionContext,
    ) -> Invoice:
        """
        Build and persist an invoice inside the caller's transaction.

        Args:
            job_id: Job being invoiced
            items: Ordered line items
            tax: Tax percentage applied to the subtotal
            tx: Open transaction owned by the caller

        Returns:
            The persisted Invoice (durable once the caller commits)
        """
        invoice = self.build_invoice(job_id, items, tax)
        self.persistence.insert_invoice(tx, invoice)
        logger.info(
            f"[InvoiceGenerator] {invoice.invoice_number} for job {job_id}: "
            f"subtotal={invoice.sub_total} tax={invoice.tax}% total={invoice.total}"
        )
        return invoice
