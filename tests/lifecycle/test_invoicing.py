"""
Invoicing Tests.

- Totals: subTotal = sum(price * quantity), total = subTotal + subTotal * tax / 100
- Invoice number format INV-<unix ms>-<1000..9999999999>
- DONE -> INVOICED saga (scenario C) and its rollback paths
"""

import random
import re
import uuid
from decimal import Decimal
from unittest.mock import patch

import pytest

from jobflow.lifecycle import (
    DuplicateInvoiceNumberError,
    InvoiceGenerator,
    InvoiceItem,
    InvoiceNotFoundError,
    JobLifecycleManager,
    JobNotFoundError,
    JobStateError,
    JobStatus,
    PersistenceAdapter,
)
from jobflow.lifecycle.errors import ErrorKind
from jobflow.lifecycle.invoicing import SUFFIX_MAX, SUFFIX_MIN, compute_sub_total, compute_total

from .conftest import (
    FIXED_MS,
    SCENARIO_ITEMS,
    SCENARIO_TAX,
    MockClock,
    assert_job_status,
    count_rows,
)


INVOICE_NUMBER_RE = re.compile(r"^INV-(\d+)-(\d+)$")


class TestTotals:
    def test_scenario_c_totals(self):
        sub_total = compute_sub_total(SCENARIO_ITEMS)

        assert sub_total == Decimal("5000")
        assert compute_total(sub_total, SCENARIO_TAX) == Decimal("5500")

    def test_fractional_prices_exact(self):
        items = [
            InvoiceItem(description="Valve", price=Decimal("19.99"), quantity=3),
            InvoiceItem(description="Labour", price=Decimal("0.01"), quantity=1),
        ]

        sub_total = compute_sub_total(items)

        assert sub_total == Decimal("59.98")
        assert compute_total(sub_total, Decimal("7.5")) == Decimal("64.4785")

    def test_zero_tax(self):
        assert compute_total(Decimal("5000"), Decimal("0")) == Decimal("5000")

    def test_empty_items(self):
        assert compute_sub_total([]) == Decimal("0")


class TestInvoiceNumber:
    def test_format_uses_clock_and_range(self, persistence: PersistenceAdapter):
        generator = InvoiceGenerator(persistence, clock_ms=lambda: FIXED_MS, rng=random.Random(7))

        for _ in range(50):
            number = generator.generate_invoice_number()
            match = INVOICE_NUMBER_RE.match(number)
            assert match, number
            assert int(match.group(1)) == FIXED_MS
            assert SUFFIX_MIN <= int(match.group(2)) <= SUFFIX_MAX

    def test_deterministic_with_seeded_rng(self, persistence: PersistenceAdapter):
        a = InvoiceGenerator(persistence, clock_ms=lambda: FIXED_MS, rng=random.Random(42))
        b = InvoiceGenerator(persistence, clock_ms=lambda: FIXED_MS, rng=random.Random(42))

        assert a.generate_invoice_number() == b.generate_invoice_number()

    def test_clock_advance_changes_prefix(self, persistence: PersistenceAdapter):
        clock = MockClock()
        generator = InvoiceGenerator(persistence, clock_ms=clock.now_ms, rng=random.Random(1))

        first = generator.generate_invoice_number()
        clock.tick(2)
        second = generator.generate_invoice_number()

        assert int(second.split("-")[1]) - int(first.split("-")[1]) == 2000


class TestCreateInvoiceSaga:
    def test_scenario_c_done_job_invoiced(
        self, manager: JobLifecycleManager, persistence: PersistenceAdapter, create_job
    ):
        """Scenario C: items [2000 x 1, 1500 x 2], tax 10 -> subTotal 5000, total 5500."""
        job = create_job(status=JobStatus.DONE)

        invoice = manager.create_invoice(job.job_id, SCENARIO_ITEMS, SCENARIO_TAX)

        assert invoice.sub_total == Decimal("5000")
        assert invoice.tax == Decimal("10")
        assert invoice.total == Decimal("5500")
        assert INVOICE_NUMBER_RE.match(invoice.invoice_number)
        assert_job_status(persistence, job.job_id, JobStatus.INVOICED)

        stored = manager.get_invoice(invoice.invoice_id)
        assert stored.total == Decimal("5500")
        assert stored.items == SCENARIO_ITEMS
        assert persistence.get_invoice_for_job(job.job_id).invoice_id == invoice.invoice_id

    @pytest.mark.parametrize(
        "status",
        [JobStatus.NEW, JobStatus.SCHEDULED, JobStatus.IN_PROGRESS, JobStatus.INVOICED],
    )
    def test_job_not_done_rejected(
        self,
        manager: JobLifecycleManager,
        persistence: PersistenceAdapter,
        create_job,
        status,
    ):
        job = create_job(status=status)
        invoices_before = count_rows(persistence, "invoices")

        with pytest.raises(JobStateError) as exc_info:
            manager.create_invoice(job.job_id, SCENARIO_ITEMS, SCENARIO_TAX)

        assert exc_info.value.kind == ErrorKind.BAD_REQUEST
        assert_job_status(persistence, job.job_id, status)
        assert count_rows(persistence, "invoices") == invoices_before

    def test_missing_job(self, manager: JobLifecycleManager):
        with pytest.raises(JobNotFoundError):
            manager.create_invoice(str(uuid.uuid4()), SCENARIO_ITEMS, SCENARIO_TAX)

    def test_generator_failure_rolls_back_status(
        self,
        manager: JobLifecycleManager,
        persistence: PersistenceAdapter,
        invoice_generator: InvoiceGenerator,
        create_job,
    ):
        """A failure inside the generator leaves the job DONE and no invoice row."""
        job = create_job(status=JobStatus.DONE)

        with patch.object(
            invoice_generator, "create_invoice", side_effect=RuntimeError("generator down")
        ):
            with pytest.raises(RuntimeError, match="generator down"):
                manager.create_invoice(job.job_id, SCENARIO_ITEMS, SCENARIO_TAX)

        assert_job_status(persistence, job.job_id, JobStatus.DONE)
        assert count_rows(persistence, "invoices") == 0
        assert persistence.get_invoice_for_job(job.job_id) is None

    def test_colliding_invoice_number_aborts_saga(
        self,
        manager: JobLifecycleManager,
        persistence: PersistenceAdapter,
        invoice_generator: InvoiceGenerator,
        create_job,
    ):
        first = create_job(status=JobStatus.DONE)
        second = create_job(status=JobStatus.DONE)

        with patch.object(
            invoice_generator, "generate_invoice_number", return_value="INV-1-1000"
        ):
            manager.create_invoice(first.job_id, SCENARIO_ITEMS, SCENARIO_TAX)
            with pytest.raises(DuplicateInvoiceNumberError) as exc_info:
                manager.create_invoice(second.job_id, SCENARIO_ITEMS, SCENARIO_TAX)

        assert exc_info.value.kind == ErrorKind.CONFLICT
        assert_job_status(persistence, second.job_id, JobStatus.DONE)
        assert count_rows(persistence, "invoices") == 1


class TestInvoiceReads:
    def test_get_missing_invoice(self, manager: JobLifecycleManager):
        with pytest.raises(InvoiceNotFoundError):
            manager.get_invoice(str(uuid.uuid4()))

    def test_list_invoices_by_job(self, manager: JobLifecycleManager, create_job):
        first = create_job(status=JobStatus.INVOICED)
        create_job(status=JobStatus.INVOICED)

        page = manager.list_invoices(job_id=first.job_id)

        assert page.total == 1
        assert page.items[0].job_id == first.job_id
        assert manager.list_invoices().total == 2
