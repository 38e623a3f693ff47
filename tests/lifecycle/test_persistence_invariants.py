"""
Persistence Invariant Tests.

Storage-level constraints hold even when application checks are bypassed:
- Overlap trigger on appointments
- CHECK (end_at > start_at)
- UNIQUE(customer_id, title), UNIQUE(invoice_number), UNIQUE(job_id) on invoices
- Transactions commit once or roll back every write
"""

import sqlite3
from decimal import Decimal

import pytest

from jobflow.lifecycle import (
    Appointment,
    AppointmentOverlapError,
    DuplicateInvoiceError,
    DuplicateJobError,
    InvalidTimeWindowError,
    Invoice,
    InvoiceItem,
    Job,
    JobStatus,
    PersistenceAdapter,
    StorageError,
)
from jobflow.lifecycle.entities import generate_uuid, now_iso

from .conftest import assert_job_status, count_rows, window


class TestAppointmentConstraints:
    def test_trigger_rejects_overlap_without_application_check(
        self, persistence: PersistenceAdapter, create_job, create_technician
    ):
        technician = create_technician()
        first = create_job()
        second = create_job()

        with persistence.transaction("test") as tx:
            persistence.insert_appointment(
                tx, Appointment.create(first.job_id, technician.technician_id, *window(9))
            )

        with pytest.raises(AppointmentOverlapError):
            with persistence.transaction("test") as tx:
                persistence.insert_appointment(
                    tx, Appointment.create(second.job_id, technician.technician_id, *window(10))
                )

        assert count_rows(persistence, "appointments") == 1

    def test_trigger_allows_touching_windows(
        self, persistence: PersistenceAdapter, create_job, create_technician
    ):
        technician = create_technician()
        first = create_job()
        second = create_job()

        with persistence.transaction("test") as tx:
            persistence.insert_appointment(
                tx, Appointment.create(first.job_id, technician.technician_id, *window(9))
            )
            persistence.insert_appointment(
                tx, Appointment.create(second.job_id, technician.technician_id, *window(11))
            )

        assert len(persistence.list_appointments_for_technician(technician.technician_id)) == 2

    def test_check_constraint_rejects_inverted_window(
        self, persistence: PersistenceAdapter, create_job, create_technician
    ):
        technician = create_technician()
        job = create_job()
        start, end = window(9)

        with pytest.raises(InvalidTimeWindowError):
            with persistence.transaction("test") as tx:
                persistence.insert_appointment(
                    tx, Appointment.create(job.job_id, technician.technician_id, end, start)
                )

        assert count_rows(persistence, "appointments") == 0

    def test_one_appointment_per_job(
        self, persistence: PersistenceAdapter, create_job, create_technician
    ):
        first_technician = create_technician()
        second_technician = create_technician()
        job = create_job()

        with persistence.transaction("test") as tx:
            persistence.insert_appointment(
                tx, Appointment.create(job.job_id, first_technician.technician_id, *window(9))
            )

        with pytest.raises(sqlite3.IntegrityError, match="appointments.job_id"):
            with persistence.transaction("test") as tx:
                persistence.insert_appointment(
                    tx, Appointment.create(job.job_id, second_technician.technician_id, *window(14))
                )

        assert persistence.get_appointment_for_job(job.job_id).technician_id == (
            first_technician.technician_id
        )


class TestUniqueConstraints:
    def test_job_title_unique_per_customer(self, persistence: PersistenceAdapter, create_customer):
        customer = create_customer()

        with persistence.transaction("test") as tx:
            persistence.insert_job(tx, Job.create(customer.customer_id, "AC repair", "a"))

        with pytest.raises(DuplicateJobError):
            with persistence.transaction("test") as tx:
                persistence.insert_job(tx, Job.create(customer.customer_id, "AC repair", "b"))

    def test_one_invoice_per_job(self, persistence: PersistenceAdapter, create_job):
        job = create_job(status=JobStatus.INVOICED)
        invoice = Invoice(
            invoice_id=generate_uuid(),
            job_id=job.job_id,
            invoice_number="INV-1-99999",
            items=[InvoiceItem("Extra", Decimal("1"))],
            sub_total=Decimal("1"),
            tax=Decimal("0"),
            total=Decimal("1"),
            created_at=now_iso(),
        )

        with pytest.raises(DuplicateInvoiceError):
            with persistence.transaction("test") as tx:
                persistence.insert_invoice(tx, invoice)


class TestTransactions:
    def test_exception_rolls_back_every_write(
        self, persistence: PersistenceAdapter, create_job
    ):
        job = create_job(status=JobStatus.SCHEDULED)

        with pytest.raises(ValueError):
            with persistence.transaction("test") as tx:
                persistence.update_job_status(
                    tx, job.job_id, JobStatus.IN_PROGRESS, expected=JobStatus.SCHEDULED
                )
                assert persistence.get_job(job.job_id, tx).status == JobStatus.IN_PROGRESS
                raise ValueError("abort")

        assert_job_status(persistence, job.job_id, JobStatus.SCHEDULED)

    def test_uncommitted_write_invisible_to_readers(
        self, persistence: PersistenceAdapter, create_job
    ):
        job = create_job(status=JobStatus.SCHEDULED)

        with persistence.transaction("test") as tx:
            persistence.update_job_status(
                tx, job.job_id, JobStatus.IN_PROGRESS, expected=JobStatus.SCHEDULED
            )
            assert_job_status(persistence, job.job_id, JobStatus.SCHEDULED)

        assert_job_status(persistence, job.job_id, JobStatus.IN_PROGRESS)

    def test_closed_context_rejects_statements(self, persistence: PersistenceAdapter):
        with persistence.transaction("test") as tx:
            pass

        assert not tx.is_open
        with pytest.raises(StorageError):
            tx.execute("SELECT 1")

    def test_begin_failure_raises_storage_error(self, tmp_path):
        persistence = PersistenceAdapter(tmp_path / "locked.db", busy_timeout=0.05)

        with persistence.transaction("holder"):
            with pytest.raises(StorageError) as exc_info:
                with persistence.transaction("contender"):
                    pass

        assert "contender" in exc_info.value.message

    def test_schema_init_idempotent(self, temp_db_path: str, create_job):
        job = create_job()

        reopened = PersistenceAdapter(temp_db_path)

        assert reopened.get_job(job.job_id).job_id == job.job_id
