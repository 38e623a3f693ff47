"""
Persistence Adapter for the job lifecycle.

- SQLite storage with WAL mode
- Explicit TransactionContext values: a saga opens one, passes it to every
  participating component, and it is committed or rolled back exactly once
- Every transaction starts with BEGIN IMMEDIATE, so writers are serialized and
  read-then-decide checks cannot be invalidated before commit
- Storage-level constraints back the application checks:
  UNIQUE(customer_id, title) on jobs, UNIQUE(invoice_number) and UNIQUE(job_id)
  on invoices, UNIQUE(invoice_id) on payments, and a trigger rejecting
  overlapping appointments for the same technician

Provides CRUD helpers only. Lifecycle rules live in the components that call it.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Iterator, Optional, Union

from .entities import (
    Appointment,
    Customer,
    Invoice,
    InvoiceItem,
    Job,
    JobStatus,
    Payment,
    PaymentMethod,
    Technician,
    format_ts,
    generate_uuid,
    now_iso,
    parse_ts,
)
from .errors import (
    AppointmentOverlapError,
    DuplicateCustomerError,
    DuplicateInvoiceError,
    DuplicateInvoiceNumberError,
    DuplicateJobError,
    DuplicatePaymentError,
    DuplicateTechnicianError,
    InvalidTimeWindowError,
    JobNotFoundError,
    StaleJobStatusError,
    StorageError,
)


logger = logging.getLogger(__name__)

DEFAULT_BUSY_TIMEOUT = 5.0

OVERLAP_TRIGGER_MESSAGE = "appointment overlap"


class TransactionContext:
    """
    Handle for one open unit of work.

    Wraps a dedicated connection inside BEGIN IMMEDIATE. Components receive it
    by reference and issue their reads and writes through it; only the owner
    (``PersistenceAdapter.transaction``) commits or rolls back.
    """

    def __init__(self, conn: sqlite3.Connection, label: str):
        self._conn = conn
        self.label = label
        self.transaction_id = generate_uuid()[:8]
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        if not self._open:
            raise StorageError(f"transaction {self.transaction_id} ({self.label}) is closed")
        return self._conn.execute(sql, params)

    def commit(self) -> None:
        self._conn.execute("COMMIT")
        self._open = False

    def rollback(self) -> None:
        if not self._open:
            return
        self._open = False
        # SQLite may already have rolled back on its own (e.g. SQLITE_FULL)
        if self._conn.in_transaction:
            self._conn.execute("ROLLBACK")

    def __repr__(self) -> str:
        state = "open" if self._open else "closed"
        return f"<TransactionContext {self.transaction_id} {self.label} {state}>"


Executor = Union[TransactionContext, sqlite3.Connection]


class PersistenceAdapter:
    """
    SQLite-based persistence for customers, technicians, jobs, appointments,
    invoices and payments.

    - Does NOT contain lifecycle rules
    - Does NOT validate beyond schema constraints
    - Multi-record atomicity is the caller's responsibility via ``transaction()``
    """

    def __init__(self, db_path: str | Path, busy_timeout: float = DEFAULT_BUSY_TIMEOUT):
        """
        Initialize persistence adapter.

        Args:
            db_path: Path to SQLite database file
            busy_timeout: Seconds a transaction waits for the write lock
        """
        self.db_path = str(db_path)
        self.busy_timeout = busy_timeout
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection in autocommit mode with WAL enabled."""
        conn = sqlite3.connect(
            self.db_path,
            timeout=self.busy_timeout,
            isolation_level=None,
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for read-only connections."""
        conn = self._get_connection()
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def _reader(self, tx: Optional[TransactionContext]) -> Iterator[Executor]:
        """Read through ``tx`` when a unit of work is open, else on a fresh connection."""
        if tx is not None:
            yield tx
        else:
            with self._connection() as conn:
                yield conn

    @contextmanager
    def transaction(self, label: str = "transaction") -> Iterator[TransactionContext]:
        """
        Open a unit of work.

        Commits when the block exits normally. On any exception rolls back every
        write made through the context and re-raises the original exception.
        """
        conn = self._get_connection()
        try:
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            conn.close()
            raise StorageError(f"cannot begin {label}: {e}") from e

        tx = TransactionContext(conn, label)
        logger.debug(f"[Persistence] BEGIN {tx.transaction_id} ({label})")
        try:
            yield tx
            tx.commit()
            logger.debug(f"[Persistence] COMMIT {tx.transaction_id} ({label})")
        except Exception as e:
            tx.rollback()
            kind = getattr(e, "kind", None)
            logger.warning(
                f"[Persistence] ROLLBACK {tx.transaction_id} ({label}): "
                f"{type(e).__name__}"
                + (f" [{kind.value}]" if kind is not None else "")
                + f" {e}"
            )
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self.transaction("init_db") as tx:
            tx.execute("""
                CREATE TABLE IF NOT EXISTS customers (
                    customer_id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    phone TEXT NOT NULL UNIQUE,
                    address TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            tx.execute("""
                CREATE TABLE IF NOT EXISTS technicians (
                    technician_id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    phone TEXT NOT NULL,
                    role TEXT NOT NULL DEFAULT 'technician',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            tx.execute("""
                CREATE TABLE IF NOT EXISTS jobs (
                    job_id TEXT PRIMARY KEY,
                    customer_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    description TEXT NOT NULL,
                    status TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    UNIQUE (customer_id, title),
                    FOREIGN KEY (customer_id) REFERENCES customers(customer_id)
                )
            """)

            # Index for status-filtered listings (newest first)
            tx.execute("""
                CREATE INDEX IF NOT EXISTS idx_jobs_status_created
                ON jobs (status, created_at DESC)
            """)

            tx.execute("""
                CREATE TABLE IF NOT EXISTS appointments (
                    appointment_id TEXT PRIMARY KEY,
                    job_id TEXT NOT NULL UNIQUE,
                    technician_id TEXT NOT NULL,
                    start_at TEXT NOT NULL,
                    end_at TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    CHECK (end_at > start_at),
                    FOREIGN KEY (job_id) REFERENCES jobs(job_id),
                    FOREIGN KEY (technician_id) REFERENCES technicians(technician_id)
                )
            """)

            # Index for technician overlap lookups
            tx.execute("""
                CREATE INDEX IF NOT EXISTS idx_appointments_technician_window
                ON appointments (technician_id, start_at, end_at)
            """)

            # Range exclusion: no two appointments of one technician may overlap
            tx.execute(f"""
                CREATE TRIGGER IF NOT EXISTS trg_appointments_no_overlap
                BEFORE INSERT ON appointments
                FOR EACH ROW
                WHEN EXISTS (
                    SELECT 1 FROM appointments
                    WHERE technician_id = NEW.technician_id
                      AND start_at < NEW.end_at
                      AND end_at > NEW.start_at
                )
                BEGIN
                    SELECT RAISE(ABORT, '{OVERLAP_TRIGGER_MESSAGE}');
                END
            """)

            tx.execute("""
                CREATE TABLE IF NOT EXISTS invoices (
                    invoice_id TEXT PRIMARY KEY,
                    job_id TEXT NOT NULL UNIQUE,
                    invoice_number TEXT NOT NULL UNIQUE,
                    items TEXT NOT NULL,
                    sub_total TEXT NOT NULL,
                    tax TEXT NOT NULL,
                    total TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (job_id) REFERENCES jobs(job_id)
                )
            """)

            tx.execute("""
                CREATE TABLE IF NOT EXISTS payments (
                    payment_id TEXT PRIMARY KEY,
                    invoice_id TEXT NOT NULL UNIQUE,
                    amount TEXT NOT NULL,
                    method TEXT NOT NULL CHECK (method IN ('card', 'bank', 'cash')),
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (invoice_id) REFERENCES invoices(invoice_id)
                )
            """)

    # =========================================================================
    # Customer Operations
    # =========================================================================

    def insert_customer(self, tx: TransactionContext, customer: Customer) -> Customer:
        try:
            tx.execute(
                """
                INSERT INTO customers
                (customer_id, name, email, phone, address, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    customer.customer_id,
                    customer.name,
                    customer.email,
                    customer.phone,
                    customer.address,
                    customer.created_at,
                    customer.updated_at,
                ),
            )
        except sqlite3.IntegrityError as e:
            message = str(e)
            fields = [f for f in ("email", "phone") if f"customers.{f}" in message]
            if not fields:
                raise
            raise DuplicateCustomerError(fields) from e
        return customer

    def get_customer(
        self, customer_id: str, tx: Optional[TransactionContext] = None
    ) -> Optional[Customer]:
        """Get a customer by ID."""
        with self._reader(tx) as db:
            row = db.execute(
                "SELECT * FROM customers WHERE customer_id = ?",
                (customer_id,),
            ).fetchone()

        if row is None:
            return None

        return self._row_to_customer(row)

    def find_customers_by_contact(
        self, email: str, phone: str, tx: Optional[TransactionContext] = None
    ) -> list[Customer]:
        """Customers sharing the given email or phone number."""
        with self._reader(tx) as db:
            rows = db.execute(
                "SELECT * FROM customers WHERE email = ? OR phone = ?",
                (email, phone),
            ).fetchall()

        return [self._row_to_customer(row) for row in rows]

    def list_customers(self, offset: int = 0, limit: int = 10) -> list[Customer]:
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM customers ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?",
                (limit, offset),
            ).fetchall()

        return [self._row_to_customer(row) for row in rows]

    def count_customers(self) -> int:
        with self._connection() as conn:
            row = conn.execute("SELECT COUNT(*) as count FROM customers").fetchone()
        return row["count"]

    def _row_to_customer(self, row: sqlite3.Row) -> Customer:
        return Customer(
            customer_id=row["customer_id"],
            name=row["name"],
            email=row["email"],
            phone=row["phone"],
            address=row["address"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    # =========================================================================
    # Technician Operations
    # =========================================================================

    def insert_technician(self, tx: TransactionContext, technician: Technician) -> Technician:
        try:
            tx.execute(
                """
                INSERT INTO technicians
                (technician_id, name, email, phone, role, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    technician.technician_id,
                    technician.name,
                    technician.email,
                    technician.phone,
                    technician.role,
                    technician.created_at,
                    technician.updated_at,
                ),
            )
        except sqlite3.IntegrityError as e:
            if "technicians.email" not in str(e):
                raise
            raise DuplicateTechnicianError(technician.email) from e
        return technician

    def get_technician(
        self, technician_id: str, tx: Optional[TransactionContext] = None
    ) -> Optional[Technician]:
        """Get a technician by ID."""
        with self._reader(tx) as db:
            row = db.execute(
                "SELECT * FROM technicians WHERE technician_id = ?",
                (technician_id,),
            ).fetchone()

        if row is None:
            return None

        return self._row_to_technician(row)

    def find_technician_by_email(
        self, email: str, tx: Optional[TransactionContext] = None
    ) -> Optional[Technician]:
        with self._reader(tx) as db:
            row = db.execute(
                "SELECT * FROM technicians WHERE email = ?",
                (email,),
            ).fetchone()

        return self._row_to_technician(row) if row is not None else None

    def list_technicians(self, offset: int = 0, limit: int = 10) -> list[Technician]:
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM technicians ORDER BY created_at ASC, rowid ASC LIMIT ? OFFSET ?",
                (limit, offset),
            ).fetchall()

        return [self._row_to_technician(row) for row in rows]

    def count_technicians(self) -> int:
        with self._connection() as conn:
            row = conn.execute("SELECT COUNT(*) as count FROM technicians").fetchone()
        return row["count"]

    def _row_to_technician(self, row: sqlite3.Row) -> Technician:
        return Technician(
            technician_id=row["technician_id"],
            name=row["name"],
            email=row["email"],
            phone=row["phone"],
            role=row["role"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    # =========================================================================
    # Job Operations
    # =========================================================================

    def insert_job(self, tx: TransactionContext, job: Job) -> Job:
        """Insert a job; a (customer, title) collision surfaces as DuplicateJobError."""
        try:
            tx.execute(
                """
                INSERT INTO jobs
                (job_id, customer_id, title, description, status, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    job.job_id,
                    job.customer_id,
                    job.title,
                    job.description,
                    job.status.value,
                    job.created_at,
                    job.updated_at,
                ),
            )
        except sqlite3.IntegrityError as e:
            if "jobs.customer_id, jobs.title" not in str(e):
                raise
            raise DuplicateJobError(job.customer_id, job.title) from e
        return job

    def get_job(self, job_id: str, tx: Optional[TransactionContext] = None) -> Optional[Job]:
        """Get a job by ID."""
        with self._reader(tx) as db:
            row = db.execute(
                "SELECT * FROM jobs WHERE job_id = ?",
                (job_id,),
            ).fetchone()

        if row is None:
            return None

        return self._row_to_job(row)

    def find_job_by_title(
        self, customer_id: str, title: str, tx: Optional[TransactionContext] = None
    ) -> Optional[Job]:
        with self._reader(tx) as db:
            row = db.execute(
                "SELECT * FROM jobs WHERE customer_id = ? AND title = ?",
                (customer_id, title),
            ).fetchone()

        return self._row_to_job(row) if row is not None else None

    def _row_to_job(self, row: sqlite3.Row) -> Job:
        """Convert a database row to a Job entity."""
        return Job(
            job_id=row["job_id"],
            customer_id=row["customer_id"],
            title=row["title"],
            description=row["description"],
            status=JobStatus(row["status"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def update_job_status(
        self,
        tx: TransactionContext,
        job_id: str,
        status: JobStatus,
        expected: JobStatus,
    ) -> Job:
        """
        Compare-and-set the job status inside ``tx``.

        Raises:
            JobNotFoundError: If job doesn't exist
            StaleJobStatusError: If job is no longer in ``expected``
        """
        cursor = tx.execute(
            """
            UPDATE jobs
            SET status = ?, updated_at = ?
            WHERE job_id = ? AND status = ?
            """,
            (status.value, now_iso(), job_id, expected.value),
        )

        if cursor.rowcount == 0:
            current = self.get_job(job_id, tx)
            if current is None:
                raise JobNotFoundError(job_id)
            raise StaleJobStatusError(job_id, expected.value, current.status.value)

        return self.get_job(job_id, tx)

    def list_jobs(
        self,
        status: Optional[JobStatus] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> list[Job]:
        """List jobs newest first, optionally filtered by status."""
        with self._connection() as conn:
            if status is not None:
                rows = conn.execute(
                    """
                    SELECT * FROM jobs WHERE status = ?
                    ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?
                    """,
                    (status.value, limit, offset),
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM jobs ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?",
                    (limit, offset),
                ).fetchall()

        return [self._row_to_job(row) for row in rows]

    def count_jobs(self, status: Optional[JobStatus] = None) -> int:
        with self._connection() as conn:
            if status is not None:
                row = conn.execute(
                    "SELECT COUNT(*) as count FROM jobs WHERE status = ?",
                    (status.value,),
                ).fetchone()
            else:
                row = conn.execute("SELECT COUNT(*) as count FROM jobs").fetchone()
        return row["count"]

    # =========================================================================
    # Appointment Operations
    # =========================================================================

    def find_overlapping_appointment(
        self,
        tx: TransactionContext,
        technician_id: str,
        start_at: datetime,
        end_at: datetime,
    ) -> Optional[Appointment]:
        """First appointment of the technician with start < end_at and end > start_at."""
        row = tx.execute(
            """
            SELECT * FROM appointments
            WHERE technician_id = ? AND start_at < ? AND end_at > ?
            ORDER BY start_at ASC
            LIMIT 1
            """,
            (technician_id, format_ts(end_at), format_ts(start_at)),
        ).fetchone()

        return self._row_to_appointment(row) if row is not None else None

    def insert_appointment(self, tx: TransactionContext, appointment: Appointment) -> Appointment:
        """
        Insert an appointment inside ``tx``.

        The overlap trigger and CHECK constraint are classified into the same
        errors the application-level checks raise.
        """
        start = format_ts(appointment.start_at)
        end = format_ts(appointment.end_at)
        try:
            tx.execute(
                """
                INSERT INTO appointments
                (appointment_id, job_id, technician_id, start_at, end_at, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    appointment.appointment_id,
                    appointment.job_id,
                    appointment.technician_id,
                    start,
                    end,
                    appointment.created_at,
                ),
            )
        except sqlite3.IntegrityError as e:
            message = str(e)
            if OVERLAP_TRIGGER_MESSAGE in message:
                raise AppointmentOverlapError(appointment.technician_id, start, end) from e
            if "CHECK constraint failed" in message:
                raise InvalidTimeWindowError(start, end) from e
            raise
        return appointment

    def get_appointment_for_job(self, job_id: str) -> Optional[Appointment]:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM appointments WHERE job_id = ?",
                (job_id,),
            ).fetchone()

        return self._row_to_appointment(row) if row is not None else None

    def list_appointments_for_technician(self, technician_id: str) -> list[Appointment]:
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM appointments WHERE technician_id = ? ORDER BY start_at ASC",
                (technician_id,),
            ).fetchall()

        return [self._row_to_appointment(row) for row in rows]

    def _row_to_appointment(self, row: sqlite3.Row) -> Appointment:
        return Appointment(
            appointment_id=row["appointment_id"],
            job_id=row["job_id"],
            technician_id=row["technician_id"],
            start_at=parse_ts(row["start_at"]),
            end_at=parse_ts(row["end_at"]),
            created_at=row["created_at"],
        )

    # =========================================================================
    # Invoice Operations
    # =========================================================================

    def insert_invoice(self, tx: TransactionContext, invoice: Invoice) -> Invoice:
        try:
            tx.execute(
                """
                INSERT INTO invoices
                (invoice_id, job_id, invoice_number, items, sub_total, tax, total, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    invoice.invoice_id,
                    invoice.job_id,
                    invoice.invoice_number,
                    json.dumps([item.to_dict() for item in invoice.items]),
                    str(invoice.sub_total),
                    str(invoice.tax),
                    str(invoice.total),
                    invoice.created_at,
                ),
            )
        except sqlite3.IntegrityError as e:
            message = str(e)
            if "invoices.invoice_number" in message:
                raise DuplicateInvoiceNumberError(invoice.invoice_number) from e
            if "invoices.job_id" in message:
                raise DuplicateInvoiceError(invoice.job_id) from e
            raise
        return invoice

    def get_invoice(
        self, invoice_id: str, tx: Optional[TransactionContext] = None
    ) -> Optional[Invoice]:
        """Get an invoice by ID."""
        with self._reader(tx) as db:
            row = db.execute(
                "SELECT * FROM invoices WHERE invoice_id = ?",
                (invoice_id,),
            ).fetchone()

        if row is None:
            return None

        return self._row_to_invoice(row)

    def get_invoice_for_job(self, job_id: str) -> Optional[Invoice]:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM invoices WHERE job_id = ?",
                (job_id,),
            ).fetchone()

        return self._row_to_invoice(row) if row is not None else None

    def list_invoices(
        self,
        job_id: Optional[str] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> list[Invoice]:
        with self._connection() as conn:
            if job_id is not None:
                rows = conn.execute(
                    """
                    SELECT * FROM invoices WHERE job_id = ?
                    ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?
                    """,
                    (job_id, limit, offset),
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT * FROM invoices ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?",
                    (limit, offset),
                ).fetchall()

        return [self._row_to_invoice(row) for row in rows]

    def count_invoices(self, job_id: Optional[str] = None) -> int:
        with self._connection() as conn:
            if job_id is not None:
                row = conn.execute(
                    "SELECT COUNT(*) as count FROM invoices WHERE job_id = ?",
                    (job_id,),
                ).fetchone()
            else:
                row = conn.execute("SELECT COUNT(*) as count FROM invoices").fetchone()
        return row["count"]

    def _row_to_invoice(self, row: sqlite3.Row) -> Invoice:
        return Invoice(
            invoice_id=row["invoice_id"],
            job_id=row["job_id"],
            invoice_number=row["invoice_number"],
            items=[InvoiceItem.from_dict(item) for item in json.loads(row["items"])],
            sub_total=Decimal(row["sub_total"]),
            tax=Decimal(row["tax"]),
            total=Decimal(row["total"]),
            created_at=row["created_at"],
        )

    # =========================================================================
    # Payment Operations
    # =========================================================================

    def insert_payment(self, tx: TransactionContext, payment: Payment) -> Payment:
        try:
            tx.execute(
                """
                INSERT INTO payments
                (payment_id, invoice_id, amount, method, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    payment.payment_id,
                    payment.invoice_id,
                    str(payment.amount),
                    payment.method.value,
                    payment.created_at,
                ),
            )
        except sqlite3.IntegrityError as e:
            if "payments.invoice_id" not in str(e):
                raise
            raise DuplicatePaymentError(payment.invoice_id) from e
        return payment

    def get_payment(self, payment_id: str) -> Optional[Payment]:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM payments WHERE payment_id = ?",
                (payment_id,),
            ).fetchone()

        return self._row_to_payment(row) if row is not None else None

    def get_payment_for_invoice(self, invoice_id: str) -> Optional[Payment]:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM payments WHERE invoice_id = ?",
                (invoice_id,),
            ).fetchone()

        return self._row_to_payment(row) if row is not None else None

    def list_payments(self, offset: int = 0, limit: int = 10) -> list[Payment]:
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM payments ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?",
                (limit, offset),
            ).fetchall()

        return [self._row_to_payment(row) for row in rows]

    def count_payments(self) -> int:
        with self._connection() as conn:
            row = conn.execute("SELECT COUNT(*) as count FROM payments").fetchone()
        return row["count"]

    def _row_to_payment(self, row: sqlite3.Row) -> Payment:
        return Payment(
            payment_id=row["payment_id"],
            invoice_id=row["invoice_id"],
            amount=Decimal(row["amount"]),
            method=PaymentMethod(row["method"]),
            created_at=row["created_at"],
        )
