"""
Lifecycle Test Fixtures.

Base fixtures:
  - Empty database per test
  - Mocked millisecond clock and seeded random source for invoice numbers

Per-test fixtures:
  - Customer and technician factories
  - Job factory that drives a job to any lifecycle state through the real sagas
"""

import itertools
import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from typing import Callable, Generator

import pytest

from jobflow.lifecycle import (
    AppointmentScheduler,
    Customer,
    CustomerDirectory,
    InvoiceGenerator,
    InvoiceItem,
    Job,
    JobLifecycleManager,
    JobStatus,
    LifecycleService,
    PaymentProcessor,
    PersistenceAdapter,
    Technician,
    TechnicianDirectory,
)


# Fixed time for deterministic tests
FIXED_DATETIME = datetime(2026, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
FIXED_MS = int(FIXED_DATETIME.timestamp() * 1000)

# Scenario C line items: subtotal 5000, total 5500 at 10% tax
SCENARIO_ITEMS = [
    InvoiceItem(description="Oil change", price=Decimal("2000"), quantity=1),
    InvoiceItem(description="Filter replacement", price=Decimal("1500"), quantity=2),
]
SCENARIO_TAX = Decimal("10")


class MockClock:
    """
    Mock clock for deterministic time control.

    - Starts at fixed epoch
    - Advances only when explicitly ticked
    """

    def __init__(self, start_time: datetime = FIXED_DATETIME):
        self._current = start_time

    def now(self) -> datetime:
        return self._current

    def now_ms(self) -> int:
        return int(self._current.timestamp() * 1000)

    def tick(self, seconds: float = 1) -> None:
        """Advance time by specified seconds."""
        self._current += timedelta(seconds=seconds)

    def set(self, time: datetime) -> None:
        """Set time to specific value."""
        self._current = time


def window(hour: int, duration_hours: int = 2, day: int = 15) -> tuple[datetime, datetime]:
    """[start, end) on 2025-10-<day> in UTC."""
    start = datetime(2025, 10, day, hour, 0, 0, tzinfo=timezone.utc)
    return start, start + timedelta(hours=duration_hours)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Generator[str, None, None]:
    """Temporary database file (WAL and SHM files live beside it)."""
    yield str(tmp_path / "jobflow_test.db")


@pytest.fixture
def persistence(temp_db_path: str) -> PersistenceAdapter:
    """Create a fresh PersistenceAdapter with empty database."""
    return PersistenceAdapter(temp_db_path)


# =============================================================================
# Component Fixtures
# =============================================================================


@pytest.fixture
def mock_clock() -> MockClock:
    return MockClock()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def scheduler(persistence: PersistenceAdapter) -> AppointmentScheduler:
    return AppointmentScheduler(persistence)


@pytest.fixture
def invoice_generator(
    persistence: PersistenceAdapter, mock_clock: MockClock, rng: random.Random
) -> InvoiceGenerator:
    return InvoiceGenerator(persistence, clock_ms=mock_clock.now_ms, rng=rng)


@pytest.fixture
def manager(
    persistence: PersistenceAdapter,
    scheduler: AppointmentScheduler,
    invoice_generator: InvoiceGenerator,
) -> JobLifecycleManager:
    return JobLifecycleManager(persistence, scheduler, invoice_generator)


@pytest.fixture
def payments(persistence: PersistenceAdapter) -> PaymentProcessor:
    return PaymentProcessor(persistence)


@pytest.fixture
def customers(persistence: PersistenceAdapter) -> CustomerDirectory:
    return CustomerDirectory(persistence)


@pytest.fixture
def technicians(persistence: PersistenceAdapter) -> TechnicianDirectory:
    return TechnicianDirectory(persistence)


@pytest.fixture
def service(temp_db_path: str, mock_clock: MockClock, rng: random.Random) -> LifecycleService:
    return LifecycleService.create(temp_db_path, clock_ms=mock_clock.now_ms, rng=rng)


# =============================================================================
# Factory Fixtures
# =============================================================================


@pytest.fixture
def create_customer(customers: CustomerDirectory) -> Callable[..., Customer]:
    """Factory fixture for customers with unique email and phone."""
    counter = itertools.count(1)

    def _create(name: str = "Ada Customer", email: str = None, phone: str = None) -> Customer:
        n = next(counter)
        return customers.create(
            name=name,
            email=email or f"customer{n}@example.com",
            phone=phone or f"0800000{n:04d}",
            address=f"{n} Palm Street, Lagos",
        )

    return _create


@pytest.fixture
def create_technician(technicians: TechnicianDirectory) -> Callable[..., Technician]:
    counter = itertools.count(1)

    def _create(name: str = "Tom Technician", email: str = None) -> Technician:
        n = next(counter)
        return technicians.create(
            name=name,
            email=email or f"tech{n}@example.com",
            phone=f"0900000{n:04d}",
        )

    return _create


@pytest.fixture
def create_job(
    manager: JobLifecycleManager,
    create_customer: Callable,
    create_technician: Callable,
) -> Callable[..., Job]:
    """
    Factory fixture for jobs in any lifecycle state.

    Jobs past NEW are advanced through the real operations: each scheduled
    job gets its own technician so windows never collide, and invoiced jobs
    carry the scenario items.
    """
    counter = itertools.count(1)

    def _create(
        status: JobStatus = JobStatus.NEW,
        title: str = None,
        customer_id: str = None,
    ) -> Job:
        n = next(counter)
        if customer_id is None:
            customer_id = create_customer().customer_id
        job = manager.create_job(
            customer_id=customer_id,
            title=title or f"Job {n}",
            description=f"Test job {n}",
        )

        path = [
            JobStatus.SCHEDULED,
            JobStatus.IN_PROGRESS,
            JobStatus.DONE,
            JobStatus.INVOICED,
        ]
        for step in path:
            if job.status == status:
                break
            if step == JobStatus.SCHEDULED:
                start, end = window(9)
                manager.schedule_appointment(
                    job.job_id, create_technician().technician_id, start, end
                )
            elif step == JobStatus.INVOICED:
                manager.create_invoice(job.job_id, SCENARIO_ITEMS, SCENARIO_TAX)
            else:
                manager.update_status(job.job_id, step)
            job = manager.find_one(job.job_id)

        assert job.status == status, f"factory cannot produce {status}"
        return job

    return _create


# =============================================================================
# Assertion Helpers
# =============================================================================


def assert_job_status(persistence: PersistenceAdapter, job_id: str, expected: JobStatus):
    """Assert a job has the expected status."""
    job = persistence.get_job(job_id)
    assert job is not None, f"Job {job_id} not found"
    assert job.status == expected, f"Expected {expected}, got {job.status}"


def count_rows(persistence: PersistenceAdapter, table: str) -> int:
    with persistence._connection() as conn:
        return conn.execute(f"SELECT COUNT(*) AS count FROM {table}").fetchone()["count"]
