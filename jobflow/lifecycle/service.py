"""
Lifecycle Service - wires the job lifecycle components.

- PersistenceAdapter (storage, transactions)
- CustomerDirectory / TechnicianDirectory (directory records)
- AppointmentScheduler (NEW -> SCHEDULED)
- InvoiceGenerator (invoice totals and numbers)
- JobLifecycleManager (state machine, scheduling and invoicing sagas)
- PaymentProcessor (INVOICED -> PAID)

Usage:
    service = LifecycleService.create(db_path)
    job = service.jobs.create_job(customer_id, "AC repair", "Unit not cooling")
"""

import logging
import random
from pathlib import Path
from typing import Callable, Optional

from .appointments import AppointmentScheduler
from .directory import CustomerDirectory, TechnicianDirectory
from .invoicing import InvoiceGenerator
from .manager import JobLifecycleManager
from .payments import PaymentProcessor
from .persistence import DEFAULT_BUSY_TIMEOUT, PersistenceAdapter


logger = logging.getLogger(__name__)


class LifecycleService:
    """Holds one instance of every lifecycle component over a shared database."""

    def __init__(
        self,
        persistence: PersistenceAdapter,
        customers: CustomerDirectory,
        technicians: TechnicianDirectory,
        scheduler: AppointmentScheduler,
        invoice_generator: InvoiceGenerator,
        jobs: JobLifecycleManager,
        payments: PaymentProcessor,
    ):
        """
        Initialize LifecycleService with all components.

        Use LifecycleService.create() for convenient construction.
        """
        self.persistence = persistence
        self.customers = customers
        self.technicians = technicians
        self.scheduler = scheduler
        self.invoice_generator = invoice_generator
        self.jobs = jobs
        self.payments = payments

    @classmethod
    def create(
        cls,
        db_path: str | Path,
        busy_timeout: float = DEFAULT_BUSY_TIMEOUT,
        clock_ms: Optional[Callable[[], int]] = None,
        rng: Optional[random.Random] = None,
    ) -> "LifecycleService":
        """
        Create a LifecycleService with all components wired together.

        Args:
            db_path: Path to SQLite database
            busy_timeout: Seconds a transaction waits for the write lock
            clock_ms: Millisecond clock for invoice numbers
            rng: Random source for invoice number suffixes

        Returns:
            Configured LifecycleService
        """
        persistence = PersistenceAdapter(db_path, busy_timeout=busy_timeout)

        scheduler = AppointmentScheduler(persistence)
        invoice_generator = InvoiceGenerator(persistence, clock_ms=clock_ms, rng=rng)
        jobs = JobLifecycleManager(
            persistence=persistence,
            scheduler=scheduler,
            invoice_generator=invoice_generator,
        )

        logger.info(f"[LifecycleService] Initialized with database {persistence.db_path}")

        return cls(
            persistence=persistence,
            customers=CustomerDirectory(persistence),
            technicians=TechnicianDirectory(persistence),
            scheduler=scheduler,
            invoice_generator=invoice_generator,
            jobs=jobs,
            payments=PaymentProcessor(persistence),
        )
