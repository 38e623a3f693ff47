"""
Lifecycle domain entities.

- Job: unit of work driven through the status state machine
- Appointment: technician booking that moves a job NEW -> SCHEDULED
- Invoice / InvoiceItem: billing record that moves a job DONE -> INVOICED
- Payment: settlement record that moves a job INVOICED -> PAID
- Customer / Technician: directory records referenced by jobs and appointments

Timestamps are UTC and serialized as fixed-width ISO strings so that
lexical order equals chronological order inside SQLite.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
import uuid

from .errors import UnknownPaymentMethodError, UnknownStatusError


ISO_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


class JobStatus(str, Enum):
    """
    Job lifecycle states.

    NEW -> SCHEDULED -> IN_PROGRESS -> DONE -> INVOICED -> PAID
    """

    NEW = "new"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    INVOICED = "invoiced"
    PAID = "paid"

    @classmethod
    def parse(cls, value: "str | JobStatus") -> "JobStatus":
        """Accept a value or member name in any case; raise UnknownStatusError otherwise."""
        if isinstance(value, JobStatus):
            return value
        text = str(value).strip().lower()
        for status in cls:
            if text in (status.value, status.name.lower()):
                return status
        raise UnknownStatusError(str(value))


# Full lifecycle graph. Each state has at most one successor.
TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.NEW: frozenset({JobStatus.SCHEDULED}),
    JobStatus.SCHEDULED: frozenset({JobStatus.IN_PROGRESS}),
    JobStatus.IN_PROGRESS: frozenset({JobStatus.DONE}),
    JobStatus.DONE: frozenset({JobStatus.INVOICED}),
    JobStatus.INVOICED: frozenset({JobStatus.PAID}),
    JobStatus.PAID: frozenset(),
}

# Edges reachable through a direct status edit. The remaining edges are
# side effects of the scheduling, invoicing and payment sagas.
DIRECT_TRANSITIONS: frozenset[tuple[JobStatus, JobStatus]] = frozenset({
    (JobStatus.SCHEDULED, JobStatus.IN_PROGRESS),
    (JobStatus.IN_PROGRESS, JobStatus.DONE),
})


def allowed_next(current: JobStatus) -> frozenset[JobStatus]:
    """States reachable from ``current`` by any operation."""
    return TRANSITIONS[current]


def allowed_direct_next(current: JobStatus) -> frozenset[JobStatus]:
    """States reachable from ``current`` through ``update_status``."""
    return frozenset(
        target for target in allowed_next(current)
        if (current, target) in DIRECT_TRANSITIONS
    )


class PaymentMethod(str, Enum):
    CARD = "card"
    BANK = "bank"
    CASH = "cash"

    @classmethod
    def parse(cls, value: "str | PaymentMethod") -> "PaymentMethod":
        if isinstance(value, PaymentMethod):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnknownPaymentMethodError(str(value), [m.value for m in cls]) from None


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def is_valid_id(value: str) -> bool:
    """Check that ``value`` is a canonical UUID string."""
    try:
        return str(uuid.UUID(str(value))) == str(value).lower()
    except ValueError:
        return False


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Normalize to an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_ts(value: datetime) -> str:
    return to_utc(value).strftime(ISO_FORMAT)


def parse_ts(value: str) -> datetime:
    return datetime.strptime(value, ISO_FORMAT).replace(tzinfo=timezone.utc)


def now_iso() -> str:
    """Get current time as ISO format string."""
    return format_ts(utc_now())


@dataclass
class Customer:
    customer_id: str
    name: str
    email: str
    phone: str
    address: str
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    @classmethod
    def create(cls, name: str, email: str, phone: str, address: str) -> "Customer":
        return cls(
            customer_id=generate_uuid(),
            name=name,
            email=email.strip().lower(),
            phone=phone.strip(),
            address=address,
        )


@dataclass
class Technician:
    technician_id: str
    name: str
    email: str
    phone: str
    role: str = "technician"
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    @classmethod
    def create(cls, name: str, email: str, phone: str, role: str = "technician") -> "Technician":
        return cls(
            technician_id=generate_uuid(),
            name=name,
            email=email.strip().lower(),
            phone=phone.strip(),
            role=role,
        )


@dataclass
class Job:
    """
    Unit of work tracked through the lifecycle.

    Mutability rules:
    - job_id, customer_id, title, description, created_at: Immutable
    - status: Changes only along TRANSITIONS
    - updated_at: Refreshed on every status change
    """

    job_id: str
    customer_id: str
    title: str
    description: str
    status: JobStatus = JobStatus.NEW
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    @classmethod
    def create(cls, customer_id: str, title: str, description: str) -> "Job":
        """Create a new Job with generated ID and NEW status."""
        now = now_iso()
        return cls(
            job_id=generate_uuid(),
            customer_id=customer_id,
            title=title,
            description=description,
            status=JobStatus.NEW,
            created_at=now,
            updated_at=now,
        )

    def is_terminal(self) -> bool:
        return not allowed_next(self.status)


@dataclass
class Appointment:
    """Technician booking over the half-open interval [start_at, end_at)."""

    appointment_id: str
    job_id: str
    technician_id: str
    start_at: datetime
    end_at: datetime
    created_at: str = field(default_factory=now_iso)

    @classmethod
    def create(
        cls,
        job_id: str,
        technician_id: str,
        start_at: datetime,
        end_at: datetime,
    ) -> "Appointment":
        return cls(
            appointment_id=generate_uuid(),
            job_id=job_id,
            technician_id=technician_id,
            start_at=to_utc(start_at),
            end_at=to_utc(end_at),
        )


@dataclass(frozen=True)
class InvoiceItem:
    description: str
    price: Decimal
    quantity: int = 1

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def to_dict(self) -> dict:
        return {
            "description": self.description,
            "price": str(self.price),
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "InvoiceItem":
        return cls(
            description=data["description"],
            price=Decimal(str(data["price"])),
            quantity=int(data.get("quantity", 1)),
        )


@dataclass
class Invoice:
    invoice_id: str
    job_id: str
    invoice_number: str
    items: list[InvoiceItem]
    sub_total: Decimal
    tax: Decimal
    total: Decimal
    created_at: str = field(default_factory=now_iso)


@dataclass
class Payment:
    payment_id: str
    invoice_id: str
    amount: Decimal
    method: PaymentMethod
    created_at: str = field(default_factory=now_iso)

    @classmethod
    def create(cls, invoice_id: str, amount: Decimal, method: PaymentMethod) -> "Payment":
        return cls(
            payment_id=generate_uuid(),
            invoice_id=invoice_id,
            amount=amount,
            method=method,
        )


@dataclass
class Page:
    """One page of a listing: ``{items, total, page, limit}``."""

    items: list
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0


def page_offset(page: int, limit: int) -> int:
    return (max(page, 1) - 1) * limit
