"""
Appointment Scheduler.

Books a technician for a NEW job and moves the job to SCHEDULED, as one unit
of work:
1. end <= start is rejected before any I/O
2. technician must exist
3. job must exist and be NEW (read inside the transaction)
4. no appointment of the technician may overlap [start, end)
5. job.status = SCHEDULED
6. appointment row inserted

Any failure aborts the transaction, undoing the status write, and the original
error propagates unchanged.
"""

import logging
from datetime import datetime
from typing import Optional

from .entities import Appointment, JobStatus, format_ts, to_utc
from .errors import (
    AppointmentOverlapError,
    InvalidTimeWindowError,
    JobNotFoundError,
    JobStateError,
    TechnicianNotFoundError,
)
from .persistence import PersistenceAdapter, TransactionContext


logger = logging.getLogger(__name__)


def validate_window(start_at: datetime, end_at: datetime) -> tuple[datetime, datetime]:
    """Normalize to UTC and require end > start."""
    try:
        start_at = to_utc(start_at)
        end_at = to_utc(end_at)
    except OverflowError as e:
        # Offset pushes the instant past the datetime range
        raise InvalidTimeWindowError(start_at.isoformat(), end_at.isoformat()) from e
    if end_at <= start_at:
        raise InvalidTimeWindowError(format_ts(start_at), format_ts(end_at))
    return start_at, end_at


class AppointmentScheduler:
    """
    Validates a proposed appointment and performs the NEW -> SCHEDULED write.

    Participates in a caller-owned transaction when one is passed; opens its
    own otherwise.
    """

    def __init__(self, persistence: PersistenceAdapter):
        self.persistence = persistence

    def schedule_appointment(
        self,
        job_id: str,
        technician_id: str,
        start_at: datetime,
        end_at: datetime,
        tx: Optional[TransactionContext] = None,
    ) -> Appointment:
        start_at, end_at = validate_window(start_at, end_at)

        if tx is None:
            with self.persistence.transaction("schedule_appointment") as own_tx:
                return self._schedule(own_tx, job_id, technician_id, start_at, end_at)
        return self._schedule(tx, job_id, technician_id, start_at, end_at)

    def _schedule(
        self,
        tx: TransactionContext,
        job_id: str,
        technician_id: str,
        start_at: datetime,
        end_at: datetime,
    ) -> Appointment:
        technician = self.persistence.get_technician(technician_id, tx)
        if technician is None:
            raise TechnicianNotFoundError(technician_id)

        job = self.persistence.get_job(job_id, tx)
        if job is None:
            raise JobNotFoundError(job_id)

        if job.status != JobStatus.NEW:
            raise JobStateError(
                job_id,
                expected=JobStatus.NEW.value,
                actual=job.status.value,
                action="schedule appointment",
            )

        existing = self.persistence.find_overlapping_appointment(
            tx, technician_id, start_at, end_at
        )
        if existing is not None:
            raise AppointmentOverlapError(
                technician_id,
                format_ts(start_at),
                format_ts(end_at),
                existing_start=format_ts(existing.start_at),
                existing_end=format_ts(existing.end_at),
            )

        self.persistence.update_job_status(
            tx, job_id, JobStatus.SCHEDULED, expected=JobStatus.NEW
        )

        appointment = Appointment.create(
            job_id=job_id,
            technician_id=technician_id,
            start_at=start_at,
            end_at=end_at,
        )
        self.persistence.insert_appointment(tx, appointment)

        logger.info(
            f"[AppointmentScheduler] Job {job_id} scheduled with technician "
            f"{technician_id}: {format_ts(start_at)} - {format_ts(end_at)}"
        )
        return appointment
