"""
Appointment Scheduling Tests.

- NEW -> SCHEDULED saga (scenario A, B)
- Overlap detection on half-open windows
- Precondition ordering and rollback on failure
"""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from jobflow.lifecycle import (
    AppointmentOverlapError,
    AppointmentScheduler,
    InvalidTimeWindowError,
    JobLifecycleManager,
    JobNotFoundError,
    JobStateError,
    JobStatus,
    PersistenceAdapter,
    StorageError,
    TechnicianNotFoundError,
)
from jobflow.lifecycle.errors import ErrorKind

from .conftest import assert_job_status, count_rows, window


class TestScheduleAppointment:
    def test_scenario_a_schedules_new_job(
        self,
        manager: JobLifecycleManager,
        persistence: PersistenceAdapter,
        create_customer,
        create_technician,
    ):
        """Scenario A: AC repair job created NEW, booked 09:00-11:00, now SCHEDULED."""
        customer = create_customer()
        technician = create_technician()
        job = manager.create_job(customer.customer_id, "AC repair", "Unit not cooling")
        start, end = window(9)

        appointment = manager.schedule_appointment(
            job.job_id, technician.technician_id, start, end
        )

        assert appointment.job_id == job.job_id
        assert appointment.technician_id == technician.technician_id
        assert appointment.start_at == start
        assert appointment.end_at == end
        assert_job_status(persistence, job.job_id, JobStatus.SCHEDULED)
        assert persistence.get_appointment_for_job(job.job_id).appointment_id == (
            appointment.appointment_id
        )

    def test_scenario_b_overlap_rejected(
        self,
        manager: JobLifecycleManager,
        persistence: PersistenceAdapter,
        create_job,
        create_technician,
    ):
        """Scenario B: 09:00-11:00 booked; 10:00-12:00 for the same technician conflicts."""
        technician = create_technician()
        first = create_job()
        second = create_job()
        manager.schedule_appointment(first.job_id, technician.technician_id, *window(9))

        with pytest.raises(AppointmentOverlapError) as exc_info:
            manager.schedule_appointment(
                second.job_id, technician.technician_id, *window(10)
            )

        error = exc_info.value
        assert error.kind == ErrorKind.CONFLICT
        assert error.existing_start == "2025-10-15T09:00:00.000000Z"
        assert error.existing_end == "2025-10-15T11:00:00.000000Z"
        assert "2025-10-15T10:00:00.000000Z" in error.message
        assert_job_status(persistence, second.job_id, JobStatus.NEW)
        assert count_rows(persistence, "appointments") == 1

    def test_back_to_back_windows_do_not_overlap(
        self, manager: JobLifecycleManager, create_job, create_technician
    ):
        """Windows are half-open: 09:00-11:00 and 11:00-13:00 can share a technician."""
        technician = create_technician()
        first = create_job()
        second = create_job()

        manager.schedule_appointment(first.job_id, technician.technician_id, *window(9))
        appointment = manager.schedule_appointment(
            second.job_id, technician.technician_id, *window(11)
        )

        assert appointment.start_at == window(11)[0]

    def test_enclosing_window_overlaps(
        self, manager: JobLifecycleManager, create_job, create_technician
    ):
        technician = create_technician()
        first = create_job()
        second = create_job()
        manager.schedule_appointment(first.job_id, technician.technician_id, *window(10, 1))

        with pytest.raises(AppointmentOverlapError):
            manager.schedule_appointment(
                second.job_id, technician.technician_id, *window(9, 4)
            )

    def test_other_technician_same_window_allowed(
        self, manager: JobLifecycleManager, create_job, create_technician
    ):
        first = create_job()
        second = create_job()

        manager.schedule_appointment(first.job_id, create_technician().technician_id, *window(9))
        manager.schedule_appointment(second.job_id, create_technician().technician_id, *window(9))

    def test_non_utc_times_normalized(
        self, manager: JobLifecycleManager, create_job, create_technician
    ):
        technician = create_technician()
        first = create_job()
        second = create_job()
        manager.schedule_appointment(first.job_id, technician.technician_id, *window(9))

        lagos = timezone(timedelta(hours=1))
        start = datetime(2025, 10, 15, 11, 30, tzinfo=lagos)  # 10:30 UTC

        with pytest.raises(AppointmentOverlapError):
            manager.schedule_appointment(
                second.job_id, technician.technician_id, start, start + timedelta(hours=1)
            )


class TestSchedulePreconditions:
    def test_end_before_start_rejected_before_io(
        self, manager: JobLifecycleManager, persistence: PersistenceAdapter
    ):
        start, end = window(9)

        with patch.object(persistence, "transaction") as mock_tx:
            with pytest.raises(InvalidTimeWindowError) as exc_info:
                manager.schedule_appointment(str(uuid.uuid4()), str(uuid.uuid4()), end, start)

        assert exc_info.value.kind == ErrorKind.BAD_REQUEST
        mock_tx.assert_not_called()

    def test_zero_length_window_rejected(self, manager: JobLifecycleManager):
        start, _ = window(9)
        with pytest.raises(InvalidTimeWindowError):
            manager.schedule_appointment(str(uuid.uuid4()), str(uuid.uuid4()), start, start)

    def test_window_beyond_datetime_range_rejected(
        self, manager: JobLifecycleManager, persistence: PersistenceAdapter
    ):
        offset = timezone(timedelta(hours=-2))
        start = datetime(9999, 12, 31, 21, 0, tzinfo=offset)
        end = datetime(9999, 12, 31, 23, 0, tzinfo=offset)

        with patch.object(persistence, "transaction") as mock_tx:
            with pytest.raises(InvalidTimeWindowError) as exc_info:
                manager.schedule_appointment(str(uuid.uuid4()), str(uuid.uuid4()), start, end)

        assert exc_info.value.kind == ErrorKind.BAD_REQUEST
        mock_tx.assert_not_called()

    def test_missing_technician(self, manager: JobLifecycleManager, create_job):
        job = create_job()
        with pytest.raises(TechnicianNotFoundError):
            manager.schedule_appointment(job.job_id, str(uuid.uuid4()), *window(9))

    def test_missing_job(self, manager: JobLifecycleManager, create_technician):
        with pytest.raises(JobNotFoundError):
            manager.schedule_appointment(
                str(uuid.uuid4()), create_technician().technician_id, *window(9)
            )

    @pytest.mark.parametrize("status", [JobStatus.SCHEDULED, JobStatus.IN_PROGRESS, JobStatus.DONE])
    def test_job_not_new_rejected(
        self, manager: JobLifecycleManager, create_job, create_technician, status
    ):
        job = create_job(status=status)

        with pytest.raises(JobStateError) as exc_info:
            manager.schedule_appointment(
                job.job_id, create_technician().technician_id, *window(14)
            )

        assert exc_info.value.kind == ErrorKind.BAD_REQUEST
        assert exc_info.value.actual == status.value


class TestScheduleRollback:
    def test_insert_failure_undoes_status_write(
        self,
        manager: JobLifecycleManager,
        persistence: PersistenceAdapter,
        create_job,
        create_technician,
    ):
        """A failure after the status write leaves the job NEW with no appointment."""
        job = create_job()
        technician = create_technician()

        with patch.object(
            persistence, "insert_appointment", side_effect=StorageError("disk full")
        ):
            with pytest.raises(StorageError):
                manager.schedule_appointment(job.job_id, technician.technician_id, *window(9))

        assert_job_status(persistence, job.job_id, JobStatus.NEW)
        assert count_rows(persistence, "appointments") == 0

    def test_scheduler_participates_in_caller_transaction(
        self,
        scheduler: AppointmentScheduler,
        persistence: PersistenceAdapter,
        create_job,
        create_technician,
    ):
        job = create_job()
        technician = create_technician()

        with pytest.raises(RuntimeError):
            with persistence.transaction("outer") as tx:
                scheduler.schedule_appointment(
                    job.job_id, technician.technician_id, *window(9), tx=tx
                )
                raise RuntimeError("caller aborts")

        assert_job_status(persistence, job.job_id, JobStatus.NEW)
        assert count_rows(persistence, "appointments") == 0

    def test_scheduler_opens_own_transaction(
        self,
        scheduler: AppointmentScheduler,
        persistence: PersistenceAdapter,
        create_job,
        create_technician,
    ):
        job = create_job()

        scheduler.schedule_appointment(job.job_id, create_technician().technician_id, *window(9))

        assert_job_status(persistence, job.job_id, JobStatus.SCHEDULED)
