"""
Job lifecycle transitions.

Pure functions over Job snapshots. Each operation reads the clock once
and reuses that instant for every timestamp it writes, so
execution_time always equals finished_at - started_at.

Valid transitions:
- PENDING -> RUNNING      (start_job)
- RUNNING -> COMPLETED    (complete_job)
- RUNNING -> FAILED       (fail_job)
- PENDING -> CANCELLED    (cancel_job)
"""

import dataclasses
from typing import Any, Optional

from .entities import (
    CANCELLED_CODE,
    CANCELLED_MESSAGE,
    ErrorResult,
    Job,
    JobResult,
    JobStatus,
    now_ms,
)
from .errors import InvalidTransitionError


def _require_status(job: Job, expected: JobStatus, operation: str) -> None:
    if job.status != expected:
        raise InvalidTransitionError(job.id, job.status.value, operation)


def create_job(
    job_type: str,
    payload: Any,
    config: Any = None,
    now: Optional[int] = None,
) -> Job:
    """Create a new PENDING job. See Job.create."""
    return Job.create(job_type, payload, config=config, now=now)


def start_job(job: Job, now: Optional[int] = None) -> Job:
    """
    Transition a job to RUNNING.

    Raises:
        InvalidTransitionError: If job is not PENDING
    """
    _require_status(job, JobStatus.PENDING, "start")
    now = now_ms() if now is None else now
    return dataclasses.replace(job, status=JobStatus.RUNNING, started_at=now)


def _finish(job: Job, status: JobStatus, result: JobResult, now: Optional[int]) -> Job:
    now = now_ms() if now is None else now
    started_at = job.started_at if job.started_at is not None else now
    return dataclasses.replace(
        job,
        status=status,
        result=result,
        finished_at=now,
        execution_time=now - started_at,
    )


def complete_job(job: Job, result: JobResult, now: Optional[int] = None) -> Job:
    """
    Transition a RUNNING job to COMPLETED with its result.

    Raises:
        InvalidTransitionError: If job is not RUNNING
    """
    _require_status(job, JobStatus.RUNNING, "complete")
    return _finish(job, JobStatus.COMPLETED, result, now)


def fail_job(job: Job, result: JobResult, now: Optional[int] = None) -> Job:
    """
    Transition a RUNNING job to FAILED with an error result.

    Raises:
        InvalidTransitionError: If job is not RUNNING
    """
    _require_status(job, JobStatus.RUNNING, "fail")
    return _finish(job, JobStatus.FAILED, result, now)


def cancel_job(job: Job, now: Optional[int] = None) -> Job:
    """
    Transition a PENDING job to CANCELLED.

    RUNNING jobs cannot be cancelled; they run to completion.

    Raises:
        InvalidTransitionError: If job is not PENDING
    """
    _require_status(job, JobStatus.PENDING, "cancel")
    now = now_ms() if now is None else now
    return dataclasses.replace(
        job,
        status=JobStatus.CANCELLED,
        result=ErrorResult(CANCELLED_MESSAGE, CANCELLED_CODE),
        finished_at=now,
    )


def is_eligible(job: Job, now: Optional[int] = None) -> bool:
    """Check if the job's delay has elapsed. Does not look at status."""
    now = now_ms() if now is None else now
    return now >= job.eligible_at


def is_terminal(job: Job) -> bool:
    """Check if a job is COMPLETED, FAILED or CANCELLED."""
    return job.status.is_terminal
