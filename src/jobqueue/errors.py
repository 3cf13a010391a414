"""
Job queue exceptions.

Raised synchronously to the immediate caller (submission, cancel,
explicit processing). The dispatch loop catches them at its tick boundary.
"""

from typing import Optional


class JobQueueError(Exception):
    """Base exception for all job queue errors."""
    pass


class ValidationError(JobQueueError):
    """
    Raised when submission input is invalid.

    Examples:
    - Missing, non-mapping or empty payload
    - Negative or non-numeric delay
    - Empty job type
    """
    pass


class JobNotFoundError(JobQueueError):
    """Raised when a requested job does not exist."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job with id {job_id} not found")


class DuplicateJobError(JobQueueError):
    """Raised when inserting a job whose id is already stored."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job with id {job_id} already exists")


class InvalidTransitionError(JobQueueError):
    """
    Raised when a lifecycle operation is attempted from a status
    that does not permit it.

    The message always names the current status.
    """

    def __init__(self, job_id: str, current_status: str, operation: str):
        self.job_id = job_id
        self.current_status = current_status
        self.operation = operation
        super().__init__(
            f"Cannot {operation} job {job_id} in {current_status} status"
        )


class NotEligibleError(JobQueueError):
    """Raised when explicit processing is requested before the delay elapsed."""

    def __init__(self, job_id: str, eligible_at: Optional[int] = None):
        self.job_id = job_id
        self.eligible_at = eligible_at
        super().__init__(
            f"Job {job_id} is not eligible yet (delay not fulfilled)"
        )
