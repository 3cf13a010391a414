"""
Job Queue Core Module.

- entities / lifecycle: Job snapshots and their state machine
- store: In-memory eligibility queue
- repository: Submission, cancel and atomic claim boundary
- executor: Simulated variable-latency work
- dispatcher: Periodic claim loop with concurrent execution
- service: Explicit context object wiring everything together
"""

from .entities import (
    JobStatus,
    JobConfig,
    Job,
    JobResult,
    SuccessResult,
    ErrorResult,
)
from .errors import (
    JobQueueError,
    ValidationError,
    JobNotFoundError,
    DuplicateJobError,
    InvalidTransitionError,
    NotEligibleError,
)
from .lifecycle import (
    create_job,
    start_job,
    complete_job,
    fail_job,
    cancel_job,
    is_eligible,
    is_terminal,
)
from .store import JobStore, InMemoryJobStore
from .repository import JobRepository
from .executor import JobExecutor
from .dispatcher import JobDispatcher, DispatcherState
from .service import JobQueueService

__all__ = [
    # Entities
    "JobStatus",
    "JobConfig",
    "Job",
    "JobResult",
    "SuccessResult",
    "ErrorResult",
    # Errors
    "JobQueueError",
    "ValidationError",
    "JobNotFoundError",
    "DuplicateJobError",
    "InvalidTransitionError",
    "NotEligibleError",
    # Lifecycle
    "create_job",
    "start_job",
    "complete_job",
    "fail_job",
    "cancel_job",
    "is_eligible",
    "is_terminal",
    # Store
    "JobStore",
    "InMemoryJobStore",
    # Repository
    "JobRepository",
    # Executor
    "JobExecutor",
    # Dispatcher
    "JobDispatcher",
    "DispatcherState",
    # Service
    "JobQueueService",
]
