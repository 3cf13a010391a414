"""
Job Store for the job queue.

Holds Job snapshots keyed by id and answers the eligibility query:
- Eligible: status == PENDING and eligible_at <= now
- Ordering: created_at ASC, insertion order ASC

The eligibility query is re-evaluated on every call with a linear scan.

What the store MUST NOT do:
- Apply lifecycle transitions (lifecycle.py)
- Decide which job to claim beyond next_eligible()
"""

import itertools
import threading
from abc import ABC, abstractmethod
from typing import Optional

from .entities import Job, JobStatus, now_ms
from .errors import DuplicateJobError, JobNotFoundError


class JobStore(ABC):
    """
    Abstract job store contract.

    Implementations must make insert/replace indivisible with respect to
    each other and to reads.
    """

    @abstractmethod
    def insert(self, job: Job) -> Job:
        """
        Add a new job.

        Raises:
            DuplicateJobError: If job.id is already stored
        """
        ...

    @abstractmethod
    def replace(self, job: Job) -> Job:
        """
        Overwrite the stored snapshot for job.id.

        Raises:
            JobNotFoundError: If job.id is not stored
        """
        ...

    @abstractmethod
    def get(self, job_id: str) -> Optional[Job]:
        """Get a job by ID."""
        ...

    @abstractmethod
    def list_by_status(self, status: Optional[JobStatus] = None) -> list[Job]:
        """List jobs in insertion order, optionally filtered by status."""
        ...

    @abstractmethod
    def next_eligible(self, now: Optional[int] = None) -> Optional[Job]:
        """Get the oldest eligible PENDING job, or None."""
        ...

    @abstractmethod
    def count_by_status(self) -> dict[JobStatus, int]:
        """Count jobs per status. Every status is present."""
        ...

    @abstractmethod
    def size(self) -> int:
        """Total number of stored jobs."""
        ...


class InMemoryJobStore(JobStore):
    """
    In-memory job store.

    Each id keeps the sequence number assigned at insert; replace()
    preserves it, so identical created_at values are always ordered by
    submission order.
    """

    def __init__(self):
        self._jobs: dict[str, Job] = {}
        self._sequence: dict[str, int] = {}
        self._counter = itertools.count()
        self._lock = threading.RLock()

    def insert(self, job: Job) -> Job:
        with self._lock:
            if job.id in self._jobs:
                raise DuplicateJobError(job.id)
            self._jobs[job.id] = job
            self._sequence[job.id] = next(self._counter)
            return job

    def replace(self, job: Job) -> Job:
        with self._lock:
            if job.id not in self._jobs:
                raise JobNotFoundError(job.id)
            self._jobs[job.id] = job
            return job

    def get(self, job_id: str) -> Optional[Job]:
        with self._lock:
            return self._jobs.get(job_id)

    def list_by_status(self, status: Optional[JobStatus] = None) -> list[Job]:
        with self._lock:
            jobs = list(self._jobs.values())
        if status is None:
            return jobs
        return [j for j in jobs if j.status == status]

    def next_eligible(self, now: Optional[int] = None) -> Optional[Job]:
        now = now_ms() if now is None else now
        with self._lock:
            best: Optional[Job] = None
            best_key = None
            for job_id, job in self._jobs.items():
                if job.status != JobStatus.PENDING or job.eligible_at > now:
                    continue
                key = (job.created_at, self._sequence[job_id])
                if best_key is None or key < best_key:
                    best, best_key = job, key
            return best

    def count_by_status(self) -> dict[JobStatus, int]:
        counts = {status: 0 for status in JobStatus}
        with self._lock:
            for job in self._jobs.values():
                counts[job.status] += 1
        return counts

    def size(self) -> int:
        with self._lock:
            return len(self._jobs)
