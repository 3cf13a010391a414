"""
Job Repository: the boundary between callers and the Job Store.

- Submission: create + insert
- Lookup and listing
- Cancellation: PENDING -> CANCELLED
- Atomic claim: PENDING -> RUNNING as one indivisible step

What the repository MUST NOT do:
- Execute jobs (executor.py)
- Drive the dispatch loop (dispatcher.py)
- Assume a particular storage technology; it only uses the JobStore contract
"""

import logging
import threading
from typing import Any, Optional

from .entities import Job, JobStatus, now_ms
from .errors import InvalidTransitionError, JobNotFoundError, NotEligibleError
from .lifecycle import cancel_job, create_job, is_eligible, start_job
from .store import JobStore


logger = logging.getLogger(__name__)


class JobRepository:
    """
    Reads and writes Job snapshots through a JobStore.

    Claim and cancel are compare-and-set sections under one lock: the
    status check, the transition and the replace happen without any
    other claim or cancel observing the store in between. Two dispatchers
    sharing a repository can never claim the same job, and a cancel that
    races a claim fails its precondition instead of overwriting it.
    """

    def __init__(self, store: JobStore):
        self.store = store
        self._claim_lock = threading.RLock()

    # =========================================================================
    # Submission and lookup
    # =========================================================================

    def submit(
        self,
        job_type: str,
        payload: Any,
        config: Any = None,
        now: Optional[int] = None,
    ) -> Job:
        """
        Create a PENDING job and insert it.

        Raises:
            ValidationError: On invalid type, payload or config
        """
        job = create_job(job_type, payload, config=config, now=now)
        self.store.insert(job)
        logger.info(
            f"Submitted job {job.id} (type={job.type}, delay={job.config.delay}ms)"
        )
        return job

    def get(self, job_id: str) -> Optional[Job]:
        """Get a job by ID."""
        return self.store.get(job_id)

    def get_status(self, job_id: str) -> Job:
        """
        Get a job by ID.

        Raises:
            JobNotFoundError: If the job does not exist
        """
        job = self.store.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def list_jobs(self, status: Optional[JobStatus] = None) -> list[Job]:
        """List jobs in submission order, optionally filtered by status."""
        return self.store.list_by_status(status)

    def count_by_status(self) -> dict[JobStatus, int]:
        return self.store.count_by_status()

    # =========================================================================
    # Cancellation
    # =========================================================================

    def cancel(self, job_id: str, now: Optional[int] = None) -> Job:
        """
        Cancel a PENDING job.

        Raises:
            JobNotFoundError: If the job does not exist
            InvalidTransitionError: If the job is not PENDING
        """
        with self._claim_lock:
            job = self.get_status(job_id)
            cancelled = cancel_job(job, now=now)
            self.store.replace(cancelled)

        logger.info(f"Cancelled job {job_id}")
        return cancelled

    # =========================================================================
    # Claim
    # =========================================================================

    def claim_next(self, now: Optional[int] = None) -> Optional[Job]:
        """
        Atomically select the next eligible job and mark it RUNNING.

        Returns:
            The RUNNING snapshot, or None if nothing is eligible
        """
        now = now_ms() if now is None else now
        with self._claim_lock:
            job = self.store.next_eligible(now)
            if job is None:
                return None
            running = start_job(job, now=now)
            self.store.replace(running)

        logger.info(f"Claimed job {running.id} (type={running.type})")
        return running

    def claim(self, job_id: str, now: Optional[int] = None) -> Job:
        """
        Atomically claim one specific job.

        Raises:
            JobNotFoundError: If the job does not exist
            NotEligibleError: If the job's delay has not elapsed
            InvalidTransitionError: If the job is not PENDING
        """
        now = now_ms() if now is None else now
        with self._claim_lock:
            job = self.get_status(job_id)
            if not is_eligible(job, now=now):
                raise NotEligibleError(job_id, job.eligible_at)
            running = start_job(job, now=now)
            self.store.replace(running)

        logger.info(f"Claimed job {running.id} by id (type={running.type})")
        return running

    def save_result(self, job: Job) -> Job:
        """
        Write back a terminal snapshot produced by the executor.

        Raises:
            InvalidTransitionError: If the snapshot is not terminal
            JobNotFoundError: If the job does not exist
        """
        if not job.status.is_terminal:
            raise InvalidTransitionError(job.id, job.status.value, "save result of")
        with self._claim_lock:
            return self.store.replace(job)

    # =========================================================================
    # Delay-aware queries
    # =========================================================================

    def waiting(self, now: Optional[int] = None) -> list[Job]:
        """
        List PENDING jobs whose delay has not elapsed yet.

        Returns:
            Jobs ordered by eligible_at ASC (submission order on ties)
        """
        now = now_ms() if now is None else now
        pending = self.store.list_by_status(JobStatus.PENDING)
        waiting = [j for j in pending if not is_eligible(j, now=now)]
        waiting.sort(key=lambda j: j.eligible_at)
        return waiting

    def next_to_become_eligible(self, now: Optional[int] = None) -> Optional[Job]:
        """Get the waiting job that becomes eligible soonest."""
        waiting = self.waiting(now)
        return waiting[0] if waiting else None

    def get_stats(self, now: Optional[int] = None) -> dict:
        """
        Get store statistics.

        Returns:
            Dict with total, by_status, eligible_count, waiting_count
        """
        now = now_ms() if now is None else now
        by_status = self.store.count_by_status()
        pending = self.store.list_by_status(JobStatus.PENDING)
        eligible_count = sum(1 for j in pending if is_eligible(j, now=now))
        return {
            "total": self.store.size(),
            "by_status": {status.value: count for status, count in by_status.items()},
            "eligible_count": eligible_count,
            "waiting_count": len(pending) - eligible_count,
        }
