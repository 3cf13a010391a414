"""
Job Queue Service - Main entry point for the job queue core.

This service wires the core components together:
- InMemoryJobStore (storage)
- JobRepository (submission, lookup, cancel, atomic claim)
- JobExecutor (simulated work)
- JobDispatcher (periodic claim loop)

There is no module-level instance: callers build a service and pass it
down, so several independent services can coexist (e.g. in tests).

Usage:
    service = JobQueueService.create(JobQueueSettings.from_env())
    service.start_loop()
    job = service.submit("email", {"to": "a@example.com"})
    ...
    service.stop_loop()
"""

import logging
import random
from typing import Any, Optional

from src.infra.settings import JobQueueSettings

from .dispatcher import JobDispatcher
from .entities import Job, JobStatus
from .executor import JobExecutor
from .repository import JobRepository
from .store import InMemoryJobStore, JobStore


logger = logging.getLogger(__name__)


class JobQueueService:
    """
    Coordinates the job queue components.

    Provides:
    - Component construction and wiring
    - Loop lifecycle (idempotent start/stop)
    - API-friendly job operations
    """

    def __init__(
        self,
        repository: JobRepository,
        executor: JobExecutor,
        dispatcher: JobDispatcher,
    ):
        """
        Initialize JobQueueService with all components.

        Use JobQueueService.create() for convenient construction.
        """
        self.repository = repository
        self.executor = executor
        self.dispatcher = dispatcher

    @classmethod
    def create(
        cls,
        settings: Optional[JobQueueSettings] = None,
        store: Optional[JobStore] = None,
        rng: Optional[random.Random] = None,
    ) -> "JobQueueService":
        """
        Create a JobQueueService with all components wired together.

        Args:
            settings: Runtime settings (JobQueueSettings() defaults when omitted)
            store: JobStore implementation (defaults to InMemoryJobStore)
            rng: Random source for the executor

        Returns:
            Configured JobQueueService
        """
        settings = settings or JobQueueSettings()

        repository = JobRepository(store if store is not None else InMemoryJobStore())

        executor = JobExecutor(
            min_execution_ms=settings.min_execution_ms,
            max_execution_ms=settings.max_execution_ms,
            failure_rate=settings.failure_rate,
            rng=rng,
        )

        dispatcher = JobDispatcher(
            repository=repository,
            executor=executor,
            tick_interval=settings.tick_interval,
            max_concurrency=settings.max_concurrency,
        )

        return cls(repository=repository, executor=executor, dispatcher=dispatcher)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start_loop(self) -> bool:
        """
        Start the dispatch loop.

        Idempotent: a second call logs a warning and returns False.
        """
        return self.dispatcher.start()

    def stop_loop(self, timeout: Optional[float] = None) -> bool:
        """
        Stop the dispatch loop. Running jobs are not interrupted.

        Idempotent: a second call logs a warning and returns False.
        """
        return self.dispatcher.stop(timeout=timeout)

    def is_running(self) -> bool:
        """Check if the dispatch loop is running."""
        return self.dispatcher.is_running()

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Wait for in-flight executions to finish."""
        return self.dispatcher.wait_idle(timeout=timeout)

    # =========================================================================
    # Job Operations (API-friendly)
    # =========================================================================

    def submit(self, job_type: str, payload: Any, config: Any = None) -> Job:
        """
        Submit a new job.

        Args:
            job_type: Free-form job type ("email", "sms", ...)
            payload: Non-empty mapping
            config: Optional JobConfig or mapping with "delay" (ms)

        Returns:
            The PENDING Job

        Raises:
            ValidationError: On invalid input
        """
        return self.repository.submit(job_type, payload, config=config)

    def get_status(self, job_id: str) -> Job:
        """
        Get a job by ID.

        Raises:
            JobNotFoundError: If the job does not exist
        """
        return self.repository.get_status(job_id)

    def cancel(self, job_id: str) -> Job:
        """
        Cancel a PENDING job.

        Raises:
            JobNotFoundError: If the job does not exist
            InvalidTransitionError: If the job is not PENDING
        """
        return self.repository.cancel(job_id)

    def list_jobs(self, status: Optional[JobStatus] = None) -> list[Job]:
        """List jobs in submission order, optionally filtered by status."""
        return self.repository.list_jobs(status)

    def process_by_id(self, job_id: str) -> Job:
        """
        Claim and execute one job synchronously.

        Raises:
            JobNotFoundError: If the job does not exist
            NotEligibleError: If the job's delay has not elapsed
            InvalidTransitionError: If the job is not PENDING
        """
        return self.dispatcher.process_by_id(job_id)

    # =========================================================================
    # Status
    # =========================================================================

    def get_stats(self) -> dict:
        """
        Get queue statistics.

        Returns:
            Dict with store counts plus loop state, in-flight count,
            tick error count and the next job waiting on its delay
        """
        stats = self.repository.get_stats()
        next_waiting = self.repository.next_to_become_eligible()
        stats.update(
            {
                "loop_running": self.is_running(),
                "in_flight": self.dispatcher.in_flight,
                "max_concurrency": self.dispatcher.max_concurrency,
                "error_count": self.dispatcher.error_count,
                "last_error": self.dispatcher.last_error,
                "next_eligible_at": next_waiting.eligible_at if next_waiting else None,
            }
        )
        return stats
