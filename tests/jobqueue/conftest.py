"""
Job Queue Test Fixtures.

Base fixtures:
  - Empty store and repository
  - Mocked clock at fixed time (epoch ms)
  - Zero-latency executor with seeded randomness

Per-test fixtures:
  - create_job factory for PENDING/RUNNING/terminal jobs
  - BlockingExecutor for holding jobs in RUNNING
"""

import random
import threading
from typing import Callable, Optional

import pytest

from src.jobqueue import (
    ErrorResult,
    InMemoryJobStore,
    Job,
    JobDispatcher,
    JobExecutor,
    JobQueueService,
    JobRepository,
    JobStatus,
    SuccessResult,
    cancel_job,
    complete_job,
    fail_job,
    start_job,
)


# Fixed time for deterministic tests: 2026-01-01T00:00:00Z
FIXED_TIME_MS = 1_767_225_600_000


class MockClock:
    """
    Mock clock for deterministic time control.

    - Starts at fixed epoch (milliseconds)
    - Advances only when explicitly ticked
    """

    def __init__(self, start_ms: int = FIXED_TIME_MS):
        self._current = start_ms

    def now(self) -> int:
        return self._current

    def tick(self, ms: int = 1) -> int:
        """Advance time by specified milliseconds."""
        self._current += ms
        return self._current


class RecordingExecutor:
    """Executor that completes instantly and records what it ran."""

    def __init__(self, fail: bool = False):
        self.jobs_executed: list[Job] = []
        self.fail = fail
        self._lock = threading.Lock()

    def execute_job(self, job: Job) -> Job:
        with self._lock:
            self.jobs_executed.append(job)
        if self.fail:
            return fail_job(job, ErrorResult("Failed to call SMTP service", 503))
        return complete_job(job, SuccessResult("Email sent successfully!"))


class BlockingExecutor(RecordingExecutor):
    """
    Executor that holds every job in RUNNING until released.

    started is set each time a job enters execute_job().
    """

    def __init__(self):
        super().__init__()
        self.release = threading.Event()
        self.started = threading.Semaphore(0)

    def execute_job(self, job: Job) -> Job:
        self.started.release()
        self.release.wait(timeout=5)
        return super().execute_job(job)


class ExplodingExecutor:
    """Executor with a bug: raises instead of returning a snapshot."""

    def __init__(self):
        self.calls = 0

    def execute_job(self, job: Job) -> Job:
        self.calls += 1
        raise RuntimeError("executor bug")


# =============================================================================
# Component Fixtures
# =============================================================================


@pytest.fixture
def mock_clock() -> MockClock:
    """Create a mock clock at fixed time."""
    return MockClock()


@pytest.fixture
def store() -> InMemoryJobStore:
    """Create an empty in-memory store."""
    return InMemoryJobStore()


@pytest.fixture
def repository(store: InMemoryJobStore) -> JobRepository:
    """Create a JobRepository over the test store."""
    return JobRepository(store)


@pytest.fixture
def instant_executor() -> JobExecutor:
    """Create a JobExecutor that never sleeps and is seeded."""
    return JobExecutor(rng=random.Random(1234), sleep=lambda seconds: None)


@pytest.fixture
def recording_executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def dispatcher(repository: JobRepository, recording_executor: RecordingExecutor) -> JobDispatcher:
    """Create a JobDispatcher with fast ticks and a recording executor."""
    disp = JobDispatcher(
        repository=repository,
        executor=recording_executor,
        tick_interval=0.01,
    )
    yield disp
    if disp.is_running():
        disp.stop(timeout=2)
    disp.wait_idle(timeout=2)


@pytest.fixture
def service(repository: JobRepository, instant_executor: JobExecutor) -> JobQueueService:
    """Create a JobQueueService with zero-latency execution."""
    disp = JobDispatcher(repository, instant_executor, tick_interval=0.01)
    svc = JobQueueService(repository=repository, executor=instant_executor, dispatcher=disp)
    yield svc
    if svc.is_running():
        svc.stop_loop(timeout=2)
    svc.wait_idle(timeout=2)


# =============================================================================
# Job Factory Fixtures
# =============================================================================


@pytest.fixture
def create_job(repository: JobRepository, store: InMemoryJobStore, mock_clock: MockClock) -> Callable:
    """
    Factory fixture for creating stored jobs.

    Returns a function that submits a job at the mock clock's time and
    optionally drives it to the requested status.
    """

    def _create(
        job_type: str = "email",
        payload: Optional[dict] = None,
        delay: int = 0,
        status: JobStatus = JobStatus.PENDING,
        now: Optional[int] = None,
    ) -> Job:
        at = mock_clock.now() if now is None else now
        job = repository.submit(
            job_type,
            payload or {"to": "user@example.com"},
            config={"delay": delay},
            now=at,
        )

        if status == JobStatus.PENDING:
            return job
        if status == JobStatus.CANCELLED:
            return store.replace(cancel_job(job, now=at))

        job = store.replace(start_job(job, now=at))
        if status == JobStatus.COMPLETED:
            job = store.replace(complete_job(job, SuccessResult("done"), now=at + 10))
        elif status == JobStatus.FAILED:
            job = store.replace(fail_job(job, ErrorResult("boom", 500), now=at + 10))
        return job

    return _create


# =============================================================================
# Assertion Helpers
# =============================================================================


def assert_job_status(repository: JobRepository, job_id: str, expected: JobStatus):
    """Assert a job has the expected status."""
    job = repository.get(job_id)
    assert job is not None, f"Job {job_id} not found"
    assert job.status == expected, f"Expected {expected}, got {job.status}"
