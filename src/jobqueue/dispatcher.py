"""
Dispatcher for the job queue.

- Ticks on a fixed interval (50ms by default)
- Each tick claims at most one eligible job (atomic, via JobRepository)
- Hands the RUNNING job to the Executor on its own worker thread
- Writes the terminal snapshot back when the Executor returns

The tick never waits for execution, so any number of jobs can be RUNNING
at once. An optional max_concurrency bounds in-flight executions; when
every slot is busy a tick claims nothing.

What Dispatcher MUST NOT do:
- Modify job snapshots except through lifecycle transitions
- Stop the loop because a single tick or job failed
- Cancel or time out a long-running execution
"""

import logging
import threading
from contextlib import contextmanager
from enum import Enum
from typing import Optional, Protocol

from .entities import ErrorResult, Job
from .lifecycle import fail_job
from .repository import JobRepository


logger = logging.getLogger(__name__)


DEFAULT_TICK_INTERVAL = 0.05  # seconds
WORKER_START_FAILED_MESSAGE = "Failed to start worker thread"


class DispatcherState(str, Enum):
    """Dispatcher lifecycle states."""

    STOPPED = "STOPPED"
    RUNNING = "RUNNING"
    STOPPING = "STOPPING"


class ExecutorProtocol(Protocol):
    """Protocol for job executor."""

    def execute_job(self, job: Job) -> Job:
        """
        Execute a RUNNING job and return its terminal snapshot.

        Args:
            job: The RUNNING job to execute

        Returns:
            The COMPLETED or FAILED snapshot
        """
        ...


class JobDispatcher:
    """
    Periodically claims eligible jobs and executes them concurrently.

    Key behaviors:
    1. tick(): claim_next() -> None means no-op
    2. Spawn worker thread: execute_job() -> save_result()
    3. Errors in a tick or a worker are logged and counted, never raised
       out of the loop
    """

    def __init__(
        self,
        repository: JobRepository,
        executor: ExecutorProtocol,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        max_concurrency: Optional[int] = None,
    ):
        """
        Initialize JobDispatcher.

        Args:
            repository: JobRepository used for claims and write-backs
            executor: Executor that runs claimed jobs
            tick_interval: Seconds between claim attempts
            max_concurrency: Maximum in-flight executions (None = unbounded)
        """
        if tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {tick_interval}")
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")

        self.repository = repository
        self.executor = executor
        self.tick_interval = tick_interval
        self.max_concurrency = max_concurrency

        self._state = DispatcherState.STOPPED
        self._state_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

        self._slots: Optional[threading.BoundedSemaphore] = (
            threading.BoundedSemaphore(max_concurrency) if max_concurrency else None
        )
        self._in_flight = 0
        self._idle = threading.Condition()

        self.error_count = 0
        self.last_error: Optional[str] = None

    @property
    def state(self) -> DispatcherState:
        """Get current dispatcher state."""
        return self._state

    @property
    def in_flight(self) -> int:
        """Number of jobs currently executing."""
        with self._idle:
            return self._in_flight

    def is_running(self) -> bool:
        """Check if the dispatch loop is running."""
        return self._state == DispatcherState.RUNNING

    # =========================================================================
    # Single Tick
    # =========================================================================

    def tick(self, now: Optional[int] = None) -> Optional[Job]:
        """
        Attempt to claim one job and start executing it in the background.

        Returns:
            The claimed RUNNING job, or None if nothing was claimed or its
            worker thread could not be started
        """
        if self._slots is not None and not self._slots.acquire(blocking=False):
            logger.debug("All execution slots busy, skipping tick")
            return None

        try:
            job = self.repository.claim_next(now)
        except Exception:
            self._release_slot()
            raise

        if job is None:
            self._release_slot()
            return None

        self._enter()
        try:
            self._start_worker(job)
        except RuntimeError as e:
            self._release_slot()
            self._leave()
            self._record_error(e)
            logger.exception(f"Could not start worker for job {job.id}")
            self.repository.save_result(
                fail_job(job, ErrorResult(WORKER_START_FAILED_MESSAGE, 503, {"job_type": job.type}))
            )
            return None
        return job

    def _start_worker(self, job: Job) -> None:
        worker = threading.Thread(
            target=self._run_claimed,
            args=(job,),
            name=f"job-{job.id[:8]}",
            daemon=True,
        )
        worker.start()

    def _run_claimed(self, job: Job) -> None:
        """Worker thread body: execute, save, and never raise."""
        try:
            self._execute_and_save(job)
        except Exception as e:
            self._record_error(e)
            logger.exception(f"Error executing job {job.id}")
        finally:
            self._release_slot()
            self._leave()

    def _execute_and_save(self, job: Job) -> Job:
        finished = self.executor.execute_job(job)
        self.repository.save_result(finished)
        logger.info(
            f"Job {finished.id} finished with status '{finished.status.value}' "
            f"in {finished.execution_time}ms"
        )
        return finished

    # =========================================================================
    # Explicit processing
    # =========================================================================

    def process_by_id(self, job_id: str) -> Job:
        """
        Claim and execute one specific job in the calling thread.

        Bypasses the periodic trigger and max_concurrency.

        Returns:
            The terminal snapshot

        Raises:
            JobNotFoundError: If the job does not exist
            NotEligibleError: If the job's delay has not elapsed
            InvalidTransitionError: If the job is not PENDING
        """
        running = self.repository.claim(job_id)
        with self._tracked():
            return self._execute_and_save(running)

    # =========================================================================
    # Dispatch Loop
    # =========================================================================

    def start(self) -> bool:
        """
        Start the dispatch loop in a background thread.

        Returns:
            True if started, False if it was already running or a previous
            loop thread has not exited yet
        """
        with self._state_lock:
            if self._state == DispatcherState.STOPPING:
                logger.warning("Dispatcher is still stopping")
                return False
            if self._state != DispatcherState.STOPPED:
                logger.warning("Dispatcher is already running")
                return False

            # One stop event per run
            self._stop_event = threading.Event()
            self._state = DispatcherState.RUNNING
            self._thread = threading.Thread(
                target=self._dispatch_loop,
                args=(self._stop_event,),
                name="job-dispatcher",
                daemon=True,
            )
            self._thread.start()

        logger.info(f"Dispatcher started (tick={self.tick_interval * 1000:.0f}ms)")
        return True

    def stop(self, timeout: Optional[float] = None) -> bool:
        """
        Stop the dispatch loop.

        In-flight executions are not interrupted; use wait_idle() to wait
        for them. If the loop thread outlives the timeout the dispatcher
        stays STOPPING until that thread exits.

        Args:
            timeout: Maximum seconds to wait for the loop thread

        Returns:
            True if a stop was requested, False if it was not running
        """
        with self._state_lock:
            if self._state != DispatcherState.RUNNING:
                logger.warning("Dispatcher is not running")
                return False

            self._state = DispatcherState.STOPPING
            stop_event = self._stop_event
            stop_event.set()
            thread = self._thread

        if thread is not None:
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning("Dispatcher thread did not stop within timeout")
                return True

        self._mark_stopped(stop_event)
        return True

    def _mark_stopped(self, stop_event: threading.Event) -> None:
        with self._state_lock:
            if self._stop_event is not stop_event or self._state != DispatcherState.STOPPING:
                return
            self._state = DispatcherState.STOPPED
            self._thread = None
        logger.info("Dispatcher stopped")

    def _dispatch_loop(self, stop_event: threading.Event) -> None:
        """Main dispatch loop."""
        logger.info("Dispatcher loop started")

        while not stop_event.is_set():
            try:
                self.tick()
            except Exception as e:
                self._record_error(e)
                logger.exception("Error in dispatch loop")

            stop_event.wait(self.tick_interval)

        logger.info("Dispatcher loop ended")
        self._mark_stopped(stop_event)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until no job is executing.

        Returns:
            True if idle, False if timeout reached
        """
        with self._idle:
            return self._idle.wait_for(lambda: self._in_flight == 0, timeout=timeout)

    # =========================================================================
    # Bookkeeping
    # =========================================================================

    @contextmanager
    def _tracked(self):
        self._enter()
        try:
            yield
        finally:
            self._leave()

    def _enter(self) -> None:
        with self._idle:
            self._in_flight += 1

    def _leave(self) -> None:
        with self._idle:
            self._in_flight -= 1
            if self._in_flight == 0:
                self._idle.notify_all()

    def _release_slot(self) -> None:
        if self._slots is not None:
            self._slots.release()

    def _record_error(self, error: Exception) -> None:
        with self._idle:
            self.error_count += 1
            self.last_error = f"{type(error).__name__}: {error}"
