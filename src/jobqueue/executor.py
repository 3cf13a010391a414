"""
Executor for the job queue.

- Simulates external work with a randomized duration
- Produces a randomized business outcome (success or failure)
- Returns the terminal Job snapshot

A simulated failure is a normal FAILED status carrying an ErrorResult,
not an exception. Only a bug raises out of execute_job().

What Executor MUST NOT do:
- Write to the store (the dispatcher saves the returned snapshot)
- Claim jobs
"""

import logging
import random
import time
from typing import Callable, Optional

from .entities import ErrorResult, Job, SuccessResult, now_ms
from .lifecycle import complete_job, fail_job


logger = logging.getLogger(__name__)


DEFAULT_MIN_EXECUTION_MS = 100
DEFAULT_MAX_EXECUTION_MS = 2000
DEFAULT_FAILURE_RATE = 0.1
ERROR_CODES = (500, 502, 503, 504)

SUCCESS_MESSAGES = {
    "email": "Email sent successfully!",
    "sms": "SMS sent successfully!",
    "notification": "Notification delivered successfully!",
    "webhook": "Webhook called successfully!",
}

FAILURE_MESSAGES = {
    "email": "Failed to call SMTP service",
    "sms": "Failed to call SMS gateway",
    "notification": "Failed to deliver notification",
    "webhook": "Failed to call webhook endpoint",
}


def success_message(job_type: str) -> str:
    return SUCCESS_MESSAGES.get(
        job_type, f"Job of type '{job_type}' completed successfully!"
    )


def failure_message(job_type: str) -> str:
    return FAILURE_MESSAGES.get(
        job_type, f"Failed to execute job of type '{job_type}'"
    )


class JobExecutor:
    """
    Runs a RUNNING job and returns its COMPLETED or FAILED snapshot.

    Execution is synchronous: the calling thread blocks for the simulated
    duration. The dispatcher runs each call on its own worker thread.
    """

    def __init__(
        self,
        min_execution_ms: int = DEFAULT_MIN_EXECUTION_MS,
        max_execution_ms: int = DEFAULT_MAX_EXECUTION_MS,
        failure_rate: float = DEFAULT_FAILURE_RATE,
        rng: Optional[random.Random] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Initialize JobExecutor.

        Args:
            min_execution_ms: Lower bound of simulated duration (inclusive)
            max_execution_ms: Upper bound of simulated duration (inclusive)
            failure_rate: Probability of a simulated failure
            rng: Random source (injectable for testing)
            sleep: Sleep function taking seconds (injectable for testing)
        """
        if min_execution_ms < 0 or max_execution_ms < min_execution_ms:
            raise ValueError(
                f"Invalid execution window: [{min_execution_ms}, {max_execution_ms}]"
            )
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be within [0, 1], got {failure_rate}")

        self.min_execution_ms = min_execution_ms
        self.max_execution_ms = max_execution_ms
        self.failure_rate = failure_rate
        self._rng = rng or random.Random()
        self._sleep = sleep or time.sleep

    def execute_job(self, job: Job) -> Job:
        """
        Execute a RUNNING job.

        Args:
            job: Snapshot in RUNNING status (caller's precondition)

        Returns:
            The COMPLETED or FAILED snapshot
        """
        duration_ms = self.generate_execution_time()
        logger.debug(f"Executing job {job.id} for {duration_ms}ms")
        self._sleep(duration_ms / 1000.0)

        if self.should_fail():
            result = ErrorResult(
                message=failure_message(job.type),
                code=self.generate_error_code(),
                details={"job_type": job.type, "timestamp": now_ms()},
            )
            return fail_job(job, result)

        result = SuccessResult(
            message=success_message(job.type),
            data={"job_type": job.type, "processed_at": now_ms()},
        )
        return complete_job(job, result)

    def generate_execution_time(self) -> int:
        """Draw a duration uniformly from the closed execution window."""
        return self._rng.randint(self.min_execution_ms, self.max_execution_ms)

    def should_fail(self) -> bool:
        return self._rng.random() < self.failure_rate

    def generate_error_code(self) -> int:
        return self._rng.choice(ERROR_CODES)
