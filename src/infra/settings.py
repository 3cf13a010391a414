"""
Runtime settings for the job queue service.

Values come from environment variables (a .env file in the working
directory is loaded first).
Defaults: 50ms tick, unbounded concurrency, 100-2000ms simulated work, 10% failures.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


DEFAULT_TICK_INTERVAL_MS = 50
DEFAULT_MIN_EXECUTION_MS = 100
DEFAULT_MAX_EXECUTION_MS = 2000
DEFAULT_FAILURE_RATE = 0.1
DEFAULT_API_HOST = "127.0.0.1"
DEFAULT_API_PORT = 3000

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


@dataclass
class JobQueueSettings:
    """Configuration for JobQueueService and the HTTP app."""

    tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS
    max_concurrency: Optional[int] = None  # None = unbounded
    min_execution_ms: int = DEFAULT_MIN_EXECUTION_MS
    max_execution_ms: int = DEFAULT_MAX_EXECUTION_MS
    failure_rate: float = DEFAULT_FAILURE_RATE
    auto_start: bool = True
    log_level: str = "INFO"
    log_dir: Optional[str] = None
    api_host: str = DEFAULT_API_HOST
    api_port: int = DEFAULT_API_PORT

    def __post_init__(self):
        if self.tick_interval_ms <= 0:
            raise ValueError("tick_interval_ms must be positive")
        if self.max_concurrency is not None and self.max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1 or None")
        if self.min_execution_ms < 0 or self.max_execution_ms < self.min_execution_ms:
            raise ValueError("execution window must satisfy 0 <= min <= max")
        if not 0.0 <= self.failure_rate <= 1.0:
            raise ValueError("failure_rate must be within [0, 1]")

    @property
    def tick_interval(self) -> float:
        """Tick interval in seconds."""
        return self.tick_interval_ms / 1000.0

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "JobQueueSettings":
        """
        Build settings from environment variables.

        JOBQUEUE_MAX_CONCURRENCY=0 means unbounded. JOBQUEUE_LOG_DIR is
        only used when JOBQUEUE_LOG_TO_FILE is true.

        Raises:
            ValueError: If a variable cannot be parsed
        """
        if load_env_file:
            load_dotenv()

        max_concurrency = _env_int("JOBQUEUE_MAX_CONCURRENCY", 0)
        log_to_file = _env_bool("JOBQUEUE_LOG_TO_FILE", False)

        return cls(
            tick_interval_ms=_env_int("JOBQUEUE_TICK_INTERVAL_MS", DEFAULT_TICK_INTERVAL_MS),
            max_concurrency=max_concurrency if max_concurrency > 0 else None,
            min_execution_ms=_env_int("JOBQUEUE_MIN_EXECUTION_MS", DEFAULT_MIN_EXECUTION_MS),
            max_execution_ms=_env_int("JOBQUEUE_MAX_EXECUTION_MS", DEFAULT_MAX_EXECUTION_MS),
            failure_rate=_env_float("JOBQUEUE_FAILURE_RATE", DEFAULT_FAILURE_RATE),
            auto_start=_env_bool("JOBQUEUE_AUTO_START", True),
            log_level=os.getenv("JOBQUEUE_LOG_LEVEL", "INFO"),
            log_dir=os.getenv("JOBQUEUE_LOG_DIR", "logs") if log_to_file else None,
            api_host=os.getenv("API_HOST", DEFAULT_API_HOST),
            api_port=_env_int("API_PORT", DEFAULT_API_PORT),
        )
