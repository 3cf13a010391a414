"""
Job Queue Domain Entities.

- JobStatus: Lifecycle states of a job
- JobConfig: Execution configuration (delay)
- SuccessResult / ErrorResult: Tagged union of job outcomes
- Job: Immutable snapshot of a single unit of deferred work

Snapshots are frozen. Every lifecycle transition (see lifecycle.py)
returns a new Job; fields are never mutated in place.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional, Union
import math
import time
import uuid

from .errors import ValidationError


class JobStatus(str, Enum):
    """
    Job status values.

    State transitions:
    - PENDING -> RUNNING (claimed by the dispatcher)
    - RUNNING -> COMPLETED | FAILED (executor resolved)
    - PENDING -> CANCELLED (cancel request)
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """Check if this is a terminal state."""
        return self in {
            JobStatus.COMPLETED,
            JobStatus.FAILED,
            JobStatus.CANCELLED,
        }


# Result discriminants
RESULT_KIND_SUCCESS = "success"
RESULT_KIND_ERROR = "error"

CANCELLED_MESSAGE = "Job was cancelled"
CANCELLED_CODE = 499  # Client Closed Request


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def now_ms() -> int:
    """Get current time as epoch milliseconds."""
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class JobConfig:
    """Execution configuration for a job. Delay is in milliseconds."""

    delay: Union[int, float] = 0

    @classmethod
    def normalize(cls, config: Any = None) -> "JobConfig":
        """
        Validate raw configuration and fill in defaults.

        Accepts a JobConfig, a mapping with an optional ``delay`` key,
        or None.

        Raises:
            ValidationError: If delay is not a number or is negative
        """
        if config is None:
            return cls()

        if isinstance(config, JobConfig):
            delay = config.delay
        elif isinstance(config, Mapping):
            delay = config.get("delay")
            if delay is None:
                delay = 0
        else:
            raise ValidationError("Config must be an object")

        if isinstance(delay, bool) or not isinstance(delay, (int, float)):
            raise ValidationError("Delay must be a number")
        if not math.isfinite(delay):
            raise ValidationError("Delay must be a finite number")
        if delay < 0:
            raise ValidationError("Delay must be a non-negative number")

        return cls(delay=delay)

    def to_dict(self) -> dict:
        return {"delay": self.delay}


@dataclass(frozen=True)
class SuccessResult:
    """Outcome of a job that completed successfully."""

    message: str
    data: Optional[Any] = None
    kind: str = field(default=RESULT_KIND_SUCCESS, init=False)

    @property
    def is_error(self) -> bool:
        return False

    def to_dict(self) -> dict:
        out = {"kind": self.kind, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


@dataclass(frozen=True)
class ErrorResult:
    """Outcome of a job that failed or was cancelled."""

    message: str
    code: int
    details: Optional[Any] = None
    kind: str = field(default=RESULT_KIND_ERROR, init=False)

    @property
    def is_error(self) -> bool:
        return True

    def to_dict(self) -> dict:
        out = {"kind": self.kind, "message": self.message, "code": self.code}
        if self.details is not None:
            out["details"] = self.details
        return out


JobResult = Union[SuccessResult, ErrorResult]


def validate_payload(payload: Any) -> dict:
    """
    Check that a payload is a non-empty mapping.

    Returns:
        A shallow dict copy of the payload

    Raises:
        ValidationError: If payload is missing, not a mapping, or empty
    """
    if payload is None or not isinstance(payload, Mapping):
        raise ValidationError("Payload must be a valid object")
    if len(payload) == 0:
        raise ValidationError("Payload cannot be empty")
    return dict(payload)


@dataclass(frozen=True)
class Job:
    """
    Immutable snapshot of a single unit of deferred work.

    Write-once fields:
    - started_at: set on PENDING -> RUNNING
    - finished_at, execution_time: set on RUNNING -> COMPLETED | FAILED
      (CANCELLED sets finished_at only)
    - result: set on reaching any terminal status

    The payload is a read-only view shared by every snapshot of the job.
    """

    id: str
    status: JobStatus
    type: str
    payload: Mapping[str, Any]
    config: JobConfig
    created_at: int
    eligible_at: Union[int, float]
    started_at: Optional[int] = None
    finished_at: Optional[int] = None
    execution_time: Optional[int] = None
    result: Optional[JobResult] = None

    @classmethod
    def create(
        cls,
        job_type: str,
        payload: Any,
        config: Any = None,
        now: Optional[int] = None,
    ) -> "Job":
        """
        Create a new PENDING job with generated ID.

        Raises:
            ValidationError: On empty type, bad payload or negative delay
        """
        if not isinstance(job_type, str) or not job_type.strip():
            raise ValidationError("Job type is required and cannot be empty")

        payload = validate_payload(payload)
        normalized = JobConfig.normalize(config)

        created_at = now_ms() if now is None else now
        return cls(
            id=generate_uuid(),
            status=JobStatus.PENDING,
            type=job_type,
            payload=MappingProxyType(payload),
            config=normalized,
            created_at=created_at,
            eligible_at=created_at + normalized.delay,
        )

    def is_terminal(self) -> bool:
        """Check if job is in a terminal state."""
        return self.status.is_terminal

    def to_dict(self) -> dict:
        """Serialize the snapshot to plain JSON-compatible types."""
        return {
            "id": self.id,
            "status": self.status.value,
            "type": self.type,
            "payload": dict(self.payload),
            "config": self.config.to_dict(),
            "created_at": self.created_at,
            "eligible_at": self.eligible_at,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "execution_time": self.execution_time,
            "result": self.result.to_dict() if self.result is not None else None,
        }
