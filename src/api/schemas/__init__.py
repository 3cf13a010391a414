"""
API Schemas package.

Pydantic models for request/response validation.
"""

from .jobs import (
    JobConfigRequest,
    JobSubmitRequest,
    JobResponse,
    JobListResponse,
)
from .scheduler import (
    SchedulerActionResponse,
    SchedulerStatusResponse,
)

__all__ = [
    "JobConfigRequest",
    "JobSubmitRequest",
    "JobResponse",
    "JobListResponse",
    "SchedulerActionResponse",
    "SchedulerStatusResponse",
]
