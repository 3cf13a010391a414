"""
Job API schemas.

Request/response models for the /jobs endpoints.
"""

from typing import Annotated, Any, List, Optional, Union
from pydantic import BaseModel, Field, StrictInt


# Rejects bools, numeric strings, NaN and infinities
FiniteFloat = Annotated[float, Field(strict=True, allow_inf_nan=False)]


class JobConfigRequest(BaseModel):
    """Execution configuration supplied on submission."""

    delay: Optional[Union[StrictInt, FiniteFloat]] = Field(
        default=None,
        description="Delay in milliseconds before the job becomes eligible (>= 0)",
        json_schema_extra={"examples": [0, 5000]},
    )


class JobSubmitRequest(BaseModel):
    """Request to submit a new job."""

    type: str = Field(
        ...,
        min_length=1,
        description="Job type; 'email', 'sms', 'notification' and 'webhook' have canonical messages",
        json_schema_extra={"examples": ["email", "sms"]},
    )
    payload: dict = Field(
        ...,
        description="Non-empty job payload (opaque to the queue)",
        json_schema_extra={"examples": [{"to": "user@example.com", "subject": "Hi"}]},
    )
    config: Optional[JobConfigRequest] = Field(
        default=None,
        description="Optional execution configuration",
    )


class JobConfigResponse(BaseModel):
    delay: Union[int, float] = Field(default=0, description="Delay in milliseconds")


class JobDataResponse(BaseModel):
    """Submitted job data."""

    type: str = Field(..., description="Job type")
    payload: dict = Field(default_factory=dict, description="Job payload")
    config: JobConfigResponse = Field(default_factory=JobConfigResponse)


class JobResponse(BaseModel):
    """Response representing a Job snapshot."""

    id: str = Field(..., description="Unique job identifier (UUID)")
    status: str = Field(..., description="pending/running/completed/failed/cancelled")
    execution_time: Optional[int] = Field(default=None, description="Execution time in ms")
    result: Optional[dict[str, Any]] = Field(
        default=None,
        description="Outcome: kind 'success' (message, data) or 'error' (message, code, details)",
    )
    data: JobDataResponse
    created_at: int = Field(..., description="Creation time (epoch ms)")
    eligible_at: Union[int, float] = Field(..., description="Earliest start time (epoch ms)")
    started_at: Optional[int] = Field(default=None, description="Start time (epoch ms)")
    finished_at: Optional[int] = Field(default=None, description="Finish time (epoch ms)")


class JobListResponse(BaseModel):
    """Response for job list endpoint."""

    jobs: List[JobResponse] = Field(default_factory=list)
    total: int = Field(..., description="Number of jobs returned")
    counts: dict[str, int] = Field(default_factory=dict, description="Job count per status")
