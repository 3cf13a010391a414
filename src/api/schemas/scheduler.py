"""
Scheduler control API schemas.

Supports /scheduler/start, /scheduler/stop and /scheduler/status.
"""

from typing import Optional, Union
from pydantic import BaseModel, Field


class SchedulerActionResponse(BaseModel):
    """Response from scheduler start/stop."""

    success: bool
    message: str
    running: bool = Field(..., description="Whether the dispatch loop is running afterwards")


class SchedulerStatusResponse(BaseModel):
    """Response from scheduler status endpoint."""

    scheduler_running: bool = Field(..., description="Whether the dispatch loop is active")
    total: int = Field(default=0, description="Total number of jobs")
    by_status: dict[str, int] = Field(default_factory=dict, description="Job count per status")
    eligible_count: int = Field(default=0, description="PENDING jobs whose delay has elapsed")
    waiting_count: int = Field(default=0, description="PENDING jobs still waiting on their delay")
    in_flight: int = Field(default=0, description="Jobs currently executing")
    max_concurrency: Optional[int] = Field(default=None, description="Execution cap (null = unbounded)")
    error_count: int = Field(default=0, description="Errors caught by the dispatch loop")
    last_error: Optional[str] = Field(default=None, description="Most recent dispatch loop error")
    next_eligible_at: Optional[Union[int, float]] = Field(
        default=None,
        description="When the next waiting job becomes eligible (epoch ms)",
    )
