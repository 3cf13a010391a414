"""
Scheduler router for dispatch loop control.

Endpoints under /scheduler/* for start, stop, and status operations.
Start and stop are idempotent: repeating them reports success=False
with an explanatory message instead of an error.
"""

from fastapi import APIRouter, Depends

from src.jobqueue import JobQueueService

from ..dependencies.service import get_service
from ..schemas.scheduler import SchedulerActionResponse, SchedulerStatusResponse


router = APIRouter()


@router.post("/start", response_model=SchedulerActionResponse)
async def start_scheduler(service: JobQueueService = Depends(get_service)):
    """Start the dispatch loop."""
    started = service.start_loop()

    return SchedulerActionResponse(
        success=started,
        message="Scheduler started successfully" if started else "Scheduler is already running",
        running=service.is_running(),
    )


@router.post("/stop", response_model=SchedulerActionResponse)
def stop_scheduler(service: JobQueueService = Depends(get_service)):
    """
    Stop the dispatch loop.

    Jobs already executing are not interrupted.
    """
    stopped = service.stop_loop()

    return SchedulerActionResponse(
        success=stopped,
        message="Scheduler stopped successfully" if stopped else "Scheduler is already stopped",
        running=service.is_running(),
    )


@router.get("/status", response_model=SchedulerStatusResponse)
async def get_scheduler_status(service: JobQueueService = Depends(get_service)):
    """Get dispatch loop state and queue statistics."""
    stats = service.get_stats()

    return SchedulerStatusResponse(
        scheduler_running=stats["loop_running"],
        total=stats["total"],
        by_status=stats["by_status"],
        eligible_count=stats["eligible_count"],
        waiting_count=stats["waiting_count"],
        in_flight=stats["in_flight"],
        max_concurrency=stats["max_concurrency"],
        error_count=stats["error_count"],
        last_error=stats["last_error"],
        next_eligible_at=stats["next_eligible_at"],
    )
