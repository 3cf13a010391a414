"""
Jobs router for job management API.

- POST /jobs - Submit a job
- GET /jobs - List jobs (optionally by status)
- GET /jobs/{job_id} - Get job status
- DELETE /jobs/{job_id} - Cancel a PENDING job
- POST /jobs/{job_id}/process - Claim and execute one job synchronously

Error mapping:
- ValidationError / malformed id -> 400
- JobNotFoundError -> 404
- InvalidTransitionError / NotEligibleError -> 409
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from src.jobqueue import (
    InvalidTransitionError,
    Job,
    JobNotFoundError,
    JobQueueService,
    JobStatus,
    NotEligibleError,
    ValidationError,
)

from ..dependencies.service import get_service
from ..schemas.jobs import (
    JobConfigResponse,
    JobDataResponse,
    JobListResponse,
    JobResponse,
    JobSubmitRequest,
)


logger = logging.getLogger(__name__)

router = APIRouter()


def _job_to_response(job: Job) -> JobResponse:
    """Convert a Job snapshot to API response."""
    return JobResponse(
        id=job.id,
        status=job.status.value,
        execution_time=job.execution_time,
        result=job.result.to_dict() if job.result is not None else None,
        data=JobDataResponse(
            type=job.type,
            payload=dict(job.payload),
            config=JobConfigResponse(delay=job.config.delay),
        ),
        created_at=job.created_at,
        eligible_at=job.eligible_at,
        started_at=job.started_at,
        finished_at=job.finished_at,
    )


def _validate_job_id(job_id: str) -> None:
    try:
        uuid.UUID(job_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Job ID must be a valid UUID")


@router.post("", response_model=JobResponse, status_code=201)
async def submit_job(
    request: JobSubmitRequest,
    service: JobQueueService = Depends(get_service),
):
    """
    Submit a new job.

    The job is PENDING until its delay elapses, then the dispatch loop
    claims it in submission order.
    """
    config = request.config.model_dump() if request.config is not None else None

    try:
        job = service.submit(request.type.strip(), request.payload, config=config)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _job_to_response(job)


@router.get("", response_model=JobListResponse)
async def list_jobs(
    status: Optional[JobStatus] = Query(default=None, description="Filter by status"),
    service: JobQueueService = Depends(get_service),
):
    """List jobs in submission order."""
    jobs = service.list_jobs(status)
    counts = service.repository.count_by_status()

    return JobListResponse(
        jobs=[_job_to_response(job) for job in jobs],
        total=len(jobs),
        counts={s.value: c for s, c in counts.items()},
    )


@router.get("/{job_id}", response_model=JobResponse)
async def get_job_status(
    job_id: str,
    service: JobQueueService = Depends(get_service),
):
    """Get a job by ID."""
    _validate_job_id(job_id)

    try:
        job = service.get_status(job_id)
    except JobNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return _job_to_response(job)


@router.delete("/{job_id}", response_model=JobResponse)
async def cancel_job(
    job_id: str,
    service: JobQueueService = Depends(get_service),
):
    """
    Cancel a job.

    Only PENDING jobs can be cancelled; RUNNING jobs run to completion.
    """
    _validate_job_id(job_id)

    try:
        job = service.cancel(job_id)
    except JobNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidTransitionError as e:
        raise HTTPException(
            status_code=409,
            detail=f"{e}. Only pending jobs can be cancelled.",
        )

    return _job_to_response(job)


@router.post("/{job_id}/process", response_model=JobResponse)
def process_job(
    job_id: str,
    service: JobQueueService = Depends(get_service),
):
    """
    Claim and execute one job immediately, bypassing the dispatch loop.

    Blocks for the duration of the execution.
    """
    _validate_job_id(job_id)

    try:
        job = service.process_by_id(job_id)
    except JobNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (NotEligibleError, InvalidTransitionError) as e:
        raise HTTPException(status_code=409, detail=str(e))

    return _job_to_response(job)
