"""
FastAPI application entry point.

HTTP surface for the deferred job queue. Each application owns one
JobQueueService (kept on app.state); the dispatch loop is started on
startup when JOBQUEUE_AUTO_START is true and stopped on shutdown.

Usage:
    python -m src.api.main
    uvicorn src.api.main:create_app --factory --host 127.0.0.1 --port 3000
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src import __version__
from src.infra.logging_config import setup_logging
from src.infra.settings import JobQueueSettings
from src.jobqueue import JobQueueService

from .routers import jobs, scheduler


logger = logging.getLogger(__name__)

tags_metadata = [
    {
        "name": "jobs",
        "description": "Submit, inspect, cancel and explicitly process deferred jobs",
    },
    {
        "name": "scheduler",
        "description": "Dispatch loop control - start, stop and status",
    },
]


def create_app(
    service: Optional[JobQueueService] = None,
    settings: Optional[JobQueueSettings] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        service: Pre-built service (tests inject their own)
        settings: Settings used when building the service; read from the
            environment when omitted

    Returns:
        Configured FastAPI app
    """
    settings = settings or JobQueueSettings.from_env()
    service = service or JobQueueService.create(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Start the dispatch loop on startup, stop it on shutdown."""
        if settings.auto_start:
            app.state.service.start_loop()

        yield

        if app.state.service.is_running():
            app.state.service.stop_loop()

    app = FastAPI(
        title="Deferred Job Queue API",
        lifespan=lifespan,
        description="""
## Deferred Job Queue API

In-memory job queue with delayed eligibility and simulated execution.

### Lifecycle
`pending` -> `running` -> `completed` | `failed`, or `pending` -> `cancelled`.

### Usage
```bash
curl -X POST http://localhost:3000/jobs \\
  -H "Content-Type: application/json" \\
  -d '{"type": "email", "payload": {"to": "user@example.com"}, "config": {"delay": 5000}}'
```
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=tags_metadata,
    )
    app.state.service = service
    app.state.settings = settings

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed request bodies are client errors (400), not 422."""
        return JSONResponse(
            status_code=400,
            content={"detail": "Invalid request", "errors": jsonable_errors(exc)},
        )

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "worker": {"running": app.state.service.is_running()},
        }

    app.include_router(jobs.router, prefix="/jobs", tags=["jobs"])
    app.include_router(scheduler.router, prefix="/scheduler", tags=["scheduler"])

    return app


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Reduce pydantic error entries to location and message."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]


def main() -> None:
    """Run the API server with settings from the environment."""
    import uvicorn

    settings = JobQueueSettings.from_env()
    setup_logging(settings.log_level, log_dir=settings.log_dir)

    app = create_app(settings=settings)
    logger.info(f"Job queue API listening on http://{settings.api_host}:{settings.api_port}")
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    main()
