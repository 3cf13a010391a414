"""
JobQueueService dependency.

The service is created by create_app() and kept on app.state, so each
application instance owns its own queue.
"""

from fastapi import Request

from src.jobqueue.service import JobQueueService


def get_service(request: Request) -> JobQueueService:
    """
    Get the JobQueueService bound to the current application.

    Raises:
        RuntimeError: If the application was built without a service
    """
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise RuntimeError(
            "Job queue service not initialized. Build the app with create_app()."
        )
    return service
