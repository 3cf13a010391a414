"""
Infrastructure module - settings and logging.
"""

from .logging_config import setup_logging
from .settings import JobQueueSettings

__all__ = [
    # logging
    "setup_logging",
    # settings
    "JobQueueSettings",
]
