"""
API Dependencies package.

Request-scoped access to shared application objects.
"""

from .service import get_service

__all__ = ["get_service"]
