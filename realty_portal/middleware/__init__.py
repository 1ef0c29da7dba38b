"""
Middleware package for the Realty Portal API.
"""

from .request_logging import RequestLoggingMiddleware

__all__ = [
    "RequestLoggingMiddleware"
]
