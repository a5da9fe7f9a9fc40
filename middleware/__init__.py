"""
Receipegram Middleware
Custom middleware for security and logging
"""

from .security import SecurityMiddleware
from .logging import LoggingMiddleware, get_request_id

__all__ = [
    "SecurityMiddleware",
    "LoggingMiddleware",
    "get_request_id",
]
