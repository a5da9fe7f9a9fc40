"""
Receipegram Error Taxonomy
Application errors mapped to HTTP responses by the handlers in main.py
"""

from typing import Optional, Dict


class AppError(Exception):
    """Base error carrying an HTTP status and a client-safe message"""

    status_code: int = 500
    default_message: str = "Something went wrong!"

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        self.message = message or self.default_message
        self.headers = headers
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or invalid required fields"""
    status_code = 400
    default_message = "Invalid request"


class PayloadTooLargeError(ValidationError):
    """Uploaded media exceeds the configured size limit"""
    status_code = 413
    default_message = "File too large"


class AuthError(AppError):
    """Missing, invalid or expired credential on a protected route"""
    status_code = 401
    default_message = "Access token required"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class NotFoundError(AppError):
    """Missing or non-owned resource"""
    status_code = 404
    default_message = "Not found"


class StorageError(AppError):
    """Underlying data-store failure; detail stays in server logs"""
    status_code = 500
    default_message = "Database error"
