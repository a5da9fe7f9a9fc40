"""
Receipegram API Endpoints
All API endpoint modules
"""

# Import all endpoint modules
from . import health, auth, users, recipes

__all__ = [
    "health",
    "auth",
    "users",
    "recipes",
]
