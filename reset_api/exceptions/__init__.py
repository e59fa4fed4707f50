"""
Application exceptions module.

This module provides a clean separation of concerns for error handling:
- Base exceptions define the hierarchy
- CRUD exceptions handle request input and datastore operations
- Auth exceptions handle reset token validation
- HTTP mapping is handled separately in reset_api/core/error_handlers.py
"""

from reset_api.exceptions.base import AppException
from reset_api.exceptions.crud import (
    NotFoundError,
    ValidationInputError,
    PersistenceError,
)
from reset_api.exceptions.auth import (
    InvalidTokenError,
    TokenExpiredError,
)

__all__ = [
    # Base
    "AppException",
    # CRUD
    "NotFoundError",
    "ValidationInputError",
    "PersistenceError",
    # Auth
    "InvalidTokenError",
    "TokenExpiredError",
]
