"""Utility functions and helpers."""

from homeleads.utils.responses import success, created, error, validation_error, not_found
from homeleads.utils.auth import get_auth_context, require_admin, AuthContext
from homeleads.utils.exceptions import (
    HomeleadsError,
    NotFoundError,
    ValidationError,
    UnauthorizedError,
    ForbiddenError,
    ConflictError,
    DependencyError,
    PageRedirect,
)

__all__ = [
    # Response helpers
    "success",
    "created",
    "error",
    "validation_error",
    "not_found",
    # Auth
    "get_auth_context",
    "require_admin",
    "AuthContext",
    # Exceptions
    "HomeleadsError",
    "NotFoundError",
    "ValidationError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "DependencyError",
    "PageRedirect",
]
