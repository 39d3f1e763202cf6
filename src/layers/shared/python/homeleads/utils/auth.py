"""Authentication context helpers.

Admin endpoints sit behind an API Gateway authorizer; handlers only read
the identity it has already established.
"""

from dataclasses import dataclass, field
from typing import Any

import structlog

from homeleads.utils.exceptions import ForbiddenError, UnauthorizedError

logger = structlog.get_logger()

ADMIN_GROUP = "admin"


@dataclass
class AuthContext:
    """Identity extracted from an API Gateway event."""

    user_id: str
    email: str | None = None
    groups: list[str] = field(default_factory=list)
    is_admin: bool = False


def get_auth_context(event: dict[str, Any]) -> AuthContext:
    """Extract authentication context from API Gateway event.

    Args:
        event: API Gateway event dict.

    Returns:
        AuthContext with user information.

    Raises:
        UnauthorizedError: If no identity is present.
    """
    request_context = event.get("requestContext", {}) or {}
    authorizer = request_context.get("authorizer", {}) or {}

    # Lambda authorizers nest the context under "lambda" in payload v2
    context = authorizer.get("lambda", authorizer)
    claims = authorizer.get("claims", {}) or {}

    user_id = context.get("userId") or context.get("user_id") or claims.get("sub")
    if not user_id:
        logger.warning("No user ID in auth context")
        raise UnauthorizedError()

    groups_raw = context.get("groups") or claims.get("cognito:groups") or []
    if isinstance(groups_raw, str):
        groups = [g.strip() for g in groups_raw.split(",") if g.strip()]
    else:
        groups = list(groups_raw)

    is_admin = context.get("isAdmin", False)
    if isinstance(is_admin, str):
        is_admin = is_admin.lower() == "true"

    return AuthContext(
        user_id=user_id,
        email=context.get("email") or claims.get("email"),
        groups=groups,
        is_admin=bool(is_admin) or ADMIN_GROUP in groups,
    )


def require_admin(event: dict[str, Any]) -> AuthContext:
    """Ensure the caller is an administrator.

    Raises:
        UnauthorizedError: If unauthenticated.
        ForbiddenError: If authenticated without admin rights.
    """
    auth = get_auth_context(event)
    if not auth.is_admin:
        logger.warning("Admin access denied", user_id=auth.user_id)
        raise ForbiddenError(
            message="Administrator access required",
            resource_type="Admin",
            action="access",
        )
    return auth
