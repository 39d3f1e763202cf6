"""Domain exceptions mapped to HTTP responses by the API handlers."""

from typing import Any


class HomeleadsError(Exception):
    """Base exception for all homeleads errors."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class NotFoundError(HomeleadsError):
    """Requested resource does not exist (or is not servable)."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code="NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ValidationError(HomeleadsError):
    """Input failed validation.

    Args:
        errors: List of {"field": ..., "message": ...} dicts.
    """

    def __init__(self, errors: list[dict[str, str]] | str):
        if isinstance(errors, str):
            errors = [{"field": "", "message": errors}]
        message = errors[0]["message"] if errors else "Validation failed"
        super().__init__(message, code="VALIDATION_ERROR", details={"errors": errors})
        self.errors = errors

    @classmethod
    def from_pydantic(cls, exc: Any) -> "ValidationError":
        """Wrap a pydantic ValidationError raised while parsing input."""
        return cls([
            {
                "field": ".".join(str(x) for x in err["loc"]),
                "message": err["msg"].removeprefix("Value error, "),
            }
            for err in exc.errors()
        ])


class UnauthorizedError(HomeleadsError):
    """Caller is not authenticated."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="UNAUTHORIZED")


class ForbiddenError(HomeleadsError):
    """Caller is authenticated but not allowed to perform the action."""

    def __init__(
        self,
        message: str = "You don't have permission to perform this action",
        resource_type: str | None = None,
        action: str | None = None,
    ):
        super().__init__(
            message,
            code="FORBIDDEN",
            details={"resource_type": resource_type, "action": action},
        )
        self.resource_type = resource_type
        self.action = action


class ConflictError(HomeleadsError):
    """Write rejected because of a uniqueness or concurrency conflict."""

    def __init__(self, message: str = "Resource conflict"):
        super().__init__(message, code="CONFLICT")


class DependencyError(HomeleadsError):
    """An external dependency (CAPTCHA, SES, Twilio, webhook target) failed."""

    def __init__(self, message: str, dependency: str):
        super().__init__(message, code="DEPENDENCY_ERROR", details={"dependency": dependency})
        self.dependency = dependency


class PageRedirect(Exception):
    """Raised by the resolver when the visitor must be sent to another slug."""

    def __init__(self, slug: str):
        super().__init__(slug)
        self.slug = slug

    @property
    def location(self) -> str:
        return f"/{self.slug}"
