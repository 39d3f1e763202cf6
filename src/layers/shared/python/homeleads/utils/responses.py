"""API Gateway response helpers."""

import json
import os
from datetime import datetime
from typing import Any

from pydantic import BaseModel as PydanticBaseModel

# Admin UI origin; localhost is additionally accepted in dev
_ALLOWED_ORIGIN = os.environ.get("CORS_ALLOWED_ORIGIN", "https://admin.dev.homeleads.io")
_STAGE = os.environ.get("STAGE", "dev")

# Applied to every rendered landing page
HTML_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Content-Security-Policy": (
        "default-src 'self'; "
        "script-src 'self' 'unsafe-inline' https://www.googletagmanager.com "
        "https://connect.facebook.net https://www.google.com https://www.gstatic.com https://cdn.tailwindcss.com; "
        "style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data: https:; "
        "connect-src 'self' https:; "
        "frame-src https://www.google.com; "
        "frame-ancestors 'self'"
    ),
}


def _get_cors_origin(request_origin: str | None = None) -> str:
    if _STAGE == "dev" and request_origin:
        if request_origin.startswith("http://localhost:"):
            return request_origin

    return _ALLOWED_ORIGIN


def get_cors_headers(request_origin: str | None = None) -> dict:
    """Get CORS headers with the appropriate origin."""
    return {
        "Access-Control-Allow-Origin": _get_cors_origin(request_origin),
        "Access-Control-Allow-Headers": "Content-Type,Authorization,X-Amz-Date,X-Api-Key,X-Amz-Security-Token",
        "Access-Control-Allow-Methods": "GET,POST,PATCH,DELETE,OPTIONS",
        "Access-Control-Allow-Credentials": "true",
        "Content-Type": "application/json",
    }


CORS_HEADERS = get_cors_headers()

# Public lead form is posted from any tenant hostname
PUBLIC_CORS_HEADERS = {
    **CORS_HEADERS,
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Credentials": "false",
}


def _json_serializer(obj: Any) -> Any:
    """JSON serializer for objects not serializable by default."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, PydanticBaseModel):
        return obj.model_dump(mode="json")
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def _serialize(data: Any) -> str:
    return json.dumps(data, default=_json_serializer)


def success(data: Any, status_code: int = 200, headers: dict | None = None) -> dict:
    """Create a successful API response.

    Args:
        data: Response data (dict, list, or Pydantic model).
        status_code: HTTP status code (default 200).
        headers: Headers to use instead of the admin CORS headers.

    Returns:
        API Gateway response dict.
    """
    if isinstance(data, PydanticBaseModel):
        body = data.model_dump(mode="json")
    else:
        body = data

    return {
        "statusCode": status_code,
        "headers": headers or CORS_HEADERS,
        "body": _serialize(body),
    }


def created(data: Any) -> dict:
    """Create a 201 Created response."""
    return success(data, status_code=201)



def error(
    message: str,
    status_code: int = 500,
    error_code: str | None = None,
    details: dict | None = None,
    headers: dict | None = None,
) -> dict:
    """Create an error API response.

    Args:
        message: Error message.
        status_code: HTTP status code.
        error_code: Machine-readable error code.
        details: Additional error details.
        headers: Headers to use instead of the admin CORS headers.

    Returns:
        API Gateway response dict.
    """
    body: dict[str, Any] = {
        "error": True,
        "message": message,
    }

    if error_code:
        body["error_code"] = error_code
    if details:
        body["details"] = details

    return {
        "statusCode": status_code,
        "headers": headers or CORS_HEADERS,
        "body": _serialize(body),
    }


def validation_error(errors: list[dict], headers: dict | None = None) -> dict:
    """Create a validation error response.

    The first error's message is surfaced as the top-level message so
    clients can display it directly.

    Args:
        errors: List of validation errors with field and message.
        headers: Optional header override.

    Returns:
        API Gateway response dict.
    """
    message = errors[0]["message"] if errors else "Validation failed"
    return error(
        message=message,
        status_code=400,
        error_code="VALIDATION_ERROR",
        details={"errors": errors},
        headers=headers,
    )


def not_found(resource_type: str, resource_id: str) -> dict:
    """Create a 404 Not Found response."""
    return error(
        message=f"{resource_type} with ID '{resource_id}' not found",
        status_code=404,
        error_code="NOT_FOUND",
        details={"resource_type": resource_type, "resource_id": resource_id},
    )


def unauthorized(message: str = "Authentication required") -> dict:
    """Create a 401 Unauthorized response."""
    return error(message=message, status_code=401, error_code="UNAUTHORIZED")


def forbidden(message: str = "You don't have permission to perform this action") -> dict:
    """Create a 403 Forbidden response."""
    return error(message=message, status_code=403, error_code="FORBIDDEN")


def conflict(message: str = "Resource conflict") -> dict:
    """Create a 409 Conflict response."""
    return error(message=message, status_code=409, error_code="CONFLICT")


def html(body: str, status_code: int = 200, cache_seconds: int = 60) -> dict:
    """Create an HTML response for a public landing page.

    Args:
        body: Rendered HTML document.
        status_code: HTTP status code.
        cache_seconds: Shared cache lifetime; 0 disables caching.

    Returns:
        API Gateway response dict.
    """
    cache_control = (
        f"public, max-age=0, s-maxage={cache_seconds}, stale-while-revalidate=300"
        if cache_seconds
        else "no-store"
    )
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "text/html; charset=utf-8",
            "Cache-Control": cache_control,
            **HTML_SECURITY_HEADERS,
        },
        "body": body,
    }


def redirect(location: str, status_code: int = 302) -> dict:
    """Create a redirect response."""
    return {
        "statusCode": status_code,
        "headers": {
            "Location": location,
            "Cache-Control": "no-store",
        },
        "body": "",
    }


def paginated(items: list[Any], next_cursor: str | None = None, limit: int | None = None) -> dict:
    """Create a cursor-paginated list response."""
    body: dict[str, Any] = {"items": items, "pagination": {}}
    if limit is not None:
        body["pagination"]["limit"] = limit
    if next_cursor:
        body["pagination"]["next_cursor"] = next_cursor
    return success(body)
