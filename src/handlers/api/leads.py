"""Leads API handler.

The submit route is public (posted by landing page forms); the rest
require an administrator.
"""

import json
import os
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from homeleads.models.lead import UpdateLeadRequest
from homeleads.repositories.lead import LeadRepository
from homeleads.services.lead_service import LeadService, VisitorInfo
from homeleads.utils.auth import require_admin
from homeleads.utils.exceptions import (
    DependencyError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from homeleads.utils.rate_limiter import check_rate_limit, get_client_ip, rate_limit_response
from homeleads.utils.responses import (
    PUBLIC_CORS_HEADERS,
    error,
    forbidden,
    not_found,
    success,
    unauthorized,
    validation_error,
)

logger = structlog.get_logger()

LEAD_SUBMIT_PER_MINUTE = int(os.environ.get("LEAD_SUBMIT_PER_MINUTE", "5"))
LEAD_SUBMIT_PER_HOUR = int(os.environ.get("LEAD_SUBMIT_PER_HOUR", "30"))


def handler(event: dict[str, Any], context: Any) -> dict:
    """Handle leads API requests.

    Routes:
        POST  /public/leads              - Submit a lead (public)
        GET   /admin/leads?page_id=...   - Recent leads
        GET   /admin/leads/{lead_id}
        PATCH /admin/leads/{lead_id}     - Update status
    """
    http_method = event.get("httpMethod", "").upper()
    path = event.get("path", "")

    if path.startswith("/public/"):
        if http_method == "OPTIONS":
            return success({}, headers=PUBLIC_CORS_HEADERS)
        if http_method == "POST":
            return submit_lead(event)
        return error("Method not allowed", 405, headers=PUBLIC_CORS_HEADERS)

    try:
        path_params = event.get("pathParameters", {}) or {}
        lead_id = path_params.get("lead_id")

        require_admin(event)
        repo = LeadRepository()

        if http_method == "GET" and lead_id:
            return get_lead(repo, lead_id)
        elif http_method == "GET":
            return list_leads(repo, event)
        elif http_method == "PATCH" and lead_id:
            return update_lead(repo, lead_id, event)
        else:
            return error("Method not allowed", 405)

    except ValidationError as e:
        return validation_error(e.errors)
    except NotFoundError as e:
        return not_found(e.resource_type, e.resource_id)
    except UnauthorizedError as e:
        return unauthorized(e.message)
    except ForbiddenError as e:
        return forbidden(e.message)
    except Exception as e:
        logger.exception("Leads handler error", error=str(e))
        return error("Internal server error", 500)


def submit_lead(event: dict, service: LeadService | None = None) -> dict:
    """Accept a public form submission.

    Honeypot submissions are acknowledged before the rate limit is
    consulted and never count toward it.
    """
    try:
        body = json.loads(event.get("body") or "{}")
    except json.JSONDecodeError:
        return error("Invalid JSON body", 400, headers=PUBLIC_CORS_HEADERS)

    if isinstance(body, dict) and body.get("website"):
        logger.info("Honeypot submission discarded")
        return success({"ok": True}, headers=PUBLIC_CORS_HEADERS)

    client_ip = get_client_ip(event)
    rate_check = check_rate_limit(
        identifier=client_ip,
        action="lead_submit",
        requests_per_minute=LEAD_SUBMIT_PER_MINUTE,
        requests_per_hour=LEAD_SUBMIT_PER_HOUR,
    )
    if not rate_check.allowed:
        return rate_limit_response(rate_check.retry_after or 60)

    headers = {k.lower(): v for k, v in (event.get("headers") or {}).items()}
    visitor = VisitorInfo(
        ip=client_ip if client_ip != "unknown" else None,
        user_agent=headers.get("user-agent"),
        referrer=headers.get("referer"),
    )

    try:
        service = service or LeadService()
        service.submit(body, visitor)
    except ValidationError as e:
        return validation_error(e.errors, headers=PUBLIC_CORS_HEADERS)
    except DependencyError as e:
        return error(e.message, 400, error_code="CAPTCHA_FAILED", headers=PUBLIC_CORS_HEADERS)
    except Exception as e:
        logger.exception("Lead submission error", error=str(e))
        return error("Internal server error", 500, headers=PUBLIC_CORS_HEADERS)

    return success({"ok": True}, headers=PUBLIC_CORS_HEADERS)


def get_lead(repo: LeadRepository, lead_id: str) -> dict:
    lead = repo.get_by_id(lead_id)
    if not lead:
        return not_found("Lead", lead_id)
    return success(lead.model_dump(mode="json"))


def list_leads(repo: LeadRepository, event: dict) -> dict:
    """List leads, most recent first."""
    query_params = event.get("queryStringParameters", {}) or {}
    page_id = query_params.get("page_id")
    try:
        limit = min(int(query_params.get("limit", 50)), 200)
    except ValueError:
        raise ValidationError([{"field": "limit", "message": "limit must be a number"}])

    if page_id:
        leads = repo.list_by_page(page_id, limit=limit)
    else:
        leads, _ = repo.list_recent(limit=limit)

    return success({"items": [lead.model_dump(mode="json") for lead in leads]})


def update_lead(repo: LeadRepository, lead_id: str, event: dict) -> dict:
    """Change a lead's follow-up status."""
    lead = repo.get_by_id(lead_id)
    if not lead:
        return not_found("Lead", lead_id)

    try:
        body = json.loads(event.get("body") or "{}")
        request = UpdateLeadRequest.model_validate(body)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e
    except json.JSONDecodeError:
        return error("Invalid JSON body", 400)

    lead = repo.update_status(lead, request.status)
    logger.info("Lead status updated", lead_id=lead.id, status=lead.status)
    return success(lead.model_dump(mode="json"))
