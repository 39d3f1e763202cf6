"""Domains API handler (admin, authenticated)."""

import json
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from homeleads.models.domain import CreateDomainRequest, Domain, UpdateDomainRequest
from homeleads.repositories import DomainRepository, PageRepository
from homeleads.utils.auth import require_admin
from homeleads.utils.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from homeleads.utils.responses import (
    conflict,
    created,
    error,
    forbidden,
    not_found,
    success,
    unauthorized,
    validation_error,
)

logger = structlog.get_logger()


def handler(event: dict[str, Any], context: Any) -> dict:
    """Handle domain API requests.

    Routes:
        GET    /admin/domains
        POST   /admin/domains
        GET    /admin/domains/{domain_id}
        PATCH  /admin/domains/{domain_id}
        DELETE /admin/domains/{domain_id}
    """
    try:
        http_method = event.get("httpMethod", "").upper()
        path_params = event.get("pathParameters", {}) or {}
        domain_id = path_params.get("domain_id")

        require_admin(event)
        repo = DomainRepository()

        if http_method == "GET" and domain_id:
            return get_domain(repo, domain_id)
        elif http_method == "GET":
            return list_domains(repo)
        elif http_method == "POST":
            return create_domain(repo, event)
        elif http_method == "PATCH" and domain_id:
            return update_domain(repo, domain_id, event)
        elif http_method == "DELETE" and domain_id:
            return delete_domain(repo, domain_id)
        else:
            return error("Method not allowed", 405)

    except ValidationError as e:
        return validation_error(e.errors)
    except NotFoundError as e:
        return not_found(e.resource_type, e.resource_id)
    except ConflictError as e:
        return conflict(e.message)
    except UnauthorizedError as e:
        return unauthorized(e.message)
    except ForbiddenError as e:
        return forbidden(e.message)
    except json.JSONDecodeError:
        return error("Invalid JSON body", 400)
    except Exception as e:
        logger.exception("Domains handler error", error=str(e))
        return error("Internal server error", 500)


def list_domains(repo: DomainRepository) -> dict:
    domains = repo.list_all()
    return success({"items": [d.model_dump(mode="json") for d in domains]})


def get_domain(repo: DomainRepository, domain_id: str) -> dict:
    domain = repo.get_by_id(domain_id)
    if not domain:
        return not_found("Domain", domain_id)
    return success(domain.model_dump(mode="json"))


def create_domain(repo: DomainRepository, event: dict) -> dict:
    """Register a hostname."""
    try:
        request = CreateDomainRequest.model_validate(json.loads(event.get("body") or "{}"))
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e

    domain = Domain(**request.model_dump(exclude_none=True))
    domain = repo.create_domain(domain)
    return created(domain.model_dump(mode="json"))


def update_domain(repo: DomainRepository, domain_id: str, event: dict) -> dict:
    domain = repo.get_by_id(domain_id)
    if not domain:
        return not_found("Domain", domain_id)

    try:
        request = UpdateDomainRequest.model_validate(json.loads(event.get("body") or "{}"))
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e

    previous_hostname = domain.hostname
    for field, value in request.model_dump(exclude_unset=True).items():
        setattr(domain, field, value)

    domain = repo.update_domain(domain, previous_hostname)
    logger.info("Domain updated", domain_id=domain.id, fields=sorted(request.model_fields_set))
    return success(domain.model_dump(mode="json"))


def delete_domain(repo: DomainRepository, domain_id: str) -> dict:
    """Delete a domain that no longer has pages."""
    domain = repo.get_by_id(domain_id)
    if not domain:
        return not_found("Domain", domain_id)

    if PageRepository().list_by_domain(domain.id):
        raise ConflictError("Delete the domain's pages first.")

    repo.delete_domain(domain)
    logger.info("Domain deleted", domain_id=domain.id, hostname=domain.hostname)
    return success({"ok": True})
