"""Webhook configuration API handler (admin, authenticated)."""

import json
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from homeleads.models.webhook import CreateWebhookRequest, UpdateWebhookRequest, WebhookConfig
from homeleads.repositories import WebhookRepository
from homeleads.utils.auth import require_admin
from homeleads.utils.exceptions import ForbiddenError, UnauthorizedError, ValidationError
from homeleads.utils.responses import (
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
    """Handle webhook API requests.

    Routes:
        GET    /admin/webhooks
        POST   /admin/webhooks
        PATCH  /admin/webhooks/{webhook_id}
        DELETE /admin/webhooks/{webhook_id}
    """
    try:
        http_method = event.get("httpMethod", "").upper()
        path_params = event.get("pathParameters", {}) or {}
        webhook_id = path_params.get("webhook_id")

        require_admin(event)
        repo = WebhookRepository()

        if http_method == "GET" and not webhook_id:
            return list_webhooks(repo)
        elif http_method == "POST" and not webhook_id:
            return create_webhook(repo, event)
        elif http_method == "PATCH" and webhook_id:
            return update_webhook(repo, webhook_id, event)
        elif http_method == "DELETE" and webhook_id:
            return delete_webhook(repo, webhook_id)
        else:
            return error("Method not allowed", 405)

    except ValidationError as e:
        return validation_error(e.errors)
    except UnauthorizedError as e:
        return unauthorized(e.message)
    except ForbiddenError as e:
        return forbidden(e.message)
    except json.JSONDecodeError:
        return error("Invalid JSON body", 400)
    except Exception as e:
        logger.exception("Webhooks handler error", error=str(e))
        return error("Internal server error", 500)


def list_webhooks(repo: WebhookRepository) -> dict:
    return success({"items": [w.model_dump(mode="json") for w in repo.list_all()]})


def create_webhook(repo: WebhookRepository, event: dict) -> dict:
    try:
        request = CreateWebhookRequest.model_validate(json.loads(event.get("body") or "{}"))
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e

    webhook = WebhookConfig(**request.model_dump(mode="json"))
    webhook = repo.create(webhook)
    logger.info("Webhook created", webhook_id=webhook.id, name=webhook.name)
    return created(webhook.model_dump(mode="json"))


def update_webhook(repo: WebhookRepository, webhook_id: str, event: dict) -> dict:
    webhook = repo.get_by_id(webhook_id)
    if not webhook:
        return not_found("Webhook", webhook_id)

    try:
        request = UpdateWebhookRequest.model_validate(json.loads(event.get("body") or "{}"))
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e

    for field, value in request.model_dump(mode="json", exclude_unset=True, exclude_none=True).items():
        setattr(webhook, field, value)

    webhook = repo.update(webhook)
    return success(webhook.model_dump(mode="json"))


def delete_webhook(repo: WebhookRepository, webhook_id: str) -> dict:
    if not repo.delete_webhook(webhook_id):
        return not_found("Webhook", webhook_id)
    return success({"ok": True})
