"""Lead fan-out worker.

Consumes ``lead_created`` messages and delivers each lead to the
configured webhooks and the domain's agent. Deliveries are attempted
once; only failures before delivery starts are returned to SQS.
"""

import asyncio
import json
from typing import Any

import structlog

from homeleads.repositories import DomainRepository, LeadRepository, PageRepository
from homeleads.services.notification_service import NotificationService
from homeleads.services.webhook_service import WebhookService

logger = structlog.get_logger()


def handler(event: dict[str, Any], context: Any) -> dict:
    """Process SQS lead fan-out messages.

    Args:
        event: SQS event.
        context: Lambda context.

    Returns:
        Batch item failures for partial retry.
    """
    records = event.get("Records", [])
    batch_item_failures = []

    logger.info("Processing lead fan-out messages", record_count=len(records))

    webhooks = WebhookService()
    notifications = NotificationService()

    for record in records:
        try:
            lead_id = json.loads(record.get("body") or "{}").get("lead_id")
            loaded = load_lead(lead_id)
        except Exception as e:
            logger.exception("Failed to load lead for fan-out", message_id=record.get("messageId"), error=str(e))
            batch_item_failures.append({"itemIdentifier": record.get("messageId")})
            continue

        if loaded is None:
            continue

        asyncio.run(fan_out(*loaded, webhooks=webhooks, notifications=notifications))

    return {"batchItemFailures": batch_item_failures}


def load_lead(lead_id: str | None):
    """Lead with its domain and page, or None when any is gone."""
    if not lead_id:
        logger.warning("Fan-out message without lead id")
        return None

    lead = LeadRepository().get_by_id(lead_id)
    if not lead:
        logger.warning("Lead not found for fan-out", lead_id=lead_id)
        return None

    domain = DomainRepository().get_by_id(lead.domain_id)
    page = PageRepository().get_by_id(lead.page_id)
    if not domain or not page:
        logger.warning("Lead domain or page missing", lead_id=lead_id)
        return None

    return lead, domain, page


async def fan_out(
    lead,
    domain,
    page,
    webhooks: WebhookService,
    notifications: NotificationService,
) -> None:
    """Deliver webhooks and notifications concurrently."""
    results = await asyncio.gather(
        webhooks.dispatch_lead_to_webhooks(lead, domain, page),
        notifications.send_lead_notifications(lead, domain, page),
        return_exceptions=True,
    )
    for name, result in zip(("webhooks", "notifications"), results):
        if isinstance(result, BaseException):
            logger.error("Lead fan-out step failed", lead_id=lead.id, step=name, error=str(result))
