"""Outbound lead webhooks (configured endpoints plus the Zapier hook)."""

import asyncio
import os
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from homeleads.models.domain import Domain
from homeleads.models.lead import Lead
from homeleads.models.page import LandingPage
from homeleads.repositories.webhook import WebhookRepository

logger = structlog.get_logger()


@dataclass
class DeliveryResult:
    name: str
    ok: bool
    status_code: int | None = None
    error: str | None = None


def build_lead_payload(lead: Lead, domain: Domain, page: LandingPage) -> dict[str, Any]:
    """JSON body sent to every webhook target."""
    step_keys = lead.step_keys
    return {
        "id": lead.id,
        "createdAt": lead.created_at.isoformat(),
        "type": lead.type,
        "status": lead.status,
        "formData": lead.form_data,
        "utm": {
            "source": lead.utm_source,
            "medium": lead.utm_medium,
            "campaign": lead.utm_campaign,
        },
        "domain": {
            "hostname": domain.hostname,
            "displayName": domain.display_name,
        },
        "page": {
            "slug": page.slug,
            "headline": page.headline,
            "type": page.type,
        },
        "meta": {
            "isMultistep": bool(step_keys),
            "stepsCount": len(step_keys),
        },
    }


class WebhookService:
    """Delivers a lead to every active webhook concurrently.

    Each target is attempted once. A failing target is logged and does
    not affect the others.
    """

    def __init__(
        self,
        webhook_repo: WebhookRepository | None = None,
        zapier_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.webhook_repo = webhook_repo or WebhookRepository()
        self.zapier_url = zapier_url if zapier_url is not None else os.environ.get("ZAPIER_LEADS_WEBHOOK_URL")
        self.timeout = timeout or float(os.environ.get("WEBHOOK_TIMEOUT_SECONDS", "10"))
        self._transport = transport

    def targets(self) -> list[dict[str, Any]]:
        targets = [
            {"name": hook.name, "url": hook.url, "method": hook.method, "headers": hook.headers or {}}
            for hook in self.webhook_repo.list_active()
        ]
        if self.zapier_url:
            targets.append({"name": "zapier", "url": self.zapier_url, "method": "POST", "headers": {}})
        return targets

    async def _deliver(self, client: httpx.AsyncClient, target: dict[str, Any], payload: dict) -> DeliveryResult:
        name = target["name"]
        try:
            response = await client.request(
                target["method"],
                target["url"],
                json=payload,
                headers={**target["headers"], "Content-Type": "application/json"},
            )
        except httpx.TimeoutException:
            logger.error("Webhook timed out", webhook=name)
            return DeliveryResult(name=name, ok=False, error="timeout")
        except httpx.HTTPError as e:
            logger.error("Webhook request failed", webhook=name, error=str(e))
            return DeliveryResult(name=name, ok=False, error=str(e))

        if response.is_error:
            logger.error("Webhook rejected lead", webhook=name, status_code=response.status_code)
            return DeliveryResult(name=name, ok=False, status_code=response.status_code)

        logger.info("Webhook delivered", webhook=name, status_code=response.status_code)
        return DeliveryResult(name=name, ok=True, status_code=response.status_code)

    async def dispatch_lead_to_webhooks(
        self,
        lead: Lead,
        domain: Domain,
        page: LandingPage,
    ) -> list[DeliveryResult]:
        targets = self.targets()
        if not targets:
            return []

        payload = build_lead_payload(lead, domain, page)
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            results = await asyncio.gather(
                *(self._deliver(client, target, payload) for target in targets)
            )

        logger.info(
            "Lead webhooks dispatched",
            lead_id=lead.id,
            targets=len(results),
            failed=sum(1 for r in results if not r.ok),
        )
        return list(results)
