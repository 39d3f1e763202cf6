"""Agent notifications for new leads (email and SMS)."""

import asyncio
from typing import Any

import structlog

from homeleads.models.domain import Domain
from homeleads.models.lead import INTERNAL_FORM_KEYS, Lead
from homeleads.models.page import LandingPage
from homeleads.services.email_service import EmailError, EmailService
from homeleads.services.twilio_service import TwilioError, TwilioService

logger = structlog.get_logger()


def email_subject(lead: Lead, domain: Domain, page: LandingPage) -> str:
    return f"[New {lead.type} lead] {domain.hostname} / {page.slug}"


def email_body(lead: Lead, domain: Domain, page: LandingPage) -> str:
    lines = [f"New {lead.type} lead from {domain.hostname}", f"Page: {page.slug}", ""]
    for key, value in lead.form_data.items():
        if key in INTERNAL_FORM_KEYS:
            continue
        lines.append(f"{key}: {_format_value(value)}")
    return "\n".join(lines)


def _format_value(value: Any) -> str:
    if isinstance(value, dict):
        return ", ".join(f"{k}={_format_value(v)}" for k, v in value.items() if k not in INTERNAL_FORM_KEYS)
    if isinstance(value, list):
        return ", ".join(_format_value(v) for v in value)
    return str(value)


def sms_body(lead: Lead, domain: Domain, page: LandingPage) -> str:
    return f"New {lead.type} lead from {domain.hostname} / {page.slug}"


def lead_email(lead: Lead) -> str | None:
    """The submitted email address, searching funnel steps last to first."""
    sources = [lead.form_data] + [lead.form_data[k] for k in reversed(lead.step_keys)]
    for data in sources:
        value = data.get("email") if isinstance(data, dict) else None
        if isinstance(value, str) and "@" in value:
            return value.strip()
    return None


class NotificationService:
    """Notifies the domain's agent by email and SMS.

    Each channel is skipped when not configured and failures are logged
    per channel.
    """

    def __init__(self, email: EmailService | None = None, sms: TwilioService | None = None):
        self.email = email or EmailService()
        self.sms = sms or TwilioService()

    def _send_email(self, lead: Lead, domain: Domain, page: LandingPage) -> bool:
        if not domain.notify_email:
            return False
        reply_to = lead_email(lead)
        try:
            self.email.send_email(
                to=domain.notify_email,
                subject=email_subject(lead, domain, page),
                body_text=email_body(lead, domain, page),
                reply_to=[reply_to] if reply_to else None,
                sender_name=domain.display_name,
            )
        except EmailError as e:
            logger.error("Lead email notification failed", lead_id=lead.id, error=e.message)
            return False
        return True

    def _send_sms(self, lead: Lead, domain: Domain, page: LandingPage) -> bool:
        if not domain.notify_sms or not self.sms.is_configured:
            return False
        try:
            self.sms.send_sms(to=domain.notify_sms, body=sms_body(lead, domain, page))
        except TwilioError as e:
            logger.error("Lead SMS notification failed", lead_id=lead.id, error=e.message)
            return False
        return True

    async def send_lead_notifications(self, lead: Lead, domain: Domain, page: LandingPage) -> dict[str, bool]:
        """Send both notifications; the blocking clients run in threads."""
        email_sent, sms_sent = await asyncio.gather(
            asyncio.to_thread(self._send_email, lead, domain, page),
            asyncio.to_thread(self._send_sms, lead, domain, page),
        )
        logger.info("Lead notifications sent", lead_id=lead.id, email=email_sent, sms=sms_sent)
        return {"email": email_sent, "sms": sms_sent}
