"""Public lead capture.

Validates a submission, stores it against its domain and page, then
hands the lead to the fan-out dispatcher. Delivery to webhooks and
agents happens in the worker, never in the request.
"""

import json
from dataclasses import dataclass
from typing import Any

import structlog

from homeleads.models.lead import STEP_KEY_PATTERN, Lead
from homeleads.models.template import LandingPageType
from homeleads.repositories import DomainRepository, LeadRepository, PageRepository
from homeleads.services.captcha_service import CaptchaService
from homeleads.services.lead_dispatcher import LeadDispatcher, SqsLeadDispatcher
from homeleads.utils.exceptions import DependencyError, ValidationError

logger = structlog.get_logger()

# Routing and control fields never stored in form data
_CONTROL_KEYS = ("domain", "slug", "type", "recaptchaToken", "website")
MULTISTEP_KEY = "_multistepData"
UTM_FIELDS = ("utm_source", "utm_medium", "utm_campaign")


@dataclass
class VisitorInfo:
    ip: str | None = None
    user_agent: str | None = None
    referrer: str | None = None


@dataclass
class SubmissionResult:
    """Outcome of a submission. ``lead`` is None for discarded spam."""

    lead: Lead | None = None
    queued: bool = False


def merge_multistep(form_data: dict[str, Any]) -> dict[str, Any]:
    """Fold earlier funnel answers into the final step's submission.

    Earlier steps keep their ``stepN`` keys; the final fields land one
    step past the highest earlier index. Malformed step data is ignored
    and the submission is stored flat.
    """
    data = dict(form_data)
    raw = data.pop(MULTISTEP_KEY, None)
    if not raw:
        return data

    try:
        prior = json.loads(raw) if isinstance(raw, str) else raw
    except ValueError:
        logger.warning("Ignoring malformed multistep data")
        return data
    if not isinstance(prior, dict):
        logger.warning("Ignoring malformed multistep data")
        return data

    steps = {k: v for k, v in prior.items() if STEP_KEY_PATTERN.match(k) and isinstance(v, dict)}
    if not steps:
        return data

    ordered = dict(sorted(steps.items(), key=lambda kv: int(kv[0][4:])))
    final_index = max(int(key[4:]) for key in ordered) + 1
    ordered[f"step{final_index}"] = data
    return ordered


def extract_utm(form_data: dict[str, Any]) -> dict[str, str]:
    return {k: v for k in UTM_FIELDS if isinstance(v := form_data.get(k), str) and v}


class LeadService:
    """Accepts public form submissions."""

    def __init__(
        self,
        domain_repo: DomainRepository | None = None,
        page_repo: PageRepository | None = None,
        lead_repo: LeadRepository | None = None,
        captcha: CaptchaService | None = None,
        dispatcher: LeadDispatcher | None = None,
    ):
        self.domain_repo = domain_repo or DomainRepository()
        self.page_repo = page_repo or PageRepository()
        self.lead_repo = lead_repo or LeadRepository()
        self.captcha = captcha or CaptchaService()
        self.dispatcher = dispatcher or SqsLeadDispatcher()

    def submit(self, body: dict[str, Any], visitor: VisitorInfo | None = None) -> SubmissionResult:
        """Store a lead and schedule its fan-out.

        Args:
            body: Submitted JSON body.
            visitor: Request metadata stored with the lead.

        Returns:
            SubmissionResult; ``lead`` is None when the honeypot was filled.

        Raises:
            ValidationError: Missing routing fields, unknown domain or page.
            DependencyError: CAPTCHA verification failed.
        """
        if not isinstance(body, dict):
            raise ValidationError("Invalid request body")

        if body.get("website"):
            logger.info("Honeypot submission discarded")
            return SubmissionResult()

        hostname, slug, lead_type = body.get("domain"), body.get("slug"), body.get("type")
        if not hostname or not slug or not lead_type:
            raise ValidationError("Missing domain, slug, or type")

        result = self.captcha.verify(body.get("recaptchaToken"))
        if not result.ok:
            raise DependencyError("Failed CAPTCHA verification", dependency="recaptcha")

        domain = self.domain_repo.find_by_hostname(str(hostname))
        if not domain:
            raise ValidationError("Unknown domain")

        page = self.page_repo.get_published(domain.id, str(slug))
        if not page:
            raise ValidationError("Unknown landing page")

        try:
            lead_type = LandingPageType(str(lead_type)).value
        except ValueError as e:
            raise ValidationError([{"field": "type", "message": "Unknown lead type"}]) from e

        form_data = {k: v for k, v in body.items() if k not in _CONTROL_KEYS}
        utm = extract_utm(form_data)
        form_data = merge_multistep(form_data)

        visitor = visitor or VisitorInfo()
        lead = Lead(
            domain_id=domain.id,
            page_id=page.id,
            type=lead_type,
            form_data=form_data,
            visitor_ip=visitor.ip,
            visitor_user_agent=visitor.user_agent,
            referrer=visitor.referrer,
            **utm,
        )
        lead = self.lead_repo.create_lead(lead)
        logger.info(
            "Lead captured",
            lead_id=lead.id,
            domain_id=domain.id,
            page_id=page.id,
            is_multistep=lead.is_multistep,
            captcha_skipped=result.skipped,
        )

        try:
            queued = self.dispatcher.submit(lead.id)
        except Exception:
            logger.exception("Lead dispatch failed", lead_id=lead.id)
            queued = False
        return SubmissionResult(lead=lead, queued=queued)
