"""Service classes for business logic."""

from homeleads.services.captcha_service import CaptchaResult, CaptchaService
from homeleads.services.cdn_service import CdnService
from homeleads.services.email_service import EmailError, EmailService
from homeleads.services.lead_dispatcher import LeadDispatcher, SqsLeadDispatcher
from homeleads.services.lead_service import LeadService, SubmissionResult, VisitorInfo
from homeleads.services.notification_service import NotificationService
from homeleads.services.page_renderer import render_landing_page, render_not_found_page
from homeleads.services.page_resolver import PageResolver
from homeleads.services.page_service import PageService
from homeleads.services.twilio_service import TwilioError, TwilioService
from homeleads.services.webhook_service import DeliveryResult, WebhookService

__all__ = [
    "CaptchaResult",
    "CaptchaService",
    "CdnService",
    "DeliveryResult",
    "EmailError",
    "EmailService",
    "LeadDispatcher",
    "LeadService",
    "NotificationService",
    "PageResolver",
    "PageService",
    "SqsLeadDispatcher",
    "SubmissionResult",
    "TwilioError",
    "TwilioService",
    "VisitorInfo",
    "WebhookService",
    "render_landing_page",
    "render_not_found_page",
]
