"""Repository classes for DynamoDB data access."""

from homeleads.repositories.base import BaseRepository
from homeleads.repositories.domain import DomainRepository
from homeleads.repositories.layout import LayoutRepository
from homeleads.repositories.lead import LeadRepository
from homeleads.repositories.page import PageRepository
from homeleads.repositories.template import TemplateRepository
from homeleads.repositories.webhook import WebhookRepository

__all__ = [
    "BaseRepository",
    "DomainRepository",
    "LayoutRepository",
    "LeadRepository",
    "PageRepository",
    "TemplateRepository",
    "WebhookRepository",
]
