"""Pydantic models for homeleads entities."""

from homeleads.models.base import BaseModel, generate_ulid
from homeleads.models.blocks import (
    BlockConfig,
    BlockKind,
    HeroColumn,
    HeroElementConfig,
    HeroElementsByColumn,
    SectionConfig,
    SectionKind,
)
from homeleads.models.domain import Domain, CreateDomainRequest, UpdateDomainRequest
from homeleads.models.form import FormFieldConfig, FormFieldType, FormSchema
from homeleads.models.layout import LayoutItem, PageLayout
from homeleads.models.lead import Lead, LeadStatus, UpdateLeadRequest
from homeleads.models.page import (
    CreatePageRequest,
    DomainBranding,
    DuplicatePageRequest,
    LandingPage,
    LandingPageContent,
    PageStatus,
    SeoSettings,
    UpdatePageRequest,
)
from homeleads.models.template import LandingPageType, MasterTemplate
from homeleads.models.webhook import CreateWebhookRequest, UpdateWebhookRequest, WebhookConfig

__all__ = [
    "BaseModel",
    "generate_ulid",
    "BlockConfig",
    "BlockKind",
    "HeroColumn",
    "HeroElementConfig",
    "HeroElementsByColumn",
    "SectionConfig",
    "SectionKind",
    "Domain",
    "CreateDomainRequest",
    "UpdateDomainRequest",
    "FormFieldConfig",
    "FormFieldType",
    "FormSchema",
    "LayoutItem",
    "PageLayout",
    "Lead",
    "LeadStatus",
    "UpdateLeadRequest",
    "CreatePageRequest",
    "DomainBranding",
    "DuplicatePageRequest",
    "LandingPage",
    "LandingPageContent",
    "PageStatus",
    "SeoSettings",
    "UpdatePageRequest",
    "LandingPageType",
    "MasterTemplate",
    "CreateWebhookRequest",
    "UpdateWebhookRequest",
    "WebhookConfig",
]
