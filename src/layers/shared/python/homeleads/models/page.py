"""Landing page model and the resolved public content value.

LandingPage Key Pattern:
    PK: PAGE#{id}
    SK: META
    GSI1PK: PAGE_SLUG#{domain_id}
    GSI1SK: {slug}
    GSI2PK: ENTITY#PAGE
    GSI2SK: {slug}#{domain_id}

Slug reservation (uniqueness of (domain_id, slug)):
    PK: SLUG#{domain_id}
    SK: SLUG#{slug}
"""

import re
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel as PydanticBaseModel, ConfigDict, Field, field_validator

from homeleads.models.base import BaseModel
from homeleads.models.blocks import BlockConfig, SectionConfig
from homeleads.models.form import FormSchema
from homeleads.models.layout import LayoutItem
from homeleads.models.template import LandingPageType

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

DEFAULT_CTA_TEXT = "Get Access"
DEFAULT_SUCCESS_MESSAGE = "Thank you! We'll be in touch shortly."

# Preview slugs served on any hostname
MASTER_PAGE_SLUGS = {
    LandingPageType.BUYER.value: "master-buyer",
    LandingPageType.SELLER.value: "master-seller",
}


class PageStatus(str, Enum):
    """Page publication status."""

    DRAFT = "draft"
    PUBLISHED = "published"


class HeadTag(PydanticBaseModel):
    """A custom <meta name=... content=...> tag."""

    name: str
    content: str


def _clean_slug(v: str) -> str:
    v = v.strip().lower()
    if not v:
        raise ValueError("Slug cannot be empty.")
    if not SLUG_PATTERN.match(v):
        raise ValueError("Slug may only contain lowercase letters, numbers and hyphens.")
    return v


class LandingPage(BaseModel):
    """A tenant landing page."""

    _pk_prefix: ClassVar[str] = "PAGE#"

    domain_id: str = Field(..., description="Owning domain")
    master_template_id: str | None = Field(None, description="Template the page was seeded from")
    slug: str = Field(..., min_length=1, max_length=100)
    type: LandingPageType
    status: PageStatus = PageStatus.DRAFT

    headline: str = Field(..., min_length=1, max_length=300)
    subheadline: str | None = None
    hero_image_url: str | None = None
    cta_text: str = DEFAULT_CTA_TEXT
    success_message: str = DEFAULT_SUCCESS_MESSAGE

    sections: list[SectionConfig] = Field(default_factory=list)
    blocks: list[BlockConfig] | None = Field(None, description="Visual editor block list")
    form_schema: FormSchema | None = None

    # SEO
    seo_title: str | None = Field(None, max_length=200)
    seo_description: str | None = Field(None, max_length=500)
    seo_keywords: list[str] | None = None
    og_image_url: str | None = None
    og_type: str | None = None
    twitter_card: str | None = None
    canonical_url: str | None = None
    no_index: bool = False
    schema_markup: dict[str, Any] | None = None
    custom_head_tags: list[HeadTag] | None = None

    multistep_step_slugs: list[str] | None = Field(
        None,
        description="Ordered funnel steps; index 0 is the entry page",
    )

    def get_index_keys(self) -> dict[str, str]:
        return {
            "GSI1PK": f"PAGE_SLUG#{self.domain_id}",
            "GSI1SK": self.slug,
            "GSI2PK": "ENTITY#PAGE",
            "GSI2SK": f"{self.slug}#{self.domain_id}",
        }

    @property
    def is_published(self) -> bool:
        return self.status == PageStatus.PUBLISHED.value


class DomainBranding(PydanticBaseModel):
    """Domain fields exposed to the renderer."""

    hostname: str
    display_name: str
    logo_url: str | None = None
    right_logo_url: str | None = None
    primary_color: str
    accent_color: str
    ga4_id: str | None = None
    meta_pixel_id: str | None = None


class SeoSettings(PydanticBaseModel):
    """SEO block of a resolved page."""

    title: str | None = None
    description: str | None = None
    keywords: list[str] | None = None
    og_image_url: str | None = None
    og_type: str | None = None
    twitter_card: str | None = None
    canonical_url: str | None = None
    no_index: bool = False
    schema_markup: dict[str, Any] | None = None
    custom_head_tags: list[HeadTag] | None = None


class LandingPageContent(PydanticBaseModel):
    """Everything needed to render one public page."""

    model_config = ConfigDict(use_enum_values=True)

    id: str
    slug: str
    type: LandingPageType
    headline: str
    subheadline: str | None = None
    hero_image_url: str | None = None
    cta_text: str
    success_message: str
    sections: list[SectionConfig] = Field(default_factory=list)
    blocks: list[BlockConfig] | None = None
    form_schema: FormSchema | None = None
    domain: DomainBranding
    seo: SeoSettings = Field(default_factory=SeoSettings)
    page_layout: list[LayoutItem] | None = None
    multistep_step_slugs: list[str] | None = None
    multistep_steps: list["LandingPageContent"] | None = None

    @property
    def page_title(self) -> str:
        return self.seo.title or self.headline

    @property
    def canonical(self) -> str:
        return self.seo.canonical_url or f"https://{self.domain.hostname}/{self.slug}"


class CreatePageRequest(PydanticBaseModel):
    """Request model for creating a page from its master template."""

    domain_id: str = Field(..., min_length=1)
    slug: str = Field(..., max_length=100)
    type: LandingPageType
    headline: str = Field(..., min_length=1, max_length=300)
    subheadline: str | None = None

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str) -> str:
        return _clean_slug(v)

    @field_validator("headline")
    @classmethod
    def validate_headline(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Headline cannot be empty.")
        return v


class UpdatePageRequest(PydanticBaseModel):
    """Partial page update. Only supplied fields are applied."""

    slug: str | None = Field(None, max_length=100)
    type: LandingPageType | None = None
    status: PageStatus | None = None
    headline: str | None = Field(None, min_length=1, max_length=300)
    subheadline: str | None = None
    hero_image_url: str | None = None
    cta_text: str | None = None
    success_message: str | None = None
    sections: list[SectionConfig] | None = None
    blocks: list[BlockConfig] | None = None
    form_schema: FormSchema | None = None
    seo_title: str | None = None
    seo_description: str | None = None
    seo_keywords: list[str] | None = None
    og_image_url: str | None = None
    og_type: str | None = None
    twitter_card: str | None = None
    canonical_url: str | None = None
    no_index: bool | None = None
    schema_markup: dict[str, Any] | None = None
    custom_head_tags: list[HeadTag] | None = None
    multistep_step_slugs: list[str] | None = None
    layout_data: list[LayoutItem] | None = Field(None, description="Upserts the PageLayout when non-empty")

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str | None) -> str | None:
        return _clean_slug(v) if v is not None else v

    @field_validator("multistep_step_slugs")
    @classmethod
    def validate_step_slugs(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return [_clean_slug(s) for s in v if s and s.strip()]

    def page_changes(self) -> dict[str, Any]:
        """Fields to copy onto the page (excludes layout_data)."""
        return self.model_dump(exclude_unset=True, exclude={"layout_data"})


class DuplicatePageRequest(PydanticBaseModel):
    """Copy a page, optionally to another domain or slug."""

    page_id: str = Field(..., min_length=1)
    domain_id: str | None = None
    slug: str | None = Field(None, max_length=100)

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str | None) -> str | None:
        return _clean_slug(v) if v is not None else v
