"""Resolve (hostname, slug) to the content of a servable landing page.

Resolution is a fixed sequence of lookups with short-circuit on the first
match:

1. legacy funnel step -> redirect to the funnel entry
2. published page on the hostname's domain (optionally any domain for the
   default development hostname)
3. funnel steps from the page itself or the legacy candidate table
4. forward-pointer scan: a page whose funnel lists this slug as a later
   step -> redirect to that page
5. optional saved layout, then content assembly (steps one level deep)

Lookups are separate reads with no transaction around them; a concurrent
publish can yield a slightly stale composite.
"""

import os

import structlog
from botocore.exceptions import ClientError

from homeleads.models.domain import Domain, normalize_hostname
from homeleads.models.page import (
    DomainBranding,
    LandingPage,
    LandingPageContent,
    MASTER_PAGE_SLUGS,
    SeoSettings,
)
from homeleads.repositories.domain import DomainRepository
from homeleads.repositories.layout import LayoutRepository
from homeleads.repositories.page import PageRepository
from homeleads.utils.exceptions import HomeleadsError, NotFoundError, PageRedirect

logger = structlog.get_logger()

DEFAULT_DEV_HOSTNAME = os.environ.get("DEFAULT_DEV_HOSTNAME", "bendhomes.us")

LOCAL_HOSTNAMES = frozenset({"localhost", "127.0.0.1"})

# Funnels built before pages could declare multistep_step_slugs. Entry slug
# -> candidate step slugs in order (the entry itself first). Consulted only
# when the entry page has no explicit step list.
LEGACY_FUNNELS: dict[str, tuple[str, ...]] = {
    "market-report": ("market-report", "market-report-2", "market-report-3", "market-report-4"),
    "home-value": ("home-value", "home-value-2", "home-value-3"),
}


def request_hostname(host_header: str | None) -> str:
    """Hostname to resolve for a Host header; local hosts map to the default."""
    hostname = normalize_hostname(host_header or "")
    if not hostname or hostname in LOCAL_HOSTNAMES:
        return DEFAULT_DEV_HOSTNAME
    return hostname


def allows_any_domain_fallback(hostname: str, slug: str) -> bool:
    """Master preview slugs and the default hostname may borrow any domain's page."""
    return slug in MASTER_PAGE_SLUGS.values() or hostname == DEFAULT_DEV_HOSTNAME


def build_content(
    page: LandingPage,
    domain: Domain,
    page_layout: list | None = None,
) -> LandingPageContent:
    """Merge page, domain branding and SEO into a LandingPageContent."""
    return LandingPageContent(
        id=page.id,
        slug=page.slug,
        type=page.type,
        headline=page.headline,
        subheadline=page.subheadline,
        hero_image_url=page.hero_image_url,
        cta_text=page.cta_text,
        success_message=page.success_message,
        sections=page.sections,
        blocks=page.blocks,
        form_schema=page.form_schema,
        domain=DomainBranding(
            hostname=domain.hostname,
            display_name=domain.display_name,
            logo_url=domain.logo_url,
            right_logo_url=domain.right_logo_url,
            primary_color=domain.primary_color,
            accent_color=domain.accent_color,
            ga4_id=domain.ga4_id,
            meta_pixel_id=domain.meta_pixel_id,
        ),
        seo=SeoSettings(
            title=page.seo_title,
            description=page.seo_description,
            keywords=page.seo_keywords,
            og_image_url=page.og_image_url,
            og_type=page.og_type,
            twitter_card=page.twitter_card,
            canonical_url=page.canonical_url,
            no_index=page.no_index,
            schema_markup=page.schema_markup,
            custom_head_tags=page.custom_head_tags,
        ),
        page_layout=page_layout,
        multistep_step_slugs=page.multistep_step_slugs,
    )


class PageResolver:
    """Resolves public requests to LandingPageContent."""

    def __init__(
        self,
        domain_repo: DomainRepository | None = None,
        page_repo: PageRepository | None = None,
        layout_repo: LayoutRepository | None = None,
        default_hostname: str | None = None,
    ):
        self.domain_repo = domain_repo or DomainRepository()
        self.page_repo = page_repo or PageRepository()
        self.layout_repo = layout_repo or LayoutRepository()
        self.default_hostname = default_hostname or DEFAULT_DEV_HOSTNAME

    def resolve(
        self,
        hostname: str,
        slug: str,
        allow_fallback_to_any_domain: bool = False,
    ) -> LandingPageContent:
        """Resolve a public page.

        Args:
            hostname: Request hostname.
            slug: Requested page slug.
            allow_fallback_to_any_domain: On the default hostname, serve a
                published page with this slug from any active domain.

        Returns:
            Content of the page, with ``multistep_steps`` when it is a funnel.

        Raises:
            PageRedirect: The slug is a later step of a funnel.
            NotFoundError: Nothing servable matches.
        """
        hostname = normalize_hostname(hostname)
        slug = slug.strip().lower()

        domain = self.domain_repo.find_by_hostname(hostname)

        if domain:
            self._redirect_legacy_step(domain, slug)

        page = self.page_repo.get_published(domain.id, slug) if domain else None

        if page is None and allow_fallback_to_any_domain and hostname == self.default_hostname:
            page, domain = self._find_on_any_domain(slug)

        if page is None:
            raise NotFoundError("Page", f"{hostname}/{slug}")

        if domain is None or domain.id != page.domain_id:
            domain = self.domain_repo.get_by_id(page.domain_id)
        if domain is None or not domain.is_active:
            raise NotFoundError("Domain", page.domain_id)

        step_slugs = self._step_slugs(page, domain)

        if slug not in (page.multistep_step_slugs or []):
            owner = self._find_funnel_owner(domain, slug)
            if owner is not None:
                logger.info("Redirecting funnel step to entry", slug=slug, entry_slug=owner.slug)
                raise PageRedirect(owner.slug)

        content = self._assemble(page, domain)
        if step_slugs:
            content.multistep_step_slugs = step_slugs
            content.multistep_steps = self._resolve_steps(content, domain, step_slugs)

        logger.debug(
            "Page resolved",
            hostname=hostname,
            slug=slug,
            page_id=page.id,
            steps=len(content.multistep_steps or []),
        )
        return content

    def _redirect_legacy_step(self, domain: Domain, slug: str) -> None:
        for entry_slug, candidates in LEGACY_FUNNELS.items():
            if slug in candidates[1:] and self.page_repo.get_published(domain.id, entry_slug):
                logger.info("Redirecting legacy funnel step", slug=slug, entry_slug=entry_slug)
                raise PageRedirect(entry_slug)

    def _find_on_any_domain(self, slug: str) -> tuple[LandingPage | None, Domain | None]:
        for page in self.page_repo.find_published_any_domain(slug):
            domain = self.domain_repo.get_by_id(page.domain_id)
            if domain and domain.is_active:
                logger.info("Serving page from fallback domain", slug=slug, hostname=domain.hostname)
                return page, domain
        return None, None

    def _step_slugs(self, page: LandingPage, domain: Domain) -> list[str]:
        """Declared funnel steps, else the legacy candidates that exist."""
        if page.multistep_step_slugs:
            return list(page.multistep_step_slugs)

        candidates = LEGACY_FUNNELS.get(page.slug)
        if not candidates:
            return []

        return [
            step
            for step in candidates
            if step == page.slug or self.page_repo.get_published(domain.id, step) is not None
        ]

    def _find_funnel_owner(self, domain: Domain, slug: str) -> LandingPage | None:
        """A published page whose funnel lists ``slug`` after its entry."""
        for candidate in self.page_repo.list_by_domain(domain.id, status="published"):
            steps = candidate.multistep_step_slugs or []
            if candidate.slug != slug and slug in steps[1:]:
                return candidate
        return None

    def _load_layout(self, page_id: str) -> list | None:
        layout = self.layout_repo.get_layout(page_id)
        return layout.layout_data if layout else None

    def _assemble(self, page: LandingPage, domain: Domain) -> LandingPageContent:
        return build_content(page, domain, self._load_layout(page.id))

    def _resolve_steps(
        self,
        entry: LandingPageContent,
        domain: Domain,
        step_slugs: list[str],
    ) -> list[LandingPageContent]:
        steps: list[LandingPageContent] = []
        for step_slug in step_slugs:
            if step_slug == entry.slug:
                steps.append(entry.model_copy(update={"multistep_steps": None}))
                continue
            try:
                step_page = self.page_repo.get_published(domain.id, step_slug)
                if step_page is None:
                    raise NotFoundError("Page", step_slug)
                step = self._assemble(step_page, domain)
            except (HomeleadsError, ClientError) as e:
                logger.warning("Skipping funnel step", entry_slug=entry.slug, step_slug=step_slug, error=str(e))
                continue
            # Steps never carry their own funnel
            step.multistep_step_slugs = None
            steps.append(step)
        return steps
