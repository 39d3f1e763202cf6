"""Admin-side page lifecycle: seeding, editing, duplication and deletion."""

from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from homeleads.models.page import (
    MASTER_PAGE_SLUGS,
    CreatePageRequest,
    DuplicatePageRequest,
    LandingPage,
    PageStatus,
    UpdatePageRequest,
)
from homeleads.models.template import MasterTemplate
from homeleads.repositories import (
    DomainRepository,
    LayoutRepository,
    LeadRepository,
    PageRepository,
    TemplateRepository,
)
from homeleads.repositories.page import SLUG_CONFLICT_MESSAGE
from homeleads.services.cdn_service import CdnService
from homeleads.services.grid_layout import normalize_layout
from homeleads.services.page_resolver import LEGACY_FUNNELS
from homeleads.utils.exceptions import ConflictError, NotFoundError, ValidationError

logger = structlog.get_logger()

# Content copied by duplicate_page; identity, placement and status are not
_DUPLICATE_EXCLUDE = {"id", "version", "created_at", "updated_at", "domain_id", "slug", "status"}


class PageService:
    """Page operations that span more than one repository."""

    def __init__(
        self,
        page_repo: PageRepository | None = None,
        domain_repo: DomainRepository | None = None,
        template_repo: TemplateRepository | None = None,
        layout_repo: LayoutRepository | None = None,
        lead_repo: LeadRepository | None = None,
        cdn: CdnService | None = None,
    ):
        self.page_repo = page_repo or PageRepository()
        self.domain_repo = domain_repo or DomainRepository()
        self.template_repo = template_repo or TemplateRepository()
        self.layout_repo = layout_repo or LayoutRepository()
        self.lead_repo = lead_repo or LeadRepository()
        self.cdn = cdn or CdnService()

    def _get_page(self, page_id: str) -> LandingPage:
        page = self.page_repo.get_by_id(page_id)
        if not page:
            raise NotFoundError("Page", page_id)
        return page

    def _require_domain(self, domain_id: str):
        domain = self.domain_repo.get_by_id(domain_id)
        if not domain:
            raise NotFoundError("Domain", domain_id)
        return domain

    def _seed_source(self, template: MasterTemplate | None, template_id: str) -> LandingPage | None:
        """Most recently edited page of the template, used when it is incomplete."""
        if template is not None and not template.is_empty():
            return None
        pages = self.page_repo.list_by_template(template_id)
        return pages[0] if pages else None

    def create_from_template(self, data: CreatePageRequest | dict[str, Any]) -> LandingPage:
        """Create a draft page seeded from the master template of its type.

        Args:
            data: CreatePageRequest or its raw dict.

        Returns:
            The created page.

        Raises:
            ValidationError: Blank slug or headline, unknown type.
            NotFoundError: Unknown domain.
            ConflictError: Slug already used on the domain.
        """
        if not isinstance(data, CreatePageRequest):
            try:
                data = CreatePageRequest.model_validate(data)
            except PydanticValidationError as e:
                raise ValidationError.from_pydantic(e) from e

        self._require_domain(data.domain_id)

        page_type = data.type.value
        template = self.template_repo.find_by_type(page_type)
        fallback = self._seed_source(template, page_type)

        sections = template.sections if template and template.sections else []
        form_schema = template.form_schema if template and not template.form_schema.is_empty() else None
        if fallback is not None:
            sections = sections or fallback.sections
            form_schema = form_schema or fallback.form_schema
            logger.info(
                "Seeding page from recent template page",
                template_type=page_type,
                source_page_id=fallback.id,
            )

        hero_image_url = template.hero_image_url if template else None
        if not hero_image_url and fallback is not None:
            hero_image_url = fallback.hero_image_url

        page = LandingPage(
            domain_id=data.domain_id,
            master_template_id=page_type,
            slug=data.slug,
            type=page_type,
            status=PageStatus.DRAFT,
            headline=data.headline,
            subheadline=data.subheadline,
            hero_image_url=hero_image_url,
            sections=[s.model_copy(deep=True) for s in sections],
            form_schema=form_schema.model_copy(deep=True) if form_schema else None,
        )
        page = self.page_repo.create_page(page)

        logger.info("Page created", page_id=page.id, domain_id=page.domain_id, slug=page.slug)
        return page

    def duplicate_page(self, data: DuplicatePageRequest | dict[str, Any]) -> LandingPage:
        """Copy a page into a new draft, with its saved layout."""
        if not isinstance(data, DuplicatePageRequest):
            try:
                data = DuplicatePageRequest.model_validate(data)
            except PydanticValidationError as e:
                raise ValidationError.from_pydantic(e) from e

        original = self._get_page(data.page_id)
        domain_id = data.domain_id or original.domain_id
        if domain_id != original.domain_id:
            self._require_domain(domain_id)

        copy = LandingPage(
            **original.model_dump(exclude=_DUPLICATE_EXCLUDE),
            domain_id=domain_id,
            slug=data.slug or f"{original.slug}-copy",
            status=PageStatus.DRAFT,
        )
        copy = self.page_repo.create_page(copy)

        if self.layout_repo.copy_layout(original.id, copy.id):
            logger.debug("Layout copied", source_page_id=original.id, page_id=copy.id)

        logger.info("Page duplicated", source_page_id=original.id, page_id=copy.id, slug=copy.slug)
        return copy

    def update_page(self, page_id: str, changes: UpdatePageRequest | dict[str, Any]) -> LandingPage:
        """Apply a partial update. Last write wins.

        A non-empty ``layout_data`` upserts the saved layout. Saving a
        published page revalidates its cached copy.

        Raises:
            NotFoundError: If the page does not exist.
            ValidationError: Blank slug or invalid field values.
            ConflictError: Slug already used on the domain.
        """
        if not isinstance(changes, UpdatePageRequest):
            try:
                changes = UpdatePageRequest.model_validate(changes)
            except PydanticValidationError as e:
                raise ValidationError.from_pydantic(e) from e

        previous = self._get_page(page_id)
        page = previous.model_copy(deep=True)

        for field, value in changes.page_changes().items():
            setattr(page, field, value)

        if page.slug != previous.slug and self.page_repo.slug_exists(page.domain_id, page.slug, page.id):
            raise ConflictError(SLUG_CONFLICT_MESSAGE)

        page = self.page_repo.update_page(page, previous)

        if changes.layout_data:
            self.layout_repo.save_layout(page.id, normalize_layout(changes.layout_data))

        if page.is_published or previous.is_published:
            self._revalidate(page, previous)

        logger.info("Page updated", page_id=page.id, fields=sorted(changes.model_fields_set))
        return page

    def _revalidate(self, page: LandingPage, previous: LandingPage | None = None) -> None:
        domain = self.domain_repo.get_by_id(page.domain_id)
        if domain:
            self.cdn.revalidate(domain.hostname, page.slug)
        if previous is not None and (previous.slug, previous.domain_id) != (page.slug, page.domain_id):
            old_domain = domain if previous.domain_id == page.domain_id else self.domain_repo.get_by_id(previous.domain_id)
            if old_domain:
                self.cdn.revalidate(old_domain.hostname, previous.slug)

    def revalidate(self, hostname: str, slug: str) -> dict[str, Any]:
        """Explicit cache revalidation for one public page."""
        if not hostname or not slug:
            raise ValidationError("Missing domain or slug")
        invalidated = self.cdn.revalidate(hostname, slug)
        return {"revalidated": invalidated, "path": f"/{hostname}/{slug}"}

    def delete_page(self, page_id: str) -> int:
        """Delete a page, its leads, slug reservation and layout.

        Returns:
            Number of leads deleted with the page.
        """
        page = self._get_page(page_id)

        lead_count = self.lead_repo.delete_by_page(page.id)
        self.page_repo.delete_page(page)
        self.layout_repo.delete_layout(page.id)

        if page.is_published:
            self._revalidate(page)

        logger.info("Page deleted", page_id=page.id, slug=page.slug, leads_deleted=lead_count)
        return lead_count

    def sync_master_templates(self) -> list[dict[str, Any]]:
        """Copy sections and form schema from the master pages to their templates.

        Every page whose slug is a master slug counts, on any domain and in
        any status. Pages without a template reference are skipped.
        """
        updates = []
        for slug in MASTER_PAGE_SLUGS.values():
            for page in self.page_repo.list_by_slug(slug):
                if not page.master_template_id:
                    continue

                template = self.template_repo.get_by_id(page.master_template_id)
                if template is None:
                    logger.warning(
                        "Master page references a missing template",
                        page_id=page.id,
                        master_template_id=page.master_template_id,
                    )
                    continue

                template.sections = [s.model_copy(deep=True) for s in page.sections]
                if page.form_schema is not None:
                    template.form_schema = page.form_schema.model_copy(deep=True)
                template.update_timestamp()
                self.template_repo.save_template(template)

                updates.append({
                    "master_template_id": template.id,
                    "master_template_type": template.type,
                    "from_page_id": page.id,
                    "from_page_slug": page.slug,
                })

        logger.info("Master templates synced", count=len(updates))
        return updates

    def backfill_legacy_funnels(self, dry_run: bool = False) -> list[dict[str, Any]]:
        """Write explicit step lists onto legacy funnel entry pages.

        Entry pages with no ``multistep_step_slugs`` get the legacy
        candidates published on their domain, in order. Pages with an
        explicit list are left alone.

        Args:
            dry_run: Report what would change without saving.
        """
        changed = []
        for entry_slug, candidates in LEGACY_FUNNELS.items():
            for page in self.page_repo.list_by_slug(entry_slug):
                if page.multistep_step_slugs:
                    continue

                steps = [
                    slug for slug in candidates
                    if slug == entry_slug or self.page_repo.get_published(page.domain_id, slug)
                ]
                if len(steps) < 2:
                    continue

                changed.append({"page_id": page.id, "domain_id": page.domain_id, "steps": steps})
                if dry_run:
                    continue

                previous = page.model_copy(deep=True)
                page.multistep_step_slugs = steps
                self.page_repo.update_page(page, previous)
                logger.info("Legacy funnel backfilled", page_id=page.id, steps=steps)

        return changed
