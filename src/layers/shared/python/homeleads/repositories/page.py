"""Landing page repository."""

import structlog
from botocore.exceptions import ClientError

from homeleads.models.page import LandingPage, PageStatus
from homeleads.repositories.base import BaseRepository
from homeleads.utils.exceptions import ConflictError

logger = structlog.get_logger()

SLUG_CONFLICT_MESSAGE = "Slug already exists for this domain."


def _slug_key(domain_id: str, slug: str) -> dict[str, str]:
    return {"PK": f"SLUG#{domain_id}", "SK": f"SLUG#{slug}"}


class PageRepository(BaseRepository[LandingPage]):
    """Repository for LandingPage entities.

    Uniqueness of (domain_id, slug) is enforced with reservation items
    written in the same transaction as the page.
    """

    def __init__(self, table_name: str | None = None):
        super().__init__(LandingPage, table_name)

    def get_by_id(self, page_id: str) -> LandingPage | None:
        return self.get(pk=f"PAGE#{page_id}", sk="META")

    def get_by_slug(self, domain_id: str, slug: str) -> LandingPage | None:
        """Get a page by exact slug within a domain (any status)."""
        items, _ = self.query(
            pk=f"PAGE_SLUG#{domain_id}",
            sk_equals=slug,
            index_name="GSI1",
        )
        return items[0] if items else None

    def get_published(self, domain_id: str, slug: str) -> LandingPage | None:
        page = self.get_by_slug(domain_id, slug)
        if page and page.is_published:
            return page
        return None

    def list_by_slug(self, slug: str) -> list[LandingPage]:
        """Every page with this slug, across all domains."""
        return self.query_all(
            pk="ENTITY#PAGE",
            sk_begins_with=f"{slug}#",
            index_name="GSI2",
        )

    def find_published_any_domain(self, slug: str) -> list[LandingPage]:
        """Published pages with this slug on any domain, oldest first."""
        pages = [p for p in self.list_by_slug(slug) if p.is_published]
        return sorted(pages, key=lambda p: p.created_at)

    def list_by_domain(
        self,
        domain_id: str,
        status: PageStatus | None = None,
    ) -> list[LandingPage]:
        """Pages of one domain ordered by slug, optionally by status."""
        filter_expression = None
        expression_values = None
        expression_names = None
        if status:
            filter_expression = "#status = :status"
            expression_values = {":status": PageStatus(status).value}
            expression_names = {"#status": "status"}

        return self.query_all(
            pk=f"PAGE_SLUG#{domain_id}",
            index_name="GSI1",
            filter_expression=filter_expression,
            expression_values=expression_values,
            expression_names=expression_names,
        )

    def list_all(self) -> list[LandingPage]:
        return self.query_all(pk="ENTITY#PAGE", index_name="GSI2")

    def list_by_template(self, template_id: str) -> list[LandingPage]:
        """Pages seeded from a template, most recently updated first."""
        pages = self.query_all(
            pk="ENTITY#PAGE",
            index_name="GSI2",
            filter_expression="master_template_id = :template_id",
            expression_values={":template_id": template_id},
        )
        return sorted(pages, key=lambda p: p.updated_at, reverse=True)

    def slug_exists(self, domain_id: str, slug: str, exclude_page_id: str | None = None) -> bool:
        page = self.get_by_slug(domain_id, slug)
        if not page:
            return False
        return not (exclude_page_id and page.id == exclude_page_id)

    def create_page(self, page: LandingPage) -> LandingPage:
        """Create a page and its slug reservation atomically.

        Raises:
            ConflictError: If the slug is already taken on the domain.
        """
        page.update_timestamp()
        try:
            self.transact_write([
                {"Put": {"Item": self._to_item(page), "ConditionExpression": "attribute_not_exists(PK)"}},
                {"Put": {
                    "Item": {**_slug_key(page.domain_id, page.slug), "page_id": page.id},
                    "ConditionExpression": "attribute_not_exists(PK)",
                }},
            ])
        except ClientError as e:
            if e.response["Error"]["Code"] == "TransactionCanceledException":
                codes = self.cancellation_codes(e)
                if codes and codes[0] == "ConditionalCheckFailed" and codes[1:2] != ["ConditionalCheckFailed"]:
                    raise ConflictError("Page already exists")
                raise ConflictError(SLUG_CONFLICT_MESSAGE)
            raise

        logger.debug("Page created with slug reservation", page_id=page.id, slug=page.slug)
        return page

    def update_page(self, page: LandingPage, previous: LandingPage | None = None) -> LandingPage:
        """Save a page. Last write wins.

        When the slug or domain changed, the reservation is moved in the
        same transaction as the page write.

        Args:
            page: Page with changes applied.
            previous: The page as loaded before the changes.

        Raises:
            ConflictError: If the new slug is already taken.
        """
        moved = previous is not None and (
            previous.slug != page.slug or previous.domain_id != page.domain_id
        )
        if not moved:
            return self.update(page)

        page.increment_version()
        page.update_timestamp()
        try:
            self.transact_write([
                {"Put": {"Item": self._to_item(page)}},
                {"Delete": {"Key": _slug_key(previous.domain_id, previous.slug)}},
                {"Put": {
                    "Item": {**_slug_key(page.domain_id, page.slug), "page_id": page.id},
                    "ConditionExpression": "attribute_not_exists(PK)",
                }},
            ])
        except ClientError as e:
            if e.response["Error"]["Code"] == "TransactionCanceledException":
                raise ConflictError(SLUG_CONFLICT_MESSAGE)
            raise

        logger.info("Page slug moved", page_id=page.id, old_slug=previous.slug, slug=page.slug)
        return page

    def delete_page(self, page: LandingPage) -> bool:
        """Delete a page and release its slug reservation."""
        try:
            self.table.delete_item(Key=_slug_key(page.domain_id, page.slug))
        except ClientError:
            logger.warning(
                "Failed to delete slug reservation",
                domain_id=page.domain_id,
                slug=page.slug,
            )
        return self.delete(pk=f"PAGE#{page.id}", sk="META")
