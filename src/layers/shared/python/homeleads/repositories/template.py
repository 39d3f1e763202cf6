"""Master template repository."""

import structlog

from homeleads.models.template import LandingPageType, MasterTemplate
from homeleads.repositories.base import BaseRepository

logger = structlog.get_logger()


class TemplateRepository(BaseRepository[MasterTemplate]):
    """Repository for MasterTemplate entities (one per page type)."""

    def __init__(self, table_name: str | None = None):
        super().__init__(MasterTemplate, table_name)

    def find_by_type(self, page_type: LandingPageType | str) -> MasterTemplate | None:
        return self.get(pk=f"TEMPLATE#{LandingPageType(page_type).value}", sk="META")

    def get_by_id(self, template_id: str) -> MasterTemplate | None:
        """Templates are keyed by type; ids that are not a type resolve to None."""
        try:
            return self.find_by_type(template_id)
        except ValueError:
            return None

    def list_all(self) -> list[MasterTemplate]:
        return self.query_all(pk="ENTITY#TEMPLATE", index_name="GSI2")

    def save_template(self, template: MasterTemplate) -> MasterTemplate:
        """Create or overwrite the template for its type."""
        saved = self.put(template)
        logger.info("Master template saved", template_type=template.type)
        return saved
