"""Lead repository."""

import structlog

from homeleads.models.lead import Lead, LeadStatus
from homeleads.repositories.base import BaseRepository

logger = structlog.get_logger()


class LeadRepository(BaseRepository[Lead]):
    """Repository for Lead entities."""

    def __init__(self, table_name: str | None = None):
        super().__init__(Lead, table_name)

    def get_by_id(self, lead_id: str) -> Lead | None:
        return self.get(pk=f"LEAD#{lead_id}", sk="META")

    def create_lead(self, lead: Lead) -> Lead:
        return self.create(lead)

    def list_recent(self, limit: int = 50, last_key: dict | None = None) -> tuple[list[Lead], dict | None]:
        """Leads across all domains, newest first."""
        return self.query(
            pk="ENTITY#LEAD",
            index_name="GSI2",
            scan_forward=False,
            limit=limit,
            last_key=last_key,
        )

    def list_by_page(self, page_id: str, limit: int | None = None) -> list[Lead]:
        """Leads captured on one page, newest first."""
        if limit:
            items, _ = self.query(
                pk=f"PAGE_LEADS#{page_id}",
                index_name="GSI1",
                scan_forward=False,
                limit=limit,
            )
            return items
        return self.query_all(pk=f"PAGE_LEADS#{page_id}", index_name="GSI1", scan_forward=False)

    def update_status(self, lead: Lead, status: LeadStatus) -> Lead:
        lead.status = status
        return self.update(lead)

    def delete_by_page(self, page_id: str) -> int:
        """Delete every lead of a page. Returns the number deleted."""
        leads = self.list_by_page(page_id)
        self.batch_delete([(lead.get_pk(), lead.get_sk()) for lead in leads])
        if leads:
            logger.info("Page leads deleted", page_id=page_id, count=len(leads))
        return len(leads)
