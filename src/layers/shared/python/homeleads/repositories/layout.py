"""Page layout repository.

Layouts may live in their own table (LAYOUT_TABLE_NAME). Older
deployments never created it, so a missing table reads as "no layout".
"""

import os

import structlog
from botocore.exceptions import ClientError

from homeleads.models.layout import LayoutItem, PageLayout
from homeleads.repositories.base import BaseRepository

logger = structlog.get_logger()


class LayoutRepository(BaseRepository[PageLayout]):
    """Repository for PageLayout entities."""

    def __init__(self, table_name: str | None = None):
        super().__init__(
            PageLayout,
            table_name or os.environ.get("LAYOUT_TABLE_NAME") or None,
        )

    def get_layout(self, page_id: str) -> PageLayout | None:
        """Saved layout for a page, or None when absent or unavailable."""
        try:
            return self.get(pk=f"PAGE#{page_id}", sk="LAYOUT")
        except ClientError as e:
            if e.response["Error"]["Code"] == "ResourceNotFoundException":
                logger.warning("Layout table unavailable", table=self.table_name, page_id=page_id)
                return None
            raise

    def save_layout(self, page_id: str, layout_data: list[LayoutItem]) -> PageLayout:
        """Upsert the layout for a page."""
        existing = self.get_layout(page_id)
        layout = existing or PageLayout(page_id=page_id)
        layout.layout_data = layout_data
        if existing:
            return self.update(layout)
        return self.put(layout)

    def copy_layout(self, source_page_id: str, target_page_id: str) -> PageLayout | None:
        """Copy a saved layout to another page, if one exists."""
        source = self.get_layout(source_page_id)
        if not source:
            return None
        return self.put(PageLayout(page_id=target_page_id, layout_data=source.layout_data))

    def delete_layout(self, page_id: str) -> bool:
        try:
            return self.delete(pk=f"PAGE#{page_id}", sk="LAYOUT")
        except ClientError as e:
            if e.response["Error"]["Code"] == "ResourceNotFoundException":
                return False
            raise
