"""Webhook configuration repository."""

from homeleads.models.webhook import WebhookConfig
from homeleads.repositories.base import BaseRepository


class WebhookRepository(BaseRepository[WebhookConfig]):
    """Repository for WebhookConfig entities."""

    def __init__(self, table_name: str | None = None):
        super().__init__(WebhookConfig, table_name)

    def get_by_id(self, webhook_id: str) -> WebhookConfig | None:
        return self.get(pk=f"WEBHOOK#{webhook_id}", sk="META")

    def list_all(self) -> list[WebhookConfig]:
        return self.query_all(pk="ENTITY#WEBHOOK", index_name="GSI2")

    def list_active(self) -> list[WebhookConfig]:
        return [w for w in self.list_all() if w.is_active]

    def delete_webhook(self, webhook_id: str) -> bool:
        return self.delete(pk=f"WEBHOOK#{webhook_id}", sk="META")
