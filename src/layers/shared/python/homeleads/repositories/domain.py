"""Domain repository: the hostname registry."""

import structlog
from botocore.exceptions import ClientError

from homeleads.models.domain import Domain, normalize_hostname
from homeleads.repositories.base import BaseRepository
from homeleads.utils.exceptions import ConflictError

logger = structlog.get_logger()


def _reservation_key(hostname: str) -> dict[str, str]:
    return {"PK": f"HOSTNAME#{hostname}", "SK": "RESERVATION"}


class DomainRepository(BaseRepository[Domain]):
    """Repository for Domain entities."""

    def __init__(self, table_name: str | None = None):
        super().__init__(Domain, table_name)

    def get_by_id(self, domain_id: str) -> Domain | None:
        return self.get(pk=f"DOMAIN#{domain_id}", sk="META")

    def find_by_hostname(self, hostname: str, include_inactive: bool = False) -> Domain | None:
        """Look up a domain by hostname via GSI1.

        Args:
            hostname: Request hostname; case and port are ignored.
            include_inactive: Return soft-disabled domains too.

        Returns:
            Domain or None.
        """
        items, _ = self.query(
            pk=f"HOSTNAME#{normalize_hostname(hostname)}",
            index_name="GSI1",
        )
        for domain in items:
            if include_inactive or domain.is_active:
                return domain
        return None

    def list_all(self, active_only: bool = False) -> list[Domain]:
        """All domains ordered by hostname."""
        domains = self.query_all(pk="ENTITY#DOMAIN", index_name="GSI2")
        if active_only:
            domains = [d for d in domains if d.is_active]
        return domains

    def create_domain(self, domain: Domain) -> Domain:
        """Create a domain and reserve its hostname atomically.

        Raises:
            ConflictError: If the hostname is already registered.
        """
        domain.update_timestamp()
        try:
            self.transact_write([
                {"Put": {"Item": self._to_item(domain), "ConditionExpression": "attribute_not_exists(PK)"}},
                {"Put": {
                    "Item": {**_reservation_key(domain.hostname), "domain_id": domain.id},
                    "ConditionExpression": "attribute_not_exists(PK)",
                }},
            ])
        except ClientError as e:
            if e.response["Error"]["Code"] == "TransactionCanceledException":
                raise ConflictError("A domain with this hostname already exists.")
            raise

        logger.info("Domain created", domain_id=domain.id, hostname=domain.hostname)
        return domain

    def update_domain(self, domain: Domain, previous_hostname: str | None = None) -> Domain:
        """Save a domain, moving the hostname reservation if it changed.

        Raises:
            ConflictError: If the new hostname is taken.
        """
        if not previous_hostname or previous_hostname == domain.hostname:
            return self.update(domain)

        domain.increment_version()
        domain.update_timestamp()
        try:
            self.transact_write([
                {"Put": {"Item": self._to_item(domain)}},
                {"Delete": {"Key": _reservation_key(previous_hostname)}},
                {"Put": {
                    "Item": {**_reservation_key(domain.hostname), "domain_id": domain.id},
                    "ConditionExpression": "attribute_not_exists(PK)",
                }},
            ])
        except ClientError as e:
            if e.response["Error"]["Code"] == "TransactionCanceledException":
                raise ConflictError("A domain with this hostname already exists.")
            raise

        logger.info(
            "Domain hostname changed",
            domain_id=domain.id,
            old_hostname=previous_hostname,
            hostname=domain.hostname,
        )
        return domain

    def delete_domain(self, domain: Domain) -> bool:
        """Delete a domain and release its hostname."""
        self.table.delete_item(Key=_reservation_key(domain.hostname))
        return self.delete(pk=f"DOMAIN#{domain.id}", sk="META")
