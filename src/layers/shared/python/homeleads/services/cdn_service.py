"""CloudFront cache revalidation for public pages."""

import os
import time

import boto3
import structlog
from botocore.exceptions import ClientError

logger = structlog.get_logger()


class CdnService:
    """Invalidates cached public pages after they change.

    Pages are cached per ``(hostname, slug)``. Without a configured
    distribution id revalidation is a logged no-op.
    """

    def __init__(self, distribution_id: str | None = None):
        self.distribution_id = distribution_id or os.environ.get("PAGES_DISTRIBUTION_ID")
        self._client = None

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client("cloudfront")
        return self._client

    @property
    def is_configured(self) -> bool:
        return bool(self.distribution_id)

    @staticmethod
    def paths_for(slug: str) -> list[str]:
        return [f"/{slug}", f"/{slug}?*"]

    def revalidate(self, hostname: str, slug: str) -> bool:
        """Invalidate one page.

        Args:
            hostname: Domain the page is served on.
            slug: Page slug.

        Returns:
            True when an invalidation was created.
        """
        if not self.is_configured:
            logger.debug("Revalidation skipped, no distribution configured", hostname=hostname, slug=slug)
            return False

        paths = self.paths_for(slug)
        try:
            response = self.client.create_invalidation(
                DistributionId=self.distribution_id,
                InvalidationBatch={
                    "Paths": {"Quantity": len(paths), "Items": paths},
                    "CallerReference": f"{hostname}/{slug}/{time.time_ns()}",
                },
            )
        except ClientError as e:
            logger.warning("Page revalidation failed", hostname=hostname, slug=slug, error=str(e))
            return False

        logger.info(
            "Page revalidated",
            hostname=hostname,
            slug=slug,
            invalidation_id=response.get("Invalidation", {}).get("Id"),
        )
        return True
