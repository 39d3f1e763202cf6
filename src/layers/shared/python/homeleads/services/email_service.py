"""Agent notification email via Amazon SES."""

import os
from email.utils import formataddr
from typing import Any

import boto3
import structlog
from botocore.exceptions import ClientError

logger = structlog.get_logger()

DEFAULT_FROM_EMAIL = "leads@no-reply.homeleads.io"


class EmailError(Exception):
    """Raised when SES rejects or fails a send."""

    def __init__(self, message: str, code: str | None = None, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


def _content(data: str) -> dict[str, str]:
    return {"Data": data, "Charset": "UTF-8"}


class EmailService:
    """Sends lead notification email through SES.

    The sender address is shared by every domain; ``sender_name`` lets
    each message carry the tenant's display name.
    """

    def __init__(
        self,
        region_name: str | None = None,
        configuration_set: str | None = None,
        from_email: str | None = None,
    ):
        self.region_name = region_name or os.environ.get("AWS_REGION", "us-east-1")
        self.configuration_set = configuration_set or os.environ.get("SES_CONFIGURATION_SET")
        self.from_email = from_email or os.environ.get("SES_FROM_EMAIL", DEFAULT_FROM_EMAIL)
        self._client = None

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client("ses", region_name=self.region_name)
        return self._client

    def send_email(
        self,
        to: str | list[str],
        subject: str,
        body_text: str | None = None,
        body_html: str | None = None,
        reply_to: list[str] | None = None,
        sender_name: str | None = None,
    ) -> dict[str, Any]:
        """Send one message.

        Args:
            to: Recipient address or addresses.
            subject: Subject line.
            body_text: Plain text body.
            body_html: HTML body.
            reply_to: Reply-To addresses, e.g. the lead's own email.
            sender_name: Display name shown on the From header.

        Returns:
            Dict with message_id and status.

        Raises:
            EmailError: Missing recipient or body, or SES failure.
        """
        recipients = [to] if isinstance(to, str) else list(to or [])
        if not recipients:
            raise EmailError("Recipient email address is required", code="RECIPIENT_MISSING")
        if not body_text and not body_html:
            raise EmailError("Email body is required", code="BODY_MISSING")

        body = {}
        if body_text:
            body["Text"] = _content(body_text)
        if body_html:
            body["Html"] = _content(body_html)

        request: dict[str, Any] = {
            "Source": formataddr((sender_name, self.from_email)) if sender_name else self.from_email,
            "Destination": {"ToAddresses": recipients},
            "Message": {"Subject": _content(subject), "Body": body},
        }
        if reply_to:
            request["ReplyToAddresses"] = reply_to
        if self.configuration_set:
            request["ConfigurationSetName"] = self.configuration_set

        try:
            response = self.client.send_email(**request)
        except ClientError as e:
            error = e.response["Error"]
            logger.error("SES send failed", error_code=error["Code"], error_message=error["Message"])
            raise EmailError(
                f"Failed to send email: {error['Message']}",
                code=error["Code"],
                details={"aws_error": error["Message"]},
            ) from e

        logger.info("Email sent", message_id=response["MessageId"], recipients=len(recipients))
        return {"message_id": response["MessageId"], "status": "sent"}
