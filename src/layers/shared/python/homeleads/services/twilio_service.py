"""SMS delivery via Twilio."""

import os
from typing import Any

import structlog
from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

logger = structlog.get_logger()


class TwilioError(Exception):
    """Raised when an SMS cannot be sent."""

    def __init__(self, message: str, code: str | None = None, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class TwilioService:
    """Sends SMS through the Twilio REST API.

    Credentials and the sender number come from the environment unless
    given explicitly.
    """

    def __init__(
        self,
        account_sid: str | None = None,
        auth_token: str | None = None,
        from_number: str | None = None,
    ):
        self.account_sid = account_sid or os.environ.get("TWILIO_ACCOUNT_SID")
        self.auth_token = auth_token or os.environ.get("TWILIO_AUTH_TOKEN")
        self.from_number = from_number or os.environ.get("TWILIO_FROM_NUMBER")
        self._client: Client | None = None

    @property
    def client(self) -> Client:
        """Get Twilio client (lazy initialization).

        Raises:
            TwilioError: If credentials are not configured.
        """
        if self._client is None:
            if not self.account_sid or not self.auth_token:
                raise TwilioError("Twilio credentials not configured", code="CREDENTIALS_MISSING")
            self._client = Client(self.account_sid, self.auth_token)
        return self._client

    @property
    def is_configured(self) -> bool:
        """True when credentials and a sender number are available."""
        return bool(self.account_sid and self.auth_token and self.from_number)

    def send_sms(self, to: str, body: str) -> dict[str, Any]:
        """Send an SMS message.

        Args:
            to: Recipient phone number.
            body: Message content.

        Returns:
            Dict with message_sid and status.

        Raises:
            TwilioError: If sending fails.
        """
        if not self.from_number:
            raise TwilioError("Sender phone number is not configured", code="SENDER_MISSING")
        if not to:
            raise TwilioError("Recipient phone number is required", code="RECIPIENT_MISSING")
        if not body:
            raise TwilioError("Message body is required", code="BODY_MISSING")

        to = normalize_phone(to)
        from_number = normalize_phone(self.from_number)

        logger.info(
            "Sending SMS",
            to=to[:6] + "****",
            body_length=len(body),
        )

        try:
            message = self.client.messages.create(to=to, from_=from_number, body=body)
        except TwilioRestException as e:
            logger.error("Twilio SMS send failed", error_code=e.code, error_message=e.msg)
            raise TwilioError(
                f"Failed to send SMS: {e.msg}",
                code=str(e.code),
                details={"twilio_error": e.msg},
            ) from e

        logger.info("SMS sent successfully", message_sid=message.sid, status=message.status)
        return {"message_sid": message.sid, "status": message.status}


def normalize_phone(phone: str) -> str:
    """Normalize a phone number to E.164, assuming US for 10 digits."""
    if phone.startswith("+"):
        return "+" + "".join(filter(str.isdigit, phone[1:]))

    cleaned = "".join(filter(str.isdigit, phone))
    if len(cleaned) == 10:
        return "+1" + cleaned
    return "+" + cleaned
