"""Hands persisted leads to the asynchronous fan-out worker."""

import json
import os
from typing import Protocol

import boto3
import structlog
from botocore.exceptions import ClientError

logger = structlog.get_logger()


class LeadDispatcher(Protocol):
    """Schedules webhook and notification delivery for a lead."""

    def submit(self, lead_id: str) -> bool:
        ...


class SqsLeadDispatcher:
    """Enqueues one SQS message per lead for the fan-out worker.

    Enqueue failures are logged and reported as False; the lead itself
    is already stored.
    """

    def __init__(self, queue_url: str | None = None):
        self.queue_url = queue_url or os.environ.get("LEAD_FANOUT_QUEUE_URL")
        self._sqs = None

    @property
    def sqs(self):
        if self._sqs is None:
            self._sqs = boto3.client("sqs")
        return self._sqs

    def submit(self, lead_id: str) -> bool:
        if not self.queue_url:
            logger.warning("No lead fan-out queue configured", lead_id=lead_id)
            return False

        try:
            response = self.sqs.send_message(
                QueueUrl=self.queue_url,
                MessageBody=json.dumps({"type": "lead_created", "lead_id": lead_id}),
            )
        except ClientError as e:
            logger.error("Failed to enqueue lead fan-out", lead_id=lead_id, error=str(e))
            return False

        logger.info("Lead queued for fan-out", lead_id=lead_id, message_id=response.get("MessageId"))
        return True
