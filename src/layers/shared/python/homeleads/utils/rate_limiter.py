"""Rate limiting for public endpoints.

Counters live in the main table under RATELIMIT# keys and expire via TTL.
"""

import os
import time
from typing import NamedTuple

import boto3
import structlog
from botocore.exceptions import ClientError

from homeleads.utils.responses import PUBLIC_CORS_HEADERS

logger = structlog.get_logger()

TABLE_NAME = os.environ.get("TABLE_NAME", "homeleads-dev")

DEFAULT_REQUESTS_PER_MINUTE = 10
DEFAULT_REQUESTS_PER_HOUR = 100


class RateLimitResult(NamedTuple):
    """Result of a rate limit check."""

    allowed: bool
    requests_remaining: int
    retry_after: int | None  # Seconds until limit resets


def _get_dynamodb():
    return boto3.resource("dynamodb")


def _increment(table, key: str, identifier: str, ttl: int) -> int:
    response = table.update_item(
        Key={"PK": key, "SK": identifier},
        UpdateExpression="SET #count = if_not_exists(#count, :zero) + :inc, #ttl = :ttl",
        ExpressionAttributeNames={"#count": "count", "#ttl": "ttl"},
        ExpressionAttributeValues={":zero": 0, ":inc": 1, ":ttl": ttl},
        ReturnValues="ALL_NEW",
    )
    return int(response["Attributes"]["count"])


def check_rate_limit(
    identifier: str,
    action: str,
    requests_per_minute: int = DEFAULT_REQUESTS_PER_MINUTE,
    requests_per_hour: int = DEFAULT_REQUESTS_PER_HOUR,
    table_name: str | None = None,
) -> RateLimitResult:
    """Check whether a request should be rate limited.

    Uses fixed minute and hour buckets. A DynamoDB failure lets the request
    through.

    Args:
        identifier: Client identifier (usually the IP address).
        action: Action being limited (e.g. "lead_submit").
        requests_per_minute: Max requests allowed per minute.
        requests_per_hour: Max requests allowed per hour.
        table_name: Table override (defaults to TABLE_NAME).

    Returns:
        RateLimitResult with allowed status and remaining requests.
    """
    table = _get_dynamodb().Table(table_name or os.environ.get("TABLE_NAME", TABLE_NAME))
    now = int(time.time())

    try:
        minute_count = _increment(
            table, f"RATELIMIT#{action}#MIN#{now // 60}", identifier, now + 120
        )
        if minute_count > requests_per_minute:
            logger.warning(
                "Rate limit exceeded (minute)",
                identifier=identifier[:20],
                action=action,
                count=minute_count,
            )
            return RateLimitResult(False, 0, 60 - (now % 60))

        hour_count = _increment(
            table, f"RATELIMIT#{action}#HOUR#{now // 3600}", identifier, now + 7200
        )
        if hour_count > requests_per_hour:
            logger.warning(
                "Rate limit exceeded (hour)",
                identifier=identifier[:20],
                action=action,
                count=hour_count,
            )
            return RateLimitResult(False, 0, 3600 - (now % 3600))

        return RateLimitResult(
            allowed=True,
            requests_remaining=min(
                requests_per_minute - minute_count,
                requests_per_hour - hour_count,
            ),
            retry_after=None,
        )

    except ClientError as e:
        logger.error(
            "Rate limiter DynamoDB error",
            error=str(e),
            identifier=identifier[:20],
            action=action,
        )
        return RateLimitResult(allowed=True, requests_remaining=-1, retry_after=None)


def get_client_ip(event: dict) -> str:
    """Extract the client IP, preferring the first X-Forwarded-For hop."""
    headers = event.get("headers", {}) or {}
    identity = (event.get("requestContext", {}) or {}).get("identity", {}) or {}

    forwarded_for = headers.get("X-Forwarded-For") or headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    return identity.get("sourceIp", "unknown")


def rate_limit_response(retry_after: int) -> dict:
    """Build a 429 Too Many Requests response."""
    return {
        "statusCode": 429,
        "headers": {**PUBLIC_CORS_HEADERS, "Retry-After": str(retry_after)},
        "body": '{"error": true, "message": "Too many requests. Please try again later.", "error_code": "RATE_LIMITED"}',
    }
