"""Pytest configuration and fixtures."""

import json
import os

import pytest

# Set environment variables before imports
os.environ["TABLE_NAME"] = "homeleads-test"
os.environ["STAGE"] = "test"
os.environ["DEFAULT_DEV_HOSTNAME"] = "bendhomes.us"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["AWS_REGION"] = "us-east-1"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"

for _name in (
    "LAYOUT_TABLE_NAME",
    "RECAPTCHA_SECRET_KEY",
    "RECAPTCHA_SITE_KEY",
    "LEAD_FANOUT_QUEUE_URL",
    "ZAPIER_LEADS_WEBHOOK_URL",
    "PAGES_DISTRIBUTION_ID",
    "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN",
    "TWILIO_FROM_NUMBER",
):
    os.environ.pop(_name, None)

TABLE_NAME = "homeleads-test"


@pytest.fixture
def aws_credentials():
    """Mock AWS credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture
def dynamodb_table(aws_credentials):
    """Create the mocked single table with both GSIs."""
    import boto3
    from moto import mock_aws

    with mock_aws():
        dynamodb = boto3.resource("dynamodb", region_name="us-east-1")

        table = dynamodb.create_table(
            TableName=TABLE_NAME,
            KeySchema=[
                {"AttributeName": "PK", "KeyType": "HASH"},
                {"AttributeName": "SK", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "PK", "AttributeType": "S"},
                {"AttributeName": "SK", "AttributeType": "S"},
                {"AttributeName": "GSI1PK", "AttributeType": "S"},
                {"AttributeName": "GSI1SK", "AttributeType": "S"},
                {"AttributeName": "GSI2PK", "AttributeType": "S"},
                {"AttributeName": "GSI2SK", "AttributeType": "S"},
            ],
            GlobalSecondaryIndexes=[
                {
                    "IndexName": "GSI1",
                    "KeySchema": [
                        {"AttributeName": "GSI1PK", "KeyType": "HASH"},
                        {"AttributeName": "GSI1SK", "KeyType": "RANGE"},
                    ],
                    "Projection": {"ProjectionType": "ALL"},
                },
                {
                    "IndexName": "GSI2",
                    "KeySchema": [
                        {"AttributeName": "GSI2PK", "KeyType": "HASH"},
                        {"AttributeName": "GSI2SK", "KeyType": "RANGE"},
                    ],
                    "Projection": {"ProjectionType": "ALL"},
                },
            ],
            BillingMode="PAY_PER_REQUEST",
        )

        table.wait_until_exists()

        yield table


@pytest.fixture
def sqs_queue(dynamodb_table):
    """Create a mocked fan-out queue inside the same moto context."""
    import boto3

    sqs = boto3.client("sqs", region_name="us-east-1")
    queue_url = sqs.create_queue(QueueName="homeleads-test-lead-fanout")["QueueUrl"]
    return sqs, queue_url


@pytest.fixture
def domain(dynamodb_table):
    """A registered, active tenant domain."""
    from homeleads.models.domain import Domain
    from homeleads.repositories.domain import DomainRepository

    return DomainRepository().create_domain(Domain(
        hostname="tetherowhomes.com",
        display_name="Tetherow Homes",
        logo_url="https://cdn.example.com/tetherow-logo.png",
        primary_color="#0f766e",
        accent_color="#f59e0b",
        notify_email="agent@tetherowhomes.com",
        notify_sms="+15415550100",
    ))


@pytest.fixture
def make_page(dynamodb_table):
    """Factory persisting a landing page (published by default)."""
    from homeleads.models.page import LandingPage, PageStatus
    from homeleads.repositories.page import PageRepository

    repo = PageRepository()

    def _make_page(domain_id: str, slug: str, **overrides):
        data = {
            "domain_id": domain_id,
            "slug": slug,
            "type": "buyer",
            "status": PageStatus.PUBLISHED,
            "headline": f"Homes for sale: {slug}",
            "form_schema": {"fields": [
                {"id": "name", "type": "text", "label": "Name", "required": True},
                {"id": "email", "type": "email", "label": "Email", "required": True},
            ]},
        }
        data.update(overrides)
        return repo.create_page(LandingPage(**data))

    return _make_page


class FakeDispatcher:
    """Records lead ids instead of enqueueing them."""

    def __init__(self, result: bool = True, exc: Exception | None = None):
        self.result = result
        self.exc = exc
        self.submitted: list[str] = []

    def submit(self, lead_id: str) -> bool:
        self.submitted.append(lead_id)
        if self.exc:
            raise self.exc
        return self.result


@pytest.fixture
def fake_dispatcher():
    return FakeDispatcher()


@pytest.fixture
def api_gateway_event():
    """Create a sample API Gateway event."""
    def _create_event(
        method: str = "GET",
        path: str = "/",
        path_params: dict = None,
        query_params: dict = None,
        body: dict = None,
        user_id: str = "test-user-123",
        is_admin: bool = True,
        headers: dict = None,
        source_ip: str = "203.0.113.10",
    ):
        return {
            "httpMethod": method,
            "path": path,
            "pathParameters": path_params or {},
            "queryStringParameters": query_params or {},
            "body": body if isinstance(body, str) else (json.dumps(body) if body is not None else None),
            "headers": headers or {
                "Authorization": "Bearer test-token",
                "Content-Type": "application/json",
            },
            "requestContext": {
                "identity": {"sourceIp": source_ip},
                "authorizer": {
                    "userId": user_id,
                    "email": "admin@homeleads.io",
                    "isAdmin": "true" if is_admin else "false",
                },
            },
        }

    return _create_event


class LambdaContext:
    """Mock Lambda context."""

    def __init__(self):
        self.function_name = "test-function"
        self.memory_limit_in_mb = 128
        self.invoked_function_arn = "arn:aws:lambda:us-east-1:123456789:function:test"
        self.aws_request_id = "test-request-id"

    def get_remaining_time_in_millis(self):
        return 30000


@pytest.fixture
def lambda_context():
    """Create a mock Lambda context."""
    return LambdaContext()
