"""Security tests for authorization and output encoding.

These tests verify that:
- Admin endpoints reject callers without an identity or without admin rights
- The public lead endpoint needs no identity
- Tenant-controlled content is escaped in rendered pages
"""

import json

import pytest

from homeleads.utils.auth import get_auth_context, require_admin
from homeleads.utils.exceptions import ForbiddenError, UnauthorizedError

ADMIN_ROUTES = [
    ("api.domains", "GET", "/admin/domains"),
    ("api.pages", "GET", "/admin/pages"),
    ("api.leads", "GET", "/admin/leads"),
    ("api.webhooks", "GET", "/admin/webhooks"),
    ("api.templates", "GET", "/admin/templates"),
    ("api.templates", "POST", "/admin/master-templates/sync-from-pages"),
]


def _handler(module_name: str):
    module = __import__(module_name, fromlist=["handler"])
    return module.handler


class TestAdminAuthorization:
    """Admin routes require an administrator identity."""

    @pytest.mark.parametrize("module_name,method,path", ADMIN_ROUTES)
    def test_non_admin_forbidden(self, dynamodb_table, api_gateway_event, module_name, method, path):
        handler = _handler(module_name)

        response = handler(api_gateway_event(method=method, path=path, is_admin=False), None)

        assert response["statusCode"] == 403
        body = json.loads(response["body"])
        assert body["error"] is True
        assert body["message"] == "Administrator access required"

    @pytest.mark.parametrize("module_name,method,path", ADMIN_ROUTES)
    def test_missing_identity_unauthorized(self, dynamodb_table, api_gateway_event, module_name, method, path):
        handler = _handler(module_name)
        event = api_gateway_event(method=method, path=path)
        event["requestContext"].pop("authorizer")

        response = handler(event, None)

        assert response["statusCode"] == 401

    def test_public_lead_route_needs_no_identity(self, dynamodb_table, api_gateway_event):
        from api.leads import handler

        event = api_gateway_event(method="POST", path="/public/leads", body={})
        event["requestContext"].pop("authorizer")

        response = handler(event, None)

        assert response["statusCode"] == 400
        assert json.loads(response["body"])["message"] == "Missing domain, slug, or type"


class TestAuthContext:
    """Tests for identity extraction."""

    def test_admin_group_grants_admin(self):
        event = {"requestContext": {"authorizer": {"claims": {"sub": "user-1", "cognito:groups": "editors,admin"}}}}

        auth = require_admin(event)

        assert auth.user_id == "user-1"
        assert auth.groups == ["editors", "admin"]

    def test_lambda_v2_context(self):
        event = {"requestContext": {"authorizer": {"lambda": {"userId": "user-2", "isAdmin": True}}}}

        assert get_auth_context(event).is_admin is True

    def test_non_admin_string_flag(self):
        event = {"requestContext": {"authorizer": {"userId": "user-3", "isAdmin": "false"}}}

        with pytest.raises(ForbiddenError):
            require_admin(event)

    def test_no_identity(self):
        with pytest.raises(UnauthorizedError):
            get_auth_context({"requestContext": {}})


class TestRenderedPageEncoding:
    """Tenant-entered content must not inject markup into public pages."""

    def test_headline_and_meta_escaped(self, domain, make_page):
        from api.public_pages import handler

        make_page(
            domain.id,
            "tetherow-home",
            headline='<script>alert("x")</script>',
            custom_head_tags=[{"name": 'x" onload="alert(1)', "content": "<b>"}],
            schema_markup={"name": "</script><script>alert(1)</script>"},
        )
        event = {
            "httpMethod": "GET",
            "path": "/tetherow-home",
            "pathParameters": {"slug": "tetherow-home"},
            "queryStringParameters": None,
            "headers": {"Host": "tetherowhomes.com"},
            "requestContext": {},
        }

        response = handler(event, None)

        assert response["statusCode"] == 200
        html = response["body"]
        assert '<script>alert("x")</script>' not in html
        assert "&lt;script&gt;" in html
        assert 'onload="alert(1)"' not in html
        assert "</script><script>alert(1)" not in html
