"""Tests for the master templates API handler."""

import json

from homeleads.models.template import MasterTemplate
from homeleads.repositories import TemplateRepository


def _parse_body(response: dict) -> dict:
    return json.loads(response["body"])


class TestTemplates:
    """Tests for /admin/templates and the master page sync."""

    def test_list_templates(self, dynamodb_table, api_gateway_event):
        from api.templates import handler

        TemplateRepository().save_template(MasterTemplate(type="buyer", name="Buyer"))
        TemplateRepository().save_template(MasterTemplate(type="seller", name="Seller"))

        response = handler(api_gateway_event(path="/admin/templates"), None)

        assert response["statusCode"] == 200
        assert [t["id"] for t in _parse_body(response)["items"]] == ["buyer", "seller"]

    def test_sync_without_master_pages(self, dynamodb_table, api_gateway_event):
        from api.templates import handler

        response = handler(api_gateway_event(
            method="POST", path="/admin/master-templates/sync-from-pages",
        ), None)

        assert response["statusCode"] == 200
        assert _parse_body(response) == {"message": "No master-buyer or master-seller pages found.", "updates": []}

    def test_sync_copies_master_page_content(self, domain, make_page, api_gateway_event):
        from api.templates import handler

        TemplateRepository().save_template(MasterTemplate(type="seller", name="Seller"))
        page = make_page(
            domain.id,
            "master-seller",
            type="seller",
            status="draft",
            master_template_id="seller",
            sections=[{"id": "section-hero", "kind": "hero", "props": {"formHeading": "What's it worth?"}}],
        )

        response = handler(api_gateway_event(
            method="POST", path="/admin/master-templates/sync-from-pages",
        ), None)

        body = _parse_body(response)
        assert body["updates"] == [{
            "master_template_id": "seller",
            "master_template_type": "seller",
            "from_page_id": page.id,
            "from_page_slug": "master-seller",
        }]
        template = TemplateRepository().find_by_type("seller")
        assert template.sections[0].props["formHeading"] == "What's it worth?"
        assert template.form_schema.fields[0].id == "name"

    def test_non_admin_forbidden(self, dynamodb_table, api_gateway_event):
        from api.templates import handler

        response = handler(api_gateway_event(path="/admin/templates", is_admin=False), None)

        assert response["statusCode"] == 403
