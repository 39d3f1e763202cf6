"""Tests for the pages API handler."""

import json

from homeleads.models.lead import Lead
from homeleads.repositories import LayoutRepository, LeadRepository, PageRepository


def _parse_body(response: dict) -> dict:
    return json.loads(response["body"])


def _graph(*nodes):
    """Editor graph with the given (node_id, resolvedName, props) children under ROOT."""
    graph = {"ROOT": {"type": "div", "isCanvas": True, "props": {}, "nodes": [n[0] for n in nodes]}}
    for node_id, resolved_name, props in nodes:
        graph[node_id] = {"type": {"resolvedName": resolved_name}, "props": props, "parent": "ROOT", "nodes": []}
    return graph


class TestListPages:
    """Tests for GET /admin/pages."""

    def test_list_by_domain_and_status(self, api_gateway_event, domain, make_page):
        from api.pages import handler

        make_page(domain.id, "tetherow-home")
        make_page(domain.id, "draft-page", status="draft")

        response = handler(api_gateway_event(
            path="/admin/pages",
            query_params={"domain_id": domain.id, "status": "draft"},
        ), None)

        assert response["statusCode"] == 200
        assert [p["slug"] for p in _parse_body(response)["items"]] == ["draft-page"]

    def test_unknown_status(self, api_gateway_event, dynamodb_table):
        from api.pages import handler

        response = handler(api_gateway_event(path="/admin/pages", query_params={"status": "archived"}), None)

        assert response["statusCode"] == 400


class TestCreatePage:
    """Tests for POST /admin/pages and /admin/pages/duplicate."""

    def test_create_draft(self, api_gateway_event, domain):
        from api.pages import handler

        response = handler(api_gateway_event(
            method="POST",
            path="/admin/pages",
            body={"domain_id": domain.id, "slug": "Sunriver", "type": "seller", "headline": "Sell in Sunriver"},
        ), None)

        assert response["statusCode"] == 201
        body = _parse_body(response)
        assert body["slug"] == "sunriver"
        assert body["status"] == "draft"

    def test_create_duplicate_slug_conflicts(self, api_gateway_event, domain, make_page):
        from api.pages import handler

        make_page(domain.id, "sunriver")

        response = handler(api_gateway_event(
            method="POST",
            path="/admin/pages",
            body={"domain_id": domain.id, "slug": "sunriver", "type": "buyer", "headline": "Again"},
        ), None)

        assert response["statusCode"] == 409

    def test_create_unknown_domain(self, api_gateway_event, dynamodb_table):
        from api.pages import handler

        response = handler(api_gateway_event(
            method="POST",
            path="/admin/pages",
            body={"domain_id": "missing", "slug": "x", "type": "buyer", "headline": "X"},
        ), None)

        assert response["statusCode"] == 404

    def test_duplicate_accepts_camel_case_id(self, api_gateway_event, domain, make_page):
        from api.pages import handler

        page = make_page(domain.id, "sunriver")

        response = handler(api_gateway_event(
            method="POST",
            path="/admin/pages/duplicate",
            body={"pageId": page.id},
        ), None)

        assert response["statusCode"] == 201
        copy = _parse_body(response)["page"]
        assert copy["slug"] == "sunriver-copy"
        assert copy["status"] == "draft"
        assert copy["id"] != page.id

    def test_duplicate_requires_page_id(self, api_gateway_event, dynamodb_table):
        from api.pages import handler

        response = handler(api_gateway_event(method="POST", path="/admin/pages/duplicate", body={}), None)

        assert response["statusCode"] == 400
        assert _parse_body(response)["message"] == "Missing pageId"


class TestGetPage:
    """Tests for GET /admin/pages/{page_id}."""

    def test_page_with_default_layout_and_graphs(self, api_gateway_event, domain, make_page):
        from api.pages import handler

        page = make_page(domain.id, "sunriver")

        response = handler(api_gateway_event(
            path=f"/admin/pages/{page.id}",
            path_params={"page_id": page.id},
        ), None)

        assert response["statusCode"] == 200
        body = _parse_body(response)
        assert body["page"]["id"] == page.id
        assert [item["i"] for item in body["layout"]] == [
            "header-bar", "footer-bar", "text-container", "form-container",
        ]
        assert body["layout"][2]["minW"] == 4
        root = body["editor"]["blocks"]["ROOT"]
        assert len(root["nodes"]) == 5
        assert "hero" not in body["editor"]

    def test_missing_page(self, api_gateway_event, dynamodb_table):
        from api.pages import handler

        response = handler(api_gateway_event(path="/admin/pages/nope", path_params={"page_id": "nope"}), None)

        assert response["statusCode"] == 404


class TestUpdatePage:
    """Tests for PATCH /admin/pages/{page_id}."""

    def test_update_fields_and_layout(self, api_gateway_event, domain, make_page):
        from api.pages import handler

        page = make_page(domain.id, "sunriver")

        response = handler(api_gateway_event(
            method="PATCH",
            path=f"/admin/pages/{page.id}",
            path_params={"page_id": page.id},
            body={
                "headline": "New headline",
                "layout_data": [{"i": "form-container", "x": 6, "y": 1, "w": 6, "h": 5}],
            },
        ), None)

        assert response["statusCode"] == 200
        assert _parse_body(response)["page"]["headline"] == "New headline"
        saved = LayoutRepository().get_layout(page.id)
        assert saved is not None
        assert next(item for item in saved.layout_data if item.i == "form-container").x == 6

    def test_layout_accepts_camel_case_key(self, api_gateway_event, domain, make_page):
        from api.pages import handler

        page = make_page(domain.id, "sunriver")

        response = handler(api_gateway_event(
            method="PATCH",
            path=f"/admin/pages/{page.id}",
            path_params={"page_id": page.id},
            body={"layoutData": [{"i": "header-bar", "x": 0, "y": 0, "w": 12, "h": 1, "hidden": True}]},
        ), None)

        assert response["statusCode"] == 200
        saved = LayoutRepository().get_layout(page.id)
        assert saved is not None
        assert next(item for item in saved.layout_data if item.i == "header-bar").hidden is True

    def test_blocks_graph_saved_in_order(self, api_gateway_event, domain, make_page):
        from api.pages import handler

        page = make_page(domain.id, "sunriver")
        graph = _graph(
            ("block-form", "HeroFormBlock", {"id": "block-form", "kind": "heroForm", "props": {}}),
            ("block-head", "HeroHeadlineBlock", {"id": "block-head", "kind": "heroHeadline", "props": {"text": "Hi"}}),
        )

        response = handler(api_gateway_event(
            method="PATCH",
            path=f"/admin/pages/{page.id}",
            path_params={"page_id": page.id},
            body={"blocks_graph": graph},
        ), None)

        assert response["statusCode"] == 200
        stored = PageRepository().get_by_id(page.id)
        assert [b.kind for b in stored.blocks] == ["heroForm", "heroHeadline"]
        assert stored.blocks[1].props == {"text": "Hi"}

    def test_unknown_block_rejected(self, api_gateway_event, domain, make_page):
        from api.pages import handler

        page = make_page(domain.id, "sunriver")
        graph = _graph(("block-x", "MysteryBlock", {"id": "block-x"}))

        response = handler(api_gateway_event(
            method="PATCH",
            path=f"/admin/pages/{page.id}",
            path_params={"page_id": page.id},
            body={"blocks_graph": graph},
        ), None)

        assert response["statusCode"] == 400
        assert "MysteryBlock" in _parse_body(response)["message"]

    def test_slug_conflict(self, api_gateway_event, domain, make_page):
        from api.pages import handler

        make_page(domain.id, "taken")
        page = make_page(domain.id, "sunriver")

        response = handler(api_gateway_event(
            method="PATCH",
            path=f"/admin/pages/{page.id}",
            path_params={"page_id": page.id},
            body={"slug": "taken"},
        ), None)

        assert response["statusCode"] == 409


class TestDeletePage:
    """Tests for DELETE /admin/pages/{page_id}."""

    def test_delete_removes_leads(self, api_gateway_event, domain, make_page):
        from api.pages import handler

        page = make_page(domain.id, "sunriver")
        LeadRepository().create_lead(Lead(domain_id=domain.id, page_id=page.id, type="buyer"))

        response = handler(api_gateway_event(
            method="DELETE",
            path=f"/admin/pages/{page.id}",
            path_params={"page_id": page.id},
        ), None)

        assert response["statusCode"] == 200
        assert _parse_body(response) == {"ok": True, "leads_deleted": 1}
        assert PageRepository().get_by_id(page.id) is None
        assert PageRepository().get_by_slug(domain.id, "sunriver") is None


class TestRevalidate:
    """Tests for POST /admin/revalidate."""

    def test_unconfigured_cdn(self, api_gateway_event, dynamodb_table):
        from api.pages import handler

        response = handler(api_gateway_event(
            method="POST",
            path="/admin/revalidate",
            body={"domain": "tetherowhomes.com", "slug": "sunriver"},
        ), None)

        assert response["statusCode"] == 200
        assert _parse_body(response) == {"revalidated": False, "path": "/tetherowhomes.com/sunriver"}

    def test_missing_slug(self, api_gateway_event, dynamodb_table):
        from api.pages import handler

        response = handler(api_gateway_event(
            method="POST", path="/admin/revalidate", body={"domain": "tetherowhomes.com"},
        ), None)

        assert response["statusCode"] == 400
