"""Pages API handler (admin, authenticated)."""

import json
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from homeleads.models.blocks import SectionConfig
from homeleads.models.page import PageStatus
from homeleads.services.block_serialization import (
    blocks_to_graph,
    effective_blocks,
    extract_hero_elements,
    graph_to_blocks,
    graph_to_sections,
    hero_elements_from_sections,
    hero_elements_to_graph,
    sections_to_graph,
    with_hero_elements,
)
from homeleads.services.grid_layout import merge_layout
from homeleads.services.page_service import PageService
from homeleads.utils.auth import require_admin
from homeleads.utils.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from homeleads.utils.responses import (
    conflict,
    created,
    error,
    forbidden,
    not_found,
    success,
    unauthorized,
    validation_error,
)

logger = structlog.get_logger()


def handler(event: dict[str, Any], context: Any) -> dict:
    """Handle pages API requests.

    Routes:
        GET    /admin/pages?domain_id=...&status=...
        POST   /admin/pages                  - Create from master template
        POST   /admin/pages/duplicate
        GET    /admin/pages/{page_id}        - Page with layout and editor graphs
        PATCH  /admin/pages/{page_id}
        DELETE /admin/pages/{page_id}
        POST   /admin/revalidate             - Invalidate one public page
    """
    try:
        http_method = event.get("httpMethod", "").upper()
        path = event.get("path", "")
        path_params = event.get("pathParameters", {}) or {}
        page_id = path_params.get("page_id")

        logger.info("Pages request", method=http_method, path=path, page_id=page_id)

        require_admin(event)
        service = PageService()

        if http_method == "POST" and path.rstrip("/").endswith("/revalidate"):
            return revalidate(service, event)
        elif http_method == "POST" and path.rstrip("/").endswith("/pages/duplicate"):
            return duplicate_page(service, event)
        elif http_method == "GET" and page_id:
            return get_page(service, page_id)
        elif http_method == "GET":
            return list_pages(service, event)
        elif http_method == "POST":
            return create_page(service, event)
        elif http_method == "PATCH" and page_id:
            return update_page(service, page_id, event)
        elif http_method == "DELETE" and page_id:
            return delete_page(service, page_id)
        else:
            return error("Method not allowed", 405)

    except ValidationError as e:
        return validation_error(e.errors)
    except NotFoundError as e:
        return not_found(e.resource_type, e.resource_id)
    except ConflictError as e:
        return conflict(e.message)
    except UnauthorizedError as e:
        return unauthorized(e.message)
    except ForbiddenError as e:
        return forbidden(e.message)
    except PydanticValidationError as e:
        return validation_error(ValidationError.from_pydantic(e).errors)
    except json.JSONDecodeError:
        return error("Invalid JSON body", 400)
    except Exception as e:
        logger.exception("Pages handler error", error=str(e))
        return error("Internal server error", 500)


def _body(event: dict) -> dict:
    body = json.loads(event.get("body") or "{}")
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def list_pages(service: PageService, event: dict) -> dict:
    query_params = event.get("queryStringParameters", {}) or {}
    domain_id = query_params.get("domain_id")
    status = query_params.get("status")

    if status and status not in {s.value for s in PageStatus}:
        raise ValidationError([{"field": "status", "message": f"Unknown status '{status}'"}])

    if domain_id:
        pages = service.page_repo.list_by_domain(domain_id, PageStatus(status) if status else None)
    else:
        pages = service.page_repo.list_all()
        if status:
            pages = [p for p in pages if p.status == status]

    return success({"items": [p.model_dump(mode="json") for p in pages]})


def get_page(service: PageService, page_id: str) -> dict:
    """Page plus its merged layout and the editor graphs."""
    page = service.page_repo.get_by_id(page_id)
    if not page:
        return not_found("Page", page_id)

    saved = service.layout_repo.get_layout(page.id)
    blocks = effective_blocks(page.blocks)
    hero_elements = hero_elements_from_sections(page.sections)

    editor = {
        "blocks": blocks_to_graph(blocks),
        "sections": sections_to_graph(page.sections),
    }
    if hero_elements is not None:
        editor["hero"] = hero_elements_to_graph(hero_elements, blocks)

    return success({
        "page": page.model_dump(mode="json"),
        "layout": [
            item.model_dump(mode="json", by_alias=True)
            for item in merge_layout(saved.layout_data if saved else None)
        ],
        "editor": editor,
    })


def create_page(service: PageService, event: dict) -> dict:
    page = service.create_from_template(_body(event))
    return created(page.model_dump(mode="json"))


def duplicate_page(service: PageService, event: dict) -> dict:
    body = _body(event)
    # Editor forms post camelCase
    if "pageId" in body and "page_id" not in body:
        body["page_id"] = body.pop("pageId")
    if not body.get("page_id"):
        raise ValidationError([{"field": "page_id", "message": "Missing pageId"}])
    page = service.duplicate_page(body)
    return created({"page": page.model_dump(mode="json")})


def _apply_editor_graphs(service: PageService, page_id: str, body: dict) -> dict:
    """Translate editor graphs in the body into stored blocks and sections."""
    blocks_graph = body.pop("blocks_graph", None)
    sections_graph = body.pop("sections_graph", None)
    hero_graph = body.pop("hero_graph", None)

    if blocks_graph is not None:
        body["blocks"] = [b.model_dump() for b in graph_to_blocks(blocks_graph, strict=True)]
    if sections_graph is not None:
        body["sections"] = [s.model_dump() for s in graph_to_sections(sections_graph)]
    if hero_graph is not None:
        hero_elements = extract_hero_elements(hero_graph)
        if hero_elements is None:
            raise ValidationError([{"field": "hero_graph", "message": "Hero layout block is missing"}])
        if "sections" in body:
            sections = [SectionConfig.model_validate(s) for s in body["sections"]]
        else:
            page = service.page_repo.get_by_id(page_id)
            if not page:
                raise NotFoundError("Page", page_id)
            sections = page.sections
        body["sections"] = [s.model_dump() for s in with_hero_elements(sections, hero_elements)]
    return body


def update_page(service: PageService, page_id: str, event: dict) -> dict:
    body = _body(event)
    if "layoutData" in body and "layout_data" not in body:
        body["layout_data"] = body.pop("layoutData")
    body = _apply_editor_graphs(service, page_id, body)
    page = service.update_page(page_id, body)
    return success({"page": page.model_dump(mode="json")})


def delete_page(service: PageService, page_id: str) -> dict:
    leads_deleted = service.delete_page(page_id)
    return success({"ok": True, "leads_deleted": leads_deleted})


def revalidate(service: PageService, event: dict) -> dict:
    body = _body(event)
    return success(service.revalidate(body.get("domain") or "", body.get("slug") or ""))
