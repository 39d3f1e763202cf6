"""Master templates API handler (admin, authenticated)."""

from typing import Any

import structlog

from homeleads.repositories import TemplateRepository
from homeleads.services.page_service import PageService
from homeleads.utils.auth import require_admin
from homeleads.utils.exceptions import ForbiddenError, UnauthorizedError
from homeleads.utils.responses import error, forbidden, success, unauthorized

logger = structlog.get_logger()


def handler(event: dict[str, Any], context: Any) -> dict:
    """Handle master template requests.

    Routes:
        GET  /admin/templates
        POST /admin/master-templates/sync-from-pages
    """
    try:
        http_method = event.get("httpMethod", "").upper()
        path = event.get("path", "")

        require_admin(event)

        if http_method == "POST" and path.rstrip("/").endswith("/sync-from-pages"):
            return sync_from_pages()
        elif http_method == "GET":
            return list_templates()
        else:
            return error("Method not allowed", 405)

    except UnauthorizedError as e:
        return unauthorized(e.message)
    except ForbiddenError as e:
        return forbidden(e.message)
    except Exception as e:
        logger.exception("Templates handler error", error=str(e))
        return error("Internal server error", 500)


def list_templates() -> dict:
    templates = TemplateRepository().list_all()
    return success({"items": [t.model_dump(mode="json") for t in templates]})


def sync_from_pages() -> dict:
    """Overwrite master templates from the master-buyer/master-seller pages."""
    updates = PageService().sync_master_templates()
    if not updates:
        return success({"message": "No master-buyer or master-seller pages found.", "updates": []})
    return success({"message": "Master templates synced from master pages.", "updates": updates})
