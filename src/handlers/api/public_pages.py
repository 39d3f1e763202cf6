"""Public landing page handler (no authentication required)."""

from typing import Any

import structlog

from homeleads.repositories import DomainRepository, LayoutRepository, PageRepository
from homeleads.services.page_renderer import render_landing_page, render_not_found_page
from homeleads.services.page_resolver import (
    PageResolver,
    allows_any_domain_fallback,
    request_hostname,
)
from homeleads.utils.exceptions import NotFoundError, PageRedirect
from homeleads.utils.responses import PUBLIC_CORS_HEADERS, error, html, redirect, success

logger = structlog.get_logger()


def _header(event: dict, name: str) -> str | None:
    headers = event.get("headers") or {}
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


def handler(event: dict[str, Any], context: Any) -> dict:
    """Serve a landing page for the requesting hostname.

    Routes:
        GET /{slug}                - Rendered HTML
        GET /{slug}?format=json    - Resolved page content as JSON
    """
    try:
        http_method = event.get("httpMethod", "").upper()
        path_params = event.get("pathParameters", {}) or {}
        query_params = event.get("queryStringParameters", {}) or {}

        if http_method != "GET":
            return error("Method not allowed", 405, headers=PUBLIC_CORS_HEADERS)

        slug = (path_params.get("slug") or "").strip("/").lower()
        host = _header(event, "X-Forwarded-Host") or _header(event, "Host")
        hostname = request_hostname(host)

        if not slug:
            return html(render_not_found_page(hostname, slug), status_code=404, cache_seconds=0)

        return get_page(hostname, slug, as_json=query_params.get("format") == "json")

    except Exception as e:
        logger.exception("Public page handler error", error=str(e))
        return error("Internal server error", 500, headers=PUBLIC_CORS_HEADERS)


def get_page(hostname: str, slug: str, as_json: bool = False) -> dict:
    """Resolve and render one page."""
    resolver = PageResolver(DomainRepository(), PageRepository(), LayoutRepository())

    try:
        content = resolver.resolve(
            hostname,
            slug,
            allow_fallback_to_any_domain=allows_any_domain_fallback(hostname, slug),
        )
    except PageRedirect as r:
        return redirect(r.location)
    except NotFoundError:
        logger.info("Page not found", hostname=hostname, slug=slug)
        if as_json:
            return error("Page not found", 404, error_code="NOT_FOUND", headers=PUBLIC_CORS_HEADERS)
        return html(render_not_found_page(hostname, slug), status_code=404, cache_seconds=0)

    if as_json:
        return success(content.model_dump(mode="json"), headers=PUBLIC_CORS_HEADERS)

    return html(render_landing_page(content))
