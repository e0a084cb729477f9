"""Pages API endpoint.

Handles page rendering and returns JSON responses with metadata, ToC, and HTML content.
"""

import logging
from datetime import UTC, datetime
from email.utils import formatdate
from hashlib import md5

from aiohttp import web

from docshelf.app_keys import renderer_key, site_loader_key, verbose_key

logger = logging.getLogger(__name__)


def create_pages_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/pages/{path:.*}", get_page),
    ]


async def get_page(request: web.Request) -> web.Response:
    path = request.match_info["path"]
    renderer = request.app[renderer_key]
    site = request.app[site_loader_key].load()

    normalized = "/" + path.strip("/")
    source_path = site.resolve_source_path(normalized)
    if source_path is None:
        return _not_found(path)

    try:
        result = renderer.render(source_path, normalized)
    except FileNotFoundError:
        return _not_found(path)

    if request.app[verbose_key] and result.warnings:
        for warning in result.warnings:
            logger.warning("%s: %s", normalized, warning)

    source_mtime = result.source_path.stat().st_mtime
    last_modified = datetime.fromtimestamp(source_mtime, tz=UTC)

    etag = _compute_etag(result.html)

    if_none_match = request.headers.get("If-None-Match")
    if if_none_match == etag:
        return web.Response(status=304)

    page = site.get_page(normalized)
    breadcrumbs = [b.to_dict() for b in site.get_breadcrumbs(normalized)] if normalized != "/" else []

    response_data = {
        "meta": {
            "title": result.title or (page.title if page else None),
            "path": normalized,
            "source_file": str(result.source_path),
            "last_modified": last_modified.isoformat(),
        },
        "breadcrumbs": breadcrumbs,
        "toc": [entry.to_dict() for entry in result.toc],
        "content": result.html,
    }

    return web.json_response(
        response_data,
        headers={
            "ETag": etag,
            "Last-Modified": formatdate(source_mtime, usegmt=True),
            "Cache-Control": "private, max-age=60",
        },
    )


def _not_found(path: str) -> web.Response:
    return web.json_response(
        {"error": "Page not found", "path": path},
        status=404,
    )


def _compute_etag(content: str) -> str:
    # First 16 hex chars (64 bits) of the content hash
    content_hash = md5(content.encode("utf-8"), usedforsecurity=False).hexdigest()[:16]
    return f'"{content_hash}"'
