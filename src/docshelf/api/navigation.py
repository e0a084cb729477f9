"""Navigation API endpoints.

Provides full navigation tree and subtree endpoints.
"""

from aiohttp import web

from docshelf.app_keys import site_loader_key
from docshelf.core.navigation import build_navigation


def create_navigation_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/navigation", get_navigation),
        web.get("/api/navigation/{path:.*}", get_navigation_subtree),
    ]


async def get_navigation(request: web.Request) -> web.Response:
    site = request.app[site_loader_key].load()
    return web.json_response(build_navigation(site).to_dict())


async def get_navigation_subtree(request: web.Request) -> web.Response:
    path = request.match_info["path"]
    site = request.app[site_loader_key].load()

    normalized = path if path.startswith("/") else f"/{path}"
    page = site.get_page(normalized)
    if page is None:
        return web.json_response(
            {"error": "Section not found", "path": path},
            status=404,
        )

    return web.json_response(build_navigation(site, normalized).to_dict())
