"""Check API endpoint.

Runs the documentation checks against the served sources.
"""

from aiohttp import web

from docshelf.app_keys import site_loader_key
from docshelf.core.checker import check_site
from docshelf.core.nav_file import NavFileError, load_nav_file


def create_check_routes() -> list[web.RouteDef]:
    return [web.get("/api/check", get_check)]


async def get_check(request: web.Request) -> web.Response:
    site_loader = request.app[site_loader_key]
    nav_file = site_loader.nav_file

    try:
        entries = load_nav_file(nav_file) if nav_file is not None else None
    except NavFileError as e:
        return web.json_response({"error": "Invalid navigation file", "detail": str(e)}, status=500)

    report = check_site(site_loader.source_dir, entries, nav_source=nav_file)
    return web.json_response(report.to_dict())
