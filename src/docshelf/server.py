"""aiohttp preview server for Docshelf.

Application factory and route registration for the local preview server.
Pages are rendered on request, so edits show up without a rebuild.
"""

import logging
from pathlib import Path

from aiohttp import web

from docshelf.api.check import create_check_routes
from docshelf.api.config import create_config_routes
from docshelf.api.navigation import create_navigation_routes
from docshelf.api.pages import create_pages_routes
from docshelf.app_keys import (
    live_reload_enabled_key,
    renderer_key,
    site_loader_key,
    site_title_key,
    templates_key,
    verbose_key,
)
from docshelf.assets import get_static_dir
from docshelf.config import Config
from docshelf.core.navigation import build_navigation
from docshelf.core.site import is_ignored_name
from docshelf.core.templates import PageTemplates
from docshelf.live import LiveReloadManager
from docshelf.live.reload import create_live_reload_routes
from docshelf.project import Project

logger = logging.getLogger(__name__)

live_reload_manager_key = web.AppKey("live_reload_manager", LiveReloadManager)


async def serve_page(request: web.Request) -> web.StreamResponse:
    """Serve a rendered HTML page, or a raw file from the source directory.

    Unknown paths get the "Page not found" page with status 404.
    """
    path = request.match_info["path"]
    normalized = "/" + path.strip("/")
    site = request.app[site_loader_key].load()
    templates = request.app[templates_key]
    navigation = build_navigation(site)

    page = site.get_page(normalized)
    source_path = site.resolve_source_path(normalized)
    if page is not None and source_path is not None:
        try:
            result = request.app[renderer_key].render(source_path, normalized)
        except FileNotFoundError:
            logger.warning("Navigation entry %s has no source file %s", normalized, source_path)
        else:
            if request.app[verbose_key]:
                for warning in result.warnings:
                    logger.warning("%s: %s", normalized, warning)
            html = templates.render_page(
                title=result.title or page.title,
                content=result.html,
                navigation=navigation,
                active_path=normalized,
                breadcrumbs=site.get_breadcrumbs(normalized) if normalized != "/" else [],
                toc=result.toc,
            )
            return web.Response(text=html, content_type="text/html")

    asset = _resolve_asset(site.source_dir, path)
    if asset is not None:
        return web.FileResponse(asset)

    return web.Response(
        text=templates.render_not_found(normalized, navigation),
        content_type="text/html",
        status=404,
    )


def _resolve_asset(source_dir: Path, path: str) -> Path | None:
    """Resolve a request path to a non-markdown file inside source_dir."""
    relative = Path(path.strip("/"))
    if not relative.parts or any(is_ignored_name(part) for part in relative.parts):
        return None

    root = source_dir.resolve()
    candidate = (root / relative).resolve()
    if root not in candidate.parents or not candidate.is_file():
        return None
    if candidate.suffix == ".md":
        return None
    return candidate


def create_app(config: Config, *, verbose: bool = False) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        verbose: Log rendering warnings such as unresolved links

    Returns:
        Configured aiohttp application
    """
    app = web.Application()

    # The preview server always serves from the root
    project = Project.from_config(config, base_url="/")
    templates = PageTemplates(
        site_title=config.site.title,
        base_url="/",
        live_reload=config.live_reload.enabled,
    )

    app[renderer_key] = project.renderer
    app[site_loader_key] = project.site_loader
    app[templates_key] = templates
    app[site_title_key] = config.site.title
    app[verbose_key] = verbose
    app[live_reload_enabled_key] = config.live_reload.enabled

    # API routes (must be registered first to take precedence over page fallback)
    app.router.add_routes(create_config_routes())
    app.router.add_routes(create_pages_routes())
    app.router.add_routes(create_navigation_routes())
    app.router.add_routes(create_check_routes())

    if config.live_reload.enabled:
        extra_paths = [config.site.nav_file] if config.site.nav_file is not None else []
        manager = LiveReloadManager(
            config.docs.source_dir,
            watch_patterns=config.live_reload.watch_patterns,
            site_loader=project.site_loader,
            page_cache=project.renderer.cache,
            extra_paths=extra_paths,
        )
        app[live_reload_manager_key] = manager
        app.router.add_routes(create_live_reload_routes(manager))
        app.on_startup.append(_start_live_reload)
        app.on_cleanup.append(_stop_live_reload)

    app.router.add_static("/_static", get_static_dir())

    # Page fallback - must be last to catch all non-API routes
    app.router.add_get("/{path:.*}", serve_page)

    return app


async def _start_live_reload(app: web.Application) -> None:
    """Start live reload on application startup."""
    await app[live_reload_manager_key].start()


async def _stop_live_reload(app: web.Application) -> None:
    """Stop live reload on application cleanup."""
    await app[live_reload_manager_key].stop()


def run_server(config: Config, *, verbose: bool = False) -> None:
    """Run the server.

    Args:
        config: Application configuration
        verbose: Log rendering warnings such as unresolved links
    """
    app = create_app(config, verbose=verbose)
    web.run_app(app, host=config.server.host, port=config.server.port)
