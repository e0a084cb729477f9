"""Application keys for type-safe app configuration access."""

from aiohttp import web

from docshelf.core.renderer import PageRenderer
from docshelf.core.site import SiteLoader
from docshelf.core.templates import PageTemplates

renderer_key = web.AppKey("renderer", PageRenderer)
site_loader_key = web.AppKey("site_loader", SiteLoader)
templates_key = web.AppKey("templates", PageTemplates)
site_title_key = web.AppKey("site_title", str)
verbose_key = web.AppKey("verbose", bool)
live_reload_enabled_key = web.AppKey("live_reload_enabled", bool)
