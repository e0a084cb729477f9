"""Wiring of configuration into site loader, cache and renderer.

Shared by the preview server and the CLI build/check commands.
"""

from __future__ import annotations

from dataclasses import dataclass

from docshelf.config import Config
from docshelf.core.cache import FileCache, NullCache
from docshelf.core.nav_file import NavEntry, load_nav_file
from docshelf.core.renderer import PageRenderer
from docshelf.core.site import SiteLoader


@dataclass
class Project:
    """Objects built from one configuration."""

    config: Config
    cache: FileCache | NullCache
    site_loader: SiteLoader
    renderer: PageRenderer

    @classmethod
    def from_config(
        cls,
        config: Config,
        *,
        base_url: str | None = None,
        cache_pages: bool = True,
    ) -> Project:
        """Build project objects.

        Args:
            config: Application configuration
            base_url: Base URL for rewritten links; defaults to site.base_url
            cache_pages: Reuse cached page renders; False renders every
                         page from its source

        Returns:
            Project instance
        """
        cache: FileCache | NullCache
        if config.docs.cache_enabled:
            cache = FileCache(config.docs.cache_dir)
        else:
            cache = NullCache(config.docs.cache_dir)

        site_loader = SiteLoader(
            config.docs.source_dir,
            cache,
            nav_file=config.site.nav_file,
        )
        renderer = PageRenderer(
            cache if cache_pages else NullCache(config.docs.cache_dir),
            source_dir=config.docs.source_dir,
            base_url=base_url if base_url is not None else config.site.base_url,
        )
        return cls(config=config, cache=cache, site_loader=site_loader, renderer=renderer)

    def load_nav_entries(self) -> list[NavEntry] | None:
        """Parse the navigation file, None when navigation follows directories.

        Raises:
            NavFileError: If the navigation file is missing or malformed
        """
        nav_file = self.config.site.nav_file
        if nav_file is None:
            return None
        return load_nav_file(nav_file)
