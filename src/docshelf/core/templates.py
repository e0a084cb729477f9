"""HTML page templates.

Wraps rendered document HTML into full pages with navigation,
breadcrumbs and table of contents.
"""

from collections.abc import Sequence

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

from docshelf.core.links import page_url
from docshelf.core.navigation import NavigationTree
from docshelf.core.renderer import TocEntry
from docshelf.core.site import BreadcrumbItem


class PageTemplates:
    """Renders pages with the templates bundled in the package."""

    def __init__(
        self,
        *,
        site_title: str,
        base_url: str = "/",
        live_reload: bool = False,
    ) -> None:
        """Initialize templates.

        Args:
            site_title: Title shown in the header and page titles
            base_url: Site base URL, starting and ending with "/"
            live_reload: Include the live reload script in every page
        """
        self._site_title = site_title
        self._base_url = base_url
        self._live_reload = live_reload
        self._env = Environment(
            loader=PackageLoader("docshelf", "templates"),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
            trim_blocks=False,
            lstrip_blocks=True,
        )
        self._env.globals["page_url"] = self.page_url

    @property
    def base_url(self) -> str:
        return self._base_url

    def page_url(self, path: str) -> str:
        """Public URL of a page path under the configured base URL."""
        return page_url(self._base_url, path)

    def render_page(
        self,
        *,
        title: str | None,
        content: str,
        navigation: NavigationTree,
        active_path: str | None,
        breadcrumbs: Sequence[BreadcrumbItem] = (),
        toc: Sequence[TocEntry] = (),
    ) -> str:
        """Render a document page.

        Args:
            title: Page title, shown as the page heading
            content: Rendered document HTML (inserted unescaped)
            navigation: Navigation tree for the sidebar
            active_path: Path of the page, highlighted in the sidebar
            breadcrumbs: Ancestor links
            toc: Table of contents entries

        Returns:
            Complete HTML document
        """
        template = self._env.get_template("page.html")
        return template.render(
            **self._common(navigation, active_path),
            title=title,
            content=content,
            breadcrumbs=list(breadcrumbs),
            toc=list(toc),
        )

    def render_not_found(self, path: str, navigation: NavigationTree) -> str:
        """Render the page shown for unknown paths."""
        template = self._env.get_template("not_found.html")
        return template.render(**self._common(navigation, None), path=path)

    def _common(self, navigation: NavigationTree, active_path: str | None) -> dict[str, object]:
        return {
            "site_title": self._site_title,
            "base_url": self._base_url,
            "navigation": navigation,
            "active_path": active_path,
            "live_reload": self._live_reload,
        }
