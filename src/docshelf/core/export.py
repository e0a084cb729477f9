"""Static site export.

Writes every document of a Site as a standalone HTML page:

    site/
    ├── index.html                # Home page
    ├── graphs/
    │   ├── index.html            # graphs/index.md
    │   └── bfs/index.html        # graphs/bfs.md
    ├── images/diagram.png        # Copied non-markdown files
    ├── _static/style.css         # Bundled assets
    └── navigation.json           # Navigation tree
"""

import json
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from docshelf.assets import get_static_dir
from docshelf.core.links import MARKDOWN_SUFFIX
from docshelf.core.navigation import NavigationTree, build_navigation
from docshelf.core.renderer import PageRenderer
from docshelf.core.site import Page, Site, is_ignored_name
from docshelf.core.templates import PageTemplates

logger = logging.getLogger(__name__)

STATIC_PREFIX = "_static"


@dataclass
class ExportResult:
    """Summary of an export run."""

    pages: list[Path] = field(default_factory=list)
    assets: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class SiteExporter:
    """Exports a Site to a directory of static HTML files."""

    def __init__(
        self,
        site: Site,
        renderer: PageRenderer,
        templates: PageTemplates,
        output_dir: Path,
    ) -> None:
        """Initialize exporter.

        Args:
            site: Loaded site structure
            renderer: Renderer for document content
            templates: Page templates
            output_dir: Directory receiving the generated site
        """
        self._site = site
        self._renderer = renderer
        self._templates = templates
        self._output_dir = output_dir

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def export(self, *, clean: bool = False) -> ExportResult:
        """Write the whole site.

        Args:
            clean: Remove the output directory before writing

        Returns:
            ExportResult with written pages, copied assets and warnings

        Raises:
            ValueError: If cleaning would delete the documentation sources
        """
        if clean:
            self._clean()

        self._output_dir.mkdir(parents=True, exist_ok=True)
        result = ExportResult()
        navigation = build_navigation(self._site)

        for page in self._site.pages:
            self._export_page(page, navigation, result)

        self._copy_source_assets(result)
        self._copy_static(result)

        nav_path = self._output_dir / "navigation.json"
        nav_path.write_text(json.dumps(navigation.to_dict(), ensure_ascii=False), encoding="utf-8")

        logger.info(
            "Exported %d pages and %d assets to %s",
            len(result.pages),
            len(result.assets),
            self._output_dir,
        )
        return result

    def output_path_for(self, path: str) -> Path:
        """Output file for a page path ("/" -> index.html, "/a" -> a/index.html)."""
        stripped = path.strip("/")
        if not stripped:
            return self._output_dir / "index.html"
        return self._output_dir / stripped / "index.html"

    def _export_page(self, page: Page, navigation: NavigationTree, result: ExportResult) -> None:
        if page.path is None or page.source_path is None:
            return

        source_path = self._site.source_dir / page.source_path
        try:
            rendered = self._renderer.render(source_path, page.path)
        except FileNotFoundError:
            warning = f"{page.path}: source file not found ({page.source_path.as_posix()})"
            logger.warning(warning)
            result.warnings.append(warning)
            return

        result.warnings.extend(f"{page.path}: {w}" for w in rendered.warnings)

        html = self._templates.render_page(
            title=rendered.title or page.title,
            content=rendered.html,
            navigation=navigation,
            active_path=page.path,
            breadcrumbs=self._site.get_breadcrumbs(page.path) if page.path != "/" else [],
            toc=rendered.toc,
        )

        target = self.output_path_for(page.path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(html, encoding="utf-8")
        result.pages.append(target)
        logger.debug("Wrote %s", target)

    def _copy_source_assets(self, result: ExportResult) -> None:
        source_dir = self._site.source_dir
        if not source_dir.is_dir():
            return

        output = self._output_dir.resolve()
        for path in sorted(source_dir.rglob("*")):
            if not path.is_file() or path.suffix == MARKDOWN_SUFFIX:
                continue
            if output in path.resolve().parents:
                continue
            relative = path.relative_to(source_dir)
            if any(is_ignored_name(part) for part in relative.parts):
                continue
            target = self._output_dir / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(path, target)
            result.assets.append(target)

    def _copy_static(self, result: ExportResult) -> None:
        target_dir = self._output_dir / STATIC_PREFIX
        shutil.copytree(get_static_dir(), target_dir, dirs_exist_ok=True)
        result.assets.extend(p for p in sorted(target_dir.rglob("*")) if p.is_file())

    def _clean(self) -> None:
        if not self._output_dir.exists():
            return

        output = self._output_dir.resolve()
        source = self._site.source_dir.resolve()
        if source == output or output in source.parents:
            raise ValueError(
                f"Refusing to clean {self._output_dir}: it contains the documentation sources"
            )
        shutil.rmtree(self._output_dir)
