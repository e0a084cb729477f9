"""Site structure for document hierarchy.

Represents the document site structure with efficient path lookups
and traversal operations. Separate from navigation which is built
from the site for UI presentation.

A site is loaded either from the source directory layout or from a
navigation file that fixes the menu order explicitly.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from docshelf.core.links import (
    MARKDOWN_SUFFIX,
    doc_path_for,
    normalize_source_path,
    title_from_filename,
)
from docshelf.core.nav_file import NavEntry, load_nav_file
from docshelf.core.types import URLPath

logger = logging.getLogger(__name__)

H1_RE = re.compile(r"^#\s+(.+?)\s*#*\s*$")
FENCE_RE = re.compile(r"^\s*(```|~~~)")
SETEXT_H1_RE = re.compile(r"^ {0,3}=+\s*$")


@dataclass(frozen=True)
class Page:
    """Document page data.

    A page without a path is a section: a titled group of pages
    declared in the navigation file with no document of its own.
    """

    title: str
    path: URLPath | None
    source_path: Path | None

    @property
    def is_section(self) -> bool:
        return self.path is None


@dataclass(frozen=True)
class BreadcrumbItem:
    """Breadcrumb navigation item."""

    title: str
    path: str | None

    def to_dict(self) -> dict[str, str | None]:
        """Convert to dictionary for JSON serialization."""
        return {"title": self.title, "path": self.path}


class Site:
    """Document site structure with efficient path lookups.

    Stores pages in a flat list with parent/children relationships
    tracked by indices. Provides O(1) path lookups and O(d) breadcrumb
    building where d is the page depth.
    """

    __slots__ = (
        "_children",
        "_home",
        "_identity_index",
        "_pages",
        "_parents",
        "_path_index",
        "_roots",
        "_source_dir",
        "_source_index",
    )

    def __init__(
        self,
        source_dir: Path,
        pages: list[Page],
        children: list[list[int]],
        parents: list[int | None],
        roots: list[int],
        home: int | None = None,
    ) -> None:
        """Initialize site structure.

        Args:
            source_dir: Root directory containing markdown sources
            pages: Flat list of all pages
            children: Children indices for each page
            parents: Parent index for each page (None for roots)
            roots: Indices of root pages
            home: Index of the home page, if any (not part of roots)
        """
        self._source_dir = source_dir
        self._pages = pages
        self._children = children
        self._parents = parents
        self._roots = roots
        self._home = home
        self._identity_index = {id(page): i for i, page in enumerate(pages)}
        self._path_index: dict[str, int] = {}
        self._source_index: dict[Path, int] = {}
        for i, page in enumerate(pages):
            if page.path is not None:
                self._path_index.setdefault(page.path, i)
            if page.source_path is not None:
                self._source_index.setdefault(page.source_path, i)

    @property
    def source_dir(self) -> Path:
        """Root directory containing markdown sources."""
        return self._source_dir

    @property
    def pages(self) -> list[Page]:
        """All pages in insertion order, home page included."""
        return list(self._pages)

    @property
    def home(self) -> Page | None:
        """Home page built from the root index.md."""
        if self._home is None:
            return None
        return self._pages[self._home]

    def get_page(self, path: str) -> Page | None:
        """Get page by path.

        Args:
            path: Page path (e.g., "domain/page" or "/domain/page")

        Returns:
            Page if found, None otherwise
        """
        idx = self._path_index.get(self._normalize_path(path))
        if idx is None:
            return None
        return self._pages[idx]

    def get_children(self, path: str) -> list[Page]:
        """Get children of a page.

        Args:
            path: Page path (e.g., "domain/page" or "/domain/page")

        Returns:
            List of child Pages, empty if not found or no children
        """
        idx = self._path_index.get(self._normalize_path(path))
        if idx is None:
            return []
        return [self._pages[i] for i in self._children[idx]]

    def children_of(self, page: Page) -> list[Page]:
        """Get children of a page object, sections included."""
        idx = self._identity_index.get(id(page))
        if idx is None:
            return []
        return [self._pages[i] for i in self._children[idx]]

    def get_breadcrumbs(self, path: str) -> list[BreadcrumbItem]:
        """Build breadcrumbs for a given path.

        Returns breadcrumbs starting with "Home" for non-root pages,
        followed by ancestor pages. The current page is not included.

        Note:
            For unknown paths, returns [Home] to provide minimal navigation
            in UI even when the page doesn't exist in the site structure.
            This differs from get_page() which returns None for unknown paths.

        Args:
            path: Page path (e.g., "domain/page" or "/domain/page")

        Returns:
            List of BreadcrumbItem for ancestor navigation
        """
        if not path:
            return []

        home = BreadcrumbItem(title="Home", path="/")
        idx = self._path_index.get(self._normalize_path(path))
        if idx is None:
            return [home]

        ancestors: list[Page] = []
        current: int | None = idx
        while current is not None:
            ancestors.append(self._pages[current])
            current = self._parents[current]

        # Root-first, current page excluded
        ancestors.reverse()
        breadcrumbs = [home]
        for page in ancestors[:-1]:
            breadcrumbs.append(BreadcrumbItem(title=page.title, path=page.path))

        return breadcrumbs

    def get_root_pages(self) -> list[Page]:
        """Get root-level pages."""
        return [self._pages[i] for i in self._roots]

    def resolve_source_path(self, path: str) -> Path | None:
        """Resolve URL path to absolute source file path.

        Args:
            path: Page path (e.g., "guide" or "/guide")

        Returns:
            Absolute path to source file, None if page not found
        """
        page = self.get_page(path)
        if page is None or page.source_path is None:
            return None
        return self._source_dir / page.source_path

    def get_page_by_source(self, source_path: Path) -> Page | None:
        """Get page by source file path relative to source_dir."""
        idx = self._source_index.get(source_path)
        if idx is None:
            return None
        return self._pages[idx]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "source_dir": str(self._source_dir),
            "pages": [
                {
                    "title": page.title,
                    "path": page.path,
                    "source_path": page.source_path.as_posix() if page.source_path else None,
                }
                for page in self._pages
            ],
            "children": self._children,
            "parents": self._parents,
            "roots": self._roots,
            "home": self._home,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Site:
        """Restore a site from its dictionary form.

        Raises:
            KeyError: If a required key is missing
            TypeError: If a value has an unexpected type
        """
        pages = [
            Page(
                title=str(item["title"]),
                path=URLPath(item["path"]) if item["path"] is not None else None,
                source_path=Path(item["source_path"]) if item["source_path"] else None,
            )
            for item in data["pages"]
        ]
        return cls(
            source_dir=Path(data["source_dir"]),
            pages=pages,
            children=[list(c) for c in data["children"]],
            parents=list(data["parents"]),
            roots=list(data["roots"]),
            home=data.get("home"),
        )

    def _normalize_path(self, path: str) -> str:
        """Normalize path to have leading slash and no trailing slash."""
        normalized = path if path.startswith("/") else f"/{path}"
        if len(normalized) > 1:
            normalized = normalized.rstrip("/") or "/"
        return normalized


class SiteBuilder:
    """Builder for constructing Site instances."""

    def __init__(self, source_dir: Path) -> None:
        self._source_dir = source_dir
        self._pages: list[Page] = []
        self._children: list[list[int]] = []
        self._parents: list[int | None] = []
        self._roots: list[int] = []
        self._home: int | None = None

    def add_page(
        self,
        title: str,
        path: str | None,
        source_path: Path | None,
        parent_idx: int | None = None,
    ) -> int:
        """Add a page to the site.

        Args:
            title: Page title
            path: Page URL path, None for a section
            source_path: Source file relative to source_dir, None for a section
            parent_idx: Index of parent page, None for root

        Returns:
            Index of the added page
        """
        idx = self._append(title, path, source_path, parent_idx)
        if parent_idx is None:
            self._roots.append(idx)
        else:
            self._children[parent_idx].append(idx)
        return idx

    def set_home(self, title: str, source_path: Path) -> int:
        """Register the home page, reachable at "/" but not listed as a root."""
        idx = self._append(title, "/", source_path, None)
        self._home = idx
        return idx

    def build(self) -> Site:
        """Build the Site instance."""
        return Site(
            source_dir=self._source_dir,
            pages=self._pages,
            children=self._children,
            parents=self._parents,
            roots=self._roots,
            home=self._home,
        )

    def _append(
        self,
        title: str,
        path: str | None,
        source_path: Path | None,
        parent_idx: int | None,
    ) -> int:
        idx = len(self._pages)
        url_path = URLPath(path) if path is not None else None
        self._pages.append(Page(title=title, path=url_path, source_path=source_path))
        self._children.append([])
        self._parents.append(parent_idx)
        return idx


class SiteCache(Protocol):
    """Storage for a loaded Site between loader instances."""

    def get_site(self) -> Site | None: ...

    def set_site(self, site: Site) -> None: ...

    def invalidate_site(self) -> None: ...


class SiteLoader:
    """Loads the Site from the source directory or a navigation file.

    The loaded Site is memoized until invalidate() is called.
    """

    def __init__(
        self,
        source_dir: Path,
        cache: SiteCache | None = None,
        *,
        nav_file: Path | None = None,
    ) -> None:
        """Initialize loader.

        Args:
            source_dir: Root directory containing markdown sources
            cache: Optional external cache for the loaded Site
            nav_file: Navigation file; when None the tree follows the
                      directory layout
        """
        self._source_dir = source_dir
        self._cache = cache
        self._nav_file = nav_file
        self._site: Site | None = None

    @property
    def source_dir(self) -> Path:
        """Root directory containing markdown sources."""
        return self._source_dir

    @property
    def nav_file(self) -> Path | None:
        """Navigation file in use, if any."""
        return self._nav_file

    def load(self, *, use_cache: bool = True) -> Site:
        """Load the site structure.

        Args:
            use_cache: Reuse the memoized or externally cached Site

        Returns:
            Loaded Site

        Raises:
            NavFileError: If the navigation file is missing or malformed
        """
        if use_cache:
            if self._site is not None:
                return self._site
            if self._cache is not None:
                cached = self._cache.get_site()
                if cached is not None and cached.source_dir == self._source_dir:
                    self._site = cached
                    return cached

        if self._nav_file is not None:
            site = self._load_from_nav(load_nav_file(self._nav_file))
        else:
            site = self._load_from_directory()

        self._site = site
        if self._cache is not None:
            self._cache.set_site(site)
        return site

    def invalidate(self) -> None:
        """Drop the memoized Site and the external cache entry."""
        self._site = None
        if self._cache is not None:
            self._cache.invalidate_site()

    def _load_from_directory(self) -> Site:
        builder = SiteBuilder(self._source_dir)
        if not self._source_dir.is_dir():
            return builder.build()

        root_index = self._source_dir / "index.md"
        if root_index.is_file():
            builder.set_home(self._read_title(root_index), Path("index.md"))

        self._scan_directory(builder, self._source_dir, None)
        return builder.build()

    def _scan_directory(
        self,
        builder: SiteBuilder,
        directory: Path,
        parent_idx: int | None,
    ) -> None:
        """Add the contents of a directory under parent_idx."""
        for entry in sorted(directory.iterdir(), key=lambda p: p.name):
            if is_ignored_name(entry.name):
                continue

            if entry.is_dir():
                index_file = entry / "index.md"
                if index_file.is_file():
                    source_path = index_file.relative_to(self._source_dir)
                    idx = builder.add_page(
                        self._read_title(index_file),
                        doc_path_for(source_path),
                        source_path,
                        parent_idx,
                    )
                    self._scan_directory(builder, entry, idx)
                else:
                    # No index.md: children are promoted to this level
                    self._scan_directory(builder, entry, parent_idx)
                continue

            if entry.suffix != MARKDOWN_SUFFIX or entry.name == "index.md":
                continue

            source_path = entry.relative_to(self._source_dir)
            builder.add_page(
                self._read_title(entry),
                doc_path_for(source_path),
                source_path,
                parent_idx,
            )

    def _load_from_nav(self, entries: list[NavEntry]) -> Site:
        builder = SiteBuilder(self._source_dir)
        for entry in entries:
            self._add_nav_entry(builder, entry, None)
        return builder.build()

    def _add_nav_entry(
        self,
        builder: SiteBuilder,
        entry: NavEntry,
        parent_idx: int | None,
    ) -> None:
        if entry.is_section:
            idx = builder.add_page(entry.title or "", None, None, parent_idx)
            for child in entry.children:
                self._add_nav_entry(builder, child, idx)
            return

        if entry.is_external or entry.target is None:
            return

        source_path = normalize_source_path(entry.target)
        if source_path is None:
            logger.warning(
                "Navigation entry %s (line %s) points outside the source directory: %s",
                entry.title or entry.target,
                entry.line,
                entry.target,
            )
            return

        full_path = self._source_dir / source_path
        if not full_path.is_file():
            logger.warning(
                "Navigation entry %s (line %s) points to missing file %s",
                entry.title or entry.target,
                entry.line,
                full_path,
            )
        title = entry.title or self._read_title(full_path)
        builder.add_page(title, doc_path_for(source_path), source_path, parent_idx)

    def _read_title(self, path: Path) -> str:
        """Read the first H1 of a document, falling back to its filename."""
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return title_from_filename(path)
        return extract_title(text) or title_from_filename(path)


def extract_title(markdown_text: str) -> str | None:
    """Return the text of the first level-one heading, ATX or setext.

    Headings inside fenced code blocks are ignored.
    """
    in_fence = False
    previous: str | None = None
    for line in markdown_text.splitlines():
        if FENCE_RE.match(line):
            in_fence = not in_fence
            previous = None
            continue
        if in_fence:
            continue
        match = H1_RE.match(line)
        if match:
            return match.group(1)
        if previous is not None and SETEXT_H1_RE.match(line):
            return previous.strip()
        previous = line if line.strip() else None
    return None


def is_ignored_name(name: str) -> bool:
    """Hidden and partial files are never published."""
    return name.startswith((".", "_"))
