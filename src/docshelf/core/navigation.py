"""Navigation tree builder.

Builds navigation trees from Site structures for UI presentation.
Navigation is a view layer over the site document hierarchy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypedDict

from docshelf.core.site import Page, Site
from docshelf.core.types import URLPath


class NavItemDict(TypedDict, total=False):
    """Dictionary representation of a navigation item."""

    title: str
    path: str
    children: list[NavItemDict]


class NavigationTreeDict(TypedDict):
    """Dictionary representation of a navigation tree."""

    items: list[NavItemDict]


@dataclass
class NavItem:
    """Navigation item with children for UI tree.

    Items without a path are sections from the navigation file.
    """

    title: str
    path: URLPath | None = None
    children: list[NavItem] = field(default_factory=list)

    def to_dict(self) -> NavItemDict:
        """Convert to dictionary for JSON serialization."""
        result: NavItemDict = {"title": self.title}
        if self.path is not None:
            result["path"] = self.path
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result

    def contains(self, path: str) -> bool:
        """Check whether this item or any descendant has the given path."""
        if self.path == path:
            return True
        return any(child.contains(path) for child in self.children)


@dataclass
class NavigationTree:
    """Navigation tree for the whole site or one of its sections."""

    items: list[NavItem] = field(default_factory=list)

    def to_dict(self) -> NavigationTreeDict:
        """Convert to dictionary for JSON serialization."""
        return {"items": [item.to_dict() for item in self.items]}


def build_navigation(site: Site, root_path: str | None = None) -> NavigationTree:
    """Build navigation tree from site structure.

    Args:
        site: Site structure to build navigation from
        root_path: Build only the children of this page; None for the full tree

    Returns:
        NavigationTree for navigation UI
    """
    if root_path is None:
        pages = site.get_root_pages()
    else:
        pages = site.get_children(root_path)
    return NavigationTree(items=[_build_nav_item(site, page) for page in pages])


def _build_nav_item(site: Site, page: Page) -> NavItem:
    """Recursively build NavItem from page."""
    return NavItem(
        title=page.title,
        path=page.path,
        children=[_build_nav_item(site, child) for child in site.children_of(page)],
    )
