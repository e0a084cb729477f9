"""Tests for navigation tree builder."""

from pathlib import Path

from docshelf.core.navigation import NavigationTree, NavItem, build_navigation
from docshelf.core.site import SiteBuilder, SiteLoader


class TestBuildNavigation:
    """Tests for build_navigation()."""

    def test__empty_site__returns_empty_tree(self, tmp_path: Path) -> None:
        site = SiteBuilder(tmp_path / "docs").build()

        tree = build_navigation(site)

        assert tree.items == []

    def test__nested_site__builds_tree(self, sample_docs: Path) -> None:
        """Build tree from nested directory structure."""
        site = SiteLoader(sample_docs).load()

        tree = build_navigation(site)

        assert [item.title for item in tree.items] == ["Arrays", "Graphs"]
        graphs = tree.items[1]
        assert graphs.path == "/graphs"
        assert [(c.title, c.path) for c in graphs.children] == [("BFS", "/graphs/bfs")]

    def test__home_page__not_listed(self, sample_docs: Path) -> None:
        site = SiteLoader(sample_docs).load()

        tree = build_navigation(site)

        assert all(item.path != "/" for item in tree.items)

    def test__root_path__returns_subtree(self, sample_docs: Path) -> None:
        site = SiteLoader(sample_docs).load()

        tree = build_navigation(site, "/graphs")

        assert [item.path for item in tree.items] == ["/graphs/bfs"]

    def test__unknown_root_path__returns_empty_tree(self, sample_docs: Path) -> None:
        site = SiteLoader(sample_docs).load()

        assert build_navigation(site, "/missing").items == []

    def test__section__has_no_path(self, tmp_path: Path) -> None:
        builder = SiteBuilder(tmp_path)
        section_idx = builder.add_page("Graphs", None, None)
        builder.add_page("BFS", "/graphs/bfs", Path("graphs/bfs.md"), section_idx)

        tree = build_navigation(builder.build())

        section = tree.items[0]
        assert section.path is None
        assert section.children == [NavItem(title="BFS", path="/graphs/bfs")]


class TestNavItem:
    """Tests for NavItem."""

    def test__to_dict__leaf(self) -> None:
        item = NavItem(title="Guide", path="/guide")

        assert item.to_dict() == {"title": "Guide", "path": "/guide"}

    def test__to_dict__section_omits_path(self) -> None:
        item = NavItem(title="Graphs", children=[NavItem(title="BFS", path="/graphs/bfs")])

        assert item.to_dict() == {
            "title": "Graphs",
            "children": [{"title": "BFS", "path": "/graphs/bfs"}],
        }

    def test__contains__finds_descendant(self) -> None:
        item = NavItem(
            title="Graphs",
            children=[NavItem(title="BFS", path="/graphs/bfs")],
        )

        assert item.contains("/graphs/bfs")
        assert not item.contains("/graphs/dfs")


class TestNavigationTree:
    """Tests for NavigationTree."""

    def test__to_dict__wraps_items(self) -> None:
        tree = NavigationTree(items=[NavItem(title="Guide", path="/guide")])

        assert tree.to_dict() == {"items": [{"title": "Guide", "path": "/guide"}]}

    def test__to_dict__empty(self) -> None:
        assert NavigationTree().to_dict() == {"items": []}
