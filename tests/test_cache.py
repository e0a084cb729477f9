"""Tests for file-based cache."""

import json
from pathlib import Path

from docshelf.core.cache import FileCache, NullCache
from docshelf.core.site import SiteBuilder


class TestFileCacheGet:
    """Tests for FileCache.get()."""

    def test_returns_none_for_missing_entry(self, tmp_path: Path) -> None:
        """Return None when cache entry doesn't exist."""
        cache = FileCache(tmp_path / ".cache")

        assert cache.get("graphs/bfs", 1234567890.0) is None

    def test_returns_none_when_html_missing(self, tmp_path: Path) -> None:
        """Return None when HTML file is missing but meta exists."""
        cache = FileCache(tmp_path / ".cache")
        meta_dir = tmp_path / ".cache" / "meta" / "graphs"
        meta_dir.mkdir(parents=True)
        (meta_dir / "bfs.json").write_text(
            json.dumps({"title": "BFS", "source_mtime": 1234567890.0, "toc": []})
        )

        assert cache.get("graphs/bfs", 1234567890.0) is None

    def test_returns_none_when_mtime_differs(self, tmp_path: Path) -> None:
        """Return None when source mtime doesn't match cached mtime."""
        cache = FileCache(tmp_path / ".cache")
        cache.set("graphs/bfs", "<p>Test</p>", "BFS", 1234567890.0, [])

        assert cache.get("graphs/bfs", 9999999999.0) is None

    def test_returns_none_for_corrupt_meta(self, tmp_path: Path) -> None:
        cache = FileCache(tmp_path / ".cache")
        cache.set("graphs/bfs", "<p>Test</p>", "BFS", 1234567890.0, [])
        (tmp_path / ".cache" / "meta" / "graphs" / "bfs.json").write_text("{not json")

        assert cache.get("graphs/bfs", 1234567890.0) is None

    def test_returns_entry_when_valid(self, tmp_path: Path) -> None:
        """Return CacheEntry when cache is valid."""
        cache = FileCache(tmp_path / ".cache")
        cache.set(
            "graphs/bfs",
            "<p>Test</p>",
            "BFS",
            1234567890.0,
            [{"level": 2, "title": "Queue", "id": "queue"}],
        )

        result = cache.get("graphs/bfs", 1234567890.0)

        assert result is not None
        assert result.html == "<p>Test</p>"
        assert result.meta["title"] == "BFS"
        assert result.meta["toc"] == [{"level": 2, "title": "Queue", "id": "queue"}]

    def test_returns_none_for_other_base_url(self, tmp_path: Path) -> None:
        cache = FileCache(tmp_path / ".cache")
        cache.set("graphs/bfs", "<a href=\"/arrays/\">", "BFS", 1234567890.0, [], base_url="/")

        assert cache.get("graphs/bfs", 1234567890.0, base_url="/notes/") is None
        assert cache.get("graphs/bfs", 1234567890.0, base_url="/") is not None

    def test_returns_stored_warnings(self, tmp_path: Path) -> None:
        cache = FileCache(tmp_path / ".cache")
        cache.set(
            "sorting",
            "<p>Test</p>",
            "Sorting",
            1234567890.0,
            [],
            warnings=["Unresolved link: merge.md"],
        )

        result = cache.get("sorting", 1234567890.0)

        assert result is not None
        assert result.meta["warnings"] == ["Unresolved link: merge.md"]

    def test_returns_none_for_meta_without_base_url(self, tmp_path: Path) -> None:
        cache = FileCache(tmp_path / ".cache")
        cache.set("graphs/bfs", "<p>Test</p>", "BFS", 1234567890.0, [])
        (tmp_path / ".cache" / "meta" / "graphs" / "bfs.json").write_text(
            '{"title": "BFS", "source_mtime": 1234567890.0, "toc": []}'
        )

        assert cache.get("graphs/bfs", 1234567890.0) is None


class TestFileCacheSet:
    """Tests for FileCache.set()."""

    def test_creates_directories(self, tmp_path: Path) -> None:
        cache = FileCache(tmp_path / ".cache")

        cache.set("graphs/shortest/dijkstra", "<p>Test</p>", "Title", 1234567890.0, [])

        assert (tmp_path / ".cache" / "pages" / "graphs" / "shortest" / "dijkstra.html").exists()
        assert (tmp_path / ".cache" / "meta" / "graphs" / "shortest" / "dijkstra.json").exists()

    def test_creates_gitignore(self, tmp_path: Path) -> None:
        """Create .gitignore in cache directory."""
        cache = FileCache(tmp_path / ".cache")

        cache.set("page", "<p>Test</p>", "Title", 1234567890.0, [])

        gitignore_path = tmp_path / ".cache" / ".gitignore"
        assert gitignore_path.read_text() == "# Ignore everything in this directory\n*\n"


class TestFileCacheInvalidate:
    """Tests for FileCache.invalidate() and clear()."""

    def test_invalidate_removes_entry(self, tmp_path: Path) -> None:
        cache = FileCache(tmp_path / ".cache")
        cache.set("graphs/bfs", "<p>Test</p>", "BFS", 1234567890.0, [])

        cache.invalidate("graphs/bfs")

        assert cache.get("graphs/bfs", 1234567890.0) is None

    def test_invalidate_missing_entry_is_noop(self, tmp_path: Path) -> None:
        cache = FileCache(tmp_path / ".cache")

        cache.invalidate("missing")

    def test_clear_removes_pages_and_site(self, tmp_path: Path) -> None:
        cache = FileCache(tmp_path / ".cache")
        cache.set("graphs/bfs", "<p>Test</p>", "BFS", 1234567890.0, [])
        cache.set_site(SiteBuilder(tmp_path / "docs").build())

        cache.clear()

        assert cache.get("graphs/bfs", 1234567890.0) is None
        assert cache.get_site() is None

    def test_clear_pages_keeps_site(self, tmp_path: Path) -> None:
        cache = FileCache(tmp_path / ".cache")
        cache.set("graphs/bfs", "<p>Test</p>", "BFS", 1234567890.0, [])
        cache.set_site(SiteBuilder(tmp_path / "docs").build())

        cache.clear_pages()

        assert cache.get("graphs/bfs", 1234567890.0) is None
        assert cache.get_site() is not None


class TestFileCacheSite:
    """Tests for site structure caching."""

    def test_get_site_returns_none_when_missing(self, tmp_path: Path) -> None:
        assert FileCache(tmp_path / ".cache").get_site() is None

    def test_set_site_round_trips(self, tmp_path: Path) -> None:
        cache = FileCache(tmp_path / ".cache")
        builder = SiteBuilder(tmp_path / "docs")
        builder.set_home("CP Notes", Path("index.md"))
        section_idx = builder.add_page("Graphs", None, None)
        builder.add_page("BFS", "/graphs/bfs", Path("graphs/bfs.md"), section_idx)
        site = builder.build()

        cache.set_site(site)
        restored = cache.get_site()

        assert restored is not None
        assert restored.pages == site.pages
        assert restored.home == site.home
        assert (tmp_path / ".cache" / "site.json").exists()

    def test_get_site_ignores_corrupt_file(self, tmp_path: Path) -> None:
        cache_dir = tmp_path / ".cache"
        cache_dir.mkdir()
        (cache_dir / "site.json").write_text('{"pages": 1}')

        assert FileCache(cache_dir).get_site() is None

    def test_invalidate_site_removes_file(self, tmp_path: Path) -> None:
        cache = FileCache(tmp_path / ".cache")
        cache.set_site(SiteBuilder(tmp_path / "docs").build())

        cache.invalidate_site()

        assert not (tmp_path / ".cache" / "site.json").exists()


class TestNullCache:
    """Tests for NullCache."""

    def test_never_stores_anything(self, tmp_path: Path) -> None:
        cache = NullCache(tmp_path / ".cache")

        cache.set("graphs/bfs", "<p>Test</p>", "BFS", 1234567890.0, [])
        cache.set_site(SiteBuilder(tmp_path / "docs").build())

        assert cache.get("graphs/bfs", 1234567890.0) is None
        assert cache.get_site() is None
        assert not (tmp_path / ".cache").exists()
