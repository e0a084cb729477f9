"""File-based cache with mtime invalidation.

Cache structure:
    .cache/
    ├── pages/
    │   └── graphs/
    │       └── bfs.html          # Rendered HTML
    ├── meta/
    │   └── graphs/
    │       └── bfs.json          # Extracted metadata
    └── site.json                 # Loaded site structure
"""

import json
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import TypedDict

from docshelf.core.site import Site

logger = logging.getLogger(__name__)


class CachedMetadata(TypedDict):
    """Cached page metadata structure."""

    title: str | None
    source_mtime: float
    base_url: str
    toc: list[dict[str, str | int]]
    warnings: list[str]


@dataclass
class CacheEntry:
    """Result of cache lookup."""

    html: str
    meta: CachedMetadata


class FileCache:
    """File-based cache for rendered HTML, metadata and the site structure.

    Uses source file mtime for invalidation. Cache entries are considered valid
    when the cached mtime matches the current source file mtime and the entry
    was rendered for the same base URL.
    """

    _GITIGNORE_CONTENT = "# Ignore everything in this directory\n*\n"

    def __init__(self, cache_dir: Path) -> None:
        """Initialize cache with directory path.

        Args:
            cache_dir: Root directory for cache files (e.g., .cache/)
        """
        self._cache_dir = cache_dir
        self._pages_dir = cache_dir / "pages"
        self._meta_dir = cache_dir / "meta"
        self._site_path = cache_dir / "site.json"

    @property
    def cache_dir(self) -> Path:
        """Root cache directory."""
        return self._cache_dir

    def _ensure_cache_dir(self) -> None:
        """Create cache directory with .gitignore if it doesn't exist."""
        if not self._cache_dir.exists():
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            gitignore_path = self._cache_dir / ".gitignore"
            gitignore_path.write_text(self._GITIGNORE_CONTENT, encoding="utf-8")

    def get(self, path: str, source_mtime: float, *, base_url: str = "/") -> CacheEntry | None:
        """Retrieve cached entry if valid.

        Args:
            path: Document path (e.g., "graphs/bfs")
            source_mtime: Current mtime of source file
            base_url: Base URL the caller renders links for

        Returns:
            CacheEntry if cache hit and valid, None otherwise
        """
        html_path = self._pages_dir / f"{path}.html"
        meta_path = self._meta_dir / f"{path}.json"

        if not html_path.exists() or not meta_path.exists():
            return None

        meta = self._read_meta(meta_path)
        if meta is None:
            return None

        if meta["source_mtime"] != source_mtime:
            return None
        if meta["base_url"] != base_url:
            return None

        try:
            html = html_path.read_text(encoding="utf-8")
        except OSError:
            return None

        return CacheEntry(html=html, meta=meta)

    def set(
        self,
        path: str,
        html: str,
        title: str | None,
        source_mtime: float,
        toc: list[dict[str, str | int]],
        *,
        base_url: str = "/",
        warnings: list[str] | None = None,
    ) -> None:
        """Store entry in cache.

        Args:
            path: Document path (e.g., "graphs/bfs")
            html: Rendered HTML content
            title: Extracted title (or None)
            source_mtime: Source file mtime for invalidation
            toc: Table of contents entries
            base_url: Base URL the links in html were rendered for
            warnings: Rendering warnings to report again on cache hits
        """
        self._ensure_cache_dir()

        html_path = self._pages_dir / f"{path}.html"
        meta_path = self._meta_dir / f"{path}.json"

        html_path.parent.mkdir(parents=True, exist_ok=True)
        meta_path.parent.mkdir(parents=True, exist_ok=True)

        html_path.write_text(html, encoding="utf-8")

        meta: CachedMetadata = {
            "title": title,
            "source_mtime": source_mtime,
            "base_url": base_url,
            "toc": toc,
            "warnings": warnings or [],
        }
        meta_path.write_text(json.dumps(meta), encoding="utf-8")

    def invalidate(self, path: str) -> None:
        """Remove entry from cache.

        Args:
            path: Document path to invalidate
        """
        html_path = self._pages_dir / f"{path}.html"
        meta_path = self._meta_dir / f"{path}.json"

        if html_path.exists():
            html_path.unlink()
        if meta_path.exists():
            meta_path.unlink()

    def clear_pages(self) -> None:
        """Remove all rendered pages, keeping the site structure."""
        if self._pages_dir.exists():
            shutil.rmtree(self._pages_dir)
        if self._meta_dir.exists():
            shutil.rmtree(self._meta_dir)

    def clear(self) -> None:
        """Remove all cached entries."""
        self.clear_pages()
        self.invalidate_site()

    def get_site(self) -> Site | None:
        """Retrieve cached site structure.

        Returns:
            Site if cached and readable, None otherwise
        """
        if not self._site_path.exists():
            return None

        try:
            data = json.loads(self._site_path.read_text(encoding="utf-8"))
            return Site.from_dict(data)
        except (OSError, json.JSONDecodeError, KeyError, TypeError) as e:
            logger.debug("Ignoring unreadable site cache %s: %s", self._site_path, e)
            return None

    def set_site(self, site: Site) -> None:
        """Store site structure in cache.

        Args:
            site: Loaded site
        """
        self._ensure_cache_dir()
        self._site_path.write_text(json.dumps(site.to_dict()), encoding="utf-8")

    def invalidate_site(self) -> None:
        """Remove cached site structure."""
        if self._site_path.exists():
            self._site_path.unlink()

    def _read_meta(self, meta_path: Path) -> CachedMetadata | None:
        """Read and validate metadata file.

        Args:
            meta_path: Path to metadata JSON file

        Returns:
            CachedMetadata if valid, None otherwise
        """
        try:
            data = json.loads(meta_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return None

        if not isinstance(data, dict):
            return None
        for key in ("source_mtime", "base_url", "toc"):
            if key not in data:
                return None

        return CachedMetadata(
            title=data.get("title"),
            source_mtime=data["source_mtime"],
            base_url=data["base_url"],
            toc=data["toc"],
            warnings=data.get("warnings", []),
        )


class NullCache:
    """Cache that never stores anything, used when caching is disabled."""

    def __init__(self, cache_dir: Path | None = None) -> None:
        self._cache_dir = cache_dir

    @property
    def cache_dir(self) -> Path | None:
        return self._cache_dir

    def get(self, path: str, source_mtime: float, *, base_url: str = "/") -> CacheEntry | None:
        return None

    def set(
        self,
        path: str,
        html: str,
        title: str | None,
        source_mtime: float,
        toc: list[dict[str, str | int]],
        *,
        base_url: str = "/",
        warnings: list[str] | None = None,
    ) -> None:
        pass

    def invalidate(self, path: str) -> None:
        pass

    def clear_pages(self) -> None:
        pass

    def clear(self) -> None:
        pass

    def get_site(self) -> Site | None:
        return None

    def set_site(self, site: Site) -> None:
        pass

    def invalidate_site(self) -> None:
        pass
