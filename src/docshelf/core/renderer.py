"""Markdown rendering with caching.

Converts documents with mistune and stores results in a file cache
keyed by source mtime and base URL.
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import mistune

from docshelf.core.cache import CacheEntry
from docshelf.core.links import (
    MARKDOWN_SUFFIX,
    doc_path_for,
    page_url,
    resolve_link,
    split_fragment,
)

logger = logging.getLogger(__name__)

MARKDOWN_PLUGINS = ["table", "strikethrough", "footnotes", "task_lists", "url"]

TAG_RE = re.compile(r"<[^>]+>")
SLUG_STRIP_RE = re.compile(r"[^\w\s-]")
SLUG_SPACE_RE = re.compile(r"[\s_-]+")


class PageCache(Protocol):
    """Page storage used by the renderer (FileCache or NullCache)."""

    def get(self, path: str, source_mtime: float, *, base_url: str = "/") -> CacheEntry | None: ...

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
    ) -> None: ...

    def invalidate(self, path: str) -> None: ...

    def clear_pages(self) -> None: ...


@dataclass
class TocEntry:
    """Table of contents entry."""

    level: int
    title: str
    id: str

    def to_dict(self) -> dict[str, str | int]:
        return {"level": self.level, "title": self.title, "id": self.id}


@dataclass
class RenderResult:
    """Result of rendering a markdown document."""

    html: str
    title: str | None
    toc: list[TocEntry]
    source_path: Path
    from_cache: bool
    warnings: list[str] = field(default_factory=list)


class PageRenderer:
    """Renders markdown documents with caching.

    Cache entries are valid while the source file mtime and the base URL
    match. Relative links to other documents are rewritten to their
    published page URLs.
    """

    def __init__(
        self,
        cache: PageCache,
        *,
        source_dir: Path | None = None,
        base_url: str = "/",
        extract_title: bool = True,
    ) -> None:
        """Initialize renderer.

        Args:
            cache: Page cache for rendered content
            source_dir: Root directory containing markdown sources; links are
                        rewritten only for documents inside it
            base_url: Site base URL used for rewritten links
            extract_title: Whether to extract title from first H1
        """
        self._cache = cache
        self._source_dir = source_dir
        self._base_url = base_url
        self._extract_title = extract_title

    @property
    def cache(self) -> PageCache:
        """Page cache used for rendered content."""
        return self._cache

    @property
    def source_dir(self) -> Path | None:
        """Root directory containing markdown sources."""
        return self._source_dir

    def render(self, source_path: Path, base_path: str) -> RenderResult:
        """Render a markdown document.

        Args:
            source_path: Absolute path to the markdown file
            base_path: Cache key for the document (e.g., "graphs/bfs")

        Returns:
            RenderResult with HTML, title, and ToC

        Raises:
            FileNotFoundError: If source markdown file doesn't exist
        """
        if not source_path.is_file():
            raise FileNotFoundError(f"Source file not found: {source_path}")

        cache_key = base_path.strip("/") or "index"
        source_mtime = source_path.stat().st_mtime

        cached = self._cache.get(cache_key, source_mtime, base_url=self._base_url)
        if cached is not None:
            return _from_cache(cached, source_path)

        markdown_text = source_path.read_text(encoding="utf-8")
        result = self.render_text(markdown_text, self._relative_source(source_path))
        self._cache.set(
            cache_key,
            result.html,
            result.title,
            source_mtime,
            [entry.to_dict() for entry in result.toc],
            base_url=self._base_url,
            warnings=result.warnings,
        )

        for warning in result.warnings:
            logger.debug("%s: %s", source_path, warning)

        return RenderResult(
            html=result.html,
            title=result.title,
            toc=result.toc,
            source_path=source_path,
            from_cache=False,
            warnings=result.warnings,
        )

    def render_text(self, markdown_text: str, source_path: Path | None = None) -> _FreshRenderResult:
        """Render markdown text without touching the cache.

        Args:
            markdown_text: Markdown source
            source_path: Document path relative to source_dir, used to resolve
                         relative links; None disables link rewriting

        Returns:
            Fresh render result
        """
        renderer = _DocumentRenderer(
            extract_title=self._extract_title,
            link_resolver=self._link_resolver(source_path),
        )
        markdown = mistune.create_markdown(renderer=renderer, plugins=MARKDOWN_PLUGINS)
        rendered = markdown(markdown_text)
        return _FreshRenderResult(
            html=str(rendered),
            title=renderer.title,
            toc=renderer.toc,
            warnings=renderer.warnings,
        )

    def invalidate(self, path: str) -> None:
        """Invalidate cached content for a path.

        Args:
            path: Document path to invalidate
        """
        self._cache.invalidate(path.strip("/") or "index")

    def _relative_source(self, source_path: Path) -> Path | None:
        if self._source_dir is None:
            return None
        try:
            return source_path.relative_to(self._source_dir)
        except ValueError:
            return None

    def _link_resolver(self, source_path: Path | None) -> _LinkResolver | None:
        if source_path is None or self._source_dir is None:
            return None
        return _LinkResolver(self._source_dir, source_path, self._base_url)


class _LinkResolver:
    """Rewrites document-relative links to published URLs."""

    def __init__(self, source_dir: Path, source_path: Path, base_url: str) -> None:
        self._source_dir = source_dir
        self._source_path = source_path
        self._base_url = base_url

    def rewrite(self, url: str) -> tuple[str, bool]:
        """Return the rewritten URL and whether the target exists.

        Links that are not resolvable inside the docs tree are returned
        unchanged and reported as existing.
        """
        target = resolve_link(url, self._source_path)
        if target is None:
            return url, True

        if not (self._source_dir / target).exists():
            return url, False

        _, fragment = split_fragment(url)
        if target.suffix == MARKDOWN_SUFFIX:
            new_url = page_url(self._base_url, doc_path_for(target))
        else:
            new_url = f"{self._base_url}{target.as_posix()}"
        if fragment:
            new_url = f"{new_url}#{fragment}"
        return new_url, True


class _DocumentRenderer(mistune.HTMLRenderer):
    """HTML renderer collecting title, ToC and link warnings."""

    def __init__(
        self,
        *,
        extract_title: bool,
        link_resolver: _LinkResolver | None,
    ) -> None:
        super().__init__(escape=False)
        self._extract_title = extract_title
        self._link_resolver = link_resolver
        self._slugs: dict[str, int] = {}
        self.title: str | None = None
        self.toc: list[TocEntry] = []
        self.warnings: list[str] = []

    def heading(self, text: str, level: int, **attrs: Any) -> str:
        plain = html.unescape(TAG_RE.sub("", text)).strip()

        if level == 1 and self.title is None:
            self.title = plain
            if self._extract_title:
                return ""

        slug = self._unique_slug(plain)
        if level >= 2:
            self.toc.append(TocEntry(level=level, title=plain, id=slug))
        return f'<h{level} id="{slug}">{text}</h{level}>\n'

    def link(self, text: str, url: str, title: str | None = None) -> str:
        return super().link(text, self._rewrite(url), title)

    def image(self, text: str, url: str, title: str | None = None) -> str:
        return super().image(text, self._rewrite(url), title)

    def _rewrite(self, url: str) -> str:
        if self._link_resolver is None:
            return url
        new_url, exists = self._link_resolver.rewrite(url)
        if not exists:
            self.warnings.append(f"Unresolved link: {url}")
        return new_url

    def _unique_slug(self, text: str) -> str:
        base = slugify(text) or "section"
        count = self._slugs.get(base, 0)
        self._slugs[base] = count + 1
        return base if count == 0 else f"{base}-{count}"


def slugify(text: str) -> str:
    """Convert heading text to an anchor id ("Two Pointers" -> "two-pointers")."""
    slug = SLUG_STRIP_RE.sub("", text.lower())
    return SLUG_SPACE_RE.sub("-", slug).strip("-")


@dataclass
class _FreshRenderResult:
    """Internal result from fresh rendering."""

    html: str
    title: str | None
    toc: list[TocEntry]
    warnings: list[str]


def _from_cache(cached: CacheEntry, source_path: Path) -> RenderResult:
    """Create RenderResult from cache entry.

    Args:
        cached: Cache entry with HTML and metadata
        source_path: Source file path

    Returns:
        RenderResult reconstructed from cache
    """
    toc_entries = [
        TocEntry(
            level=int(entry["level"]),
            title=str(entry["title"]),
            id=str(entry["id"]),
        )
        for entry in cached.meta["toc"]
    ]

    return RenderResult(
        html=cached.html,
        title=cached.meta["title"],
        toc=toc_entries,
        source_path=source_path,
        from_cache=True,
        warnings=list(cached.meta["warnings"]),
    )
