"""Mapping between source documents and site URLs.

Source paths are always relative to the documentation source directory.
"""

import posixpath
from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlsplit

from docshelf.core.types import URLPath

MARKDOWN_SUFFIX = ".md"
INDEX_STEM = "index"


def doc_path_for(source_path: Path) -> URLPath:
    """Convert a source file path to its URL path.

    Args:
        source_path: Path relative to source dir (e.g., "graphs/bfs.md")

    Returns:
        URL path (e.g., "/graphs/bfs"); index.md maps to its directory
    """
    parts = list(PurePosixPath(source_path.as_posix()).with_suffix("").parts)
    if parts and parts[-1] == INDEX_STEM:
        parts.pop()
    return URLPath("/" + "/".join(parts))


def is_external(url: str) -> bool:
    """Check whether a link points outside the documentation tree."""
    if url.startswith("//") or url.startswith("/"):
        return True
    return bool(urlsplit(url).scheme)


def split_fragment(url: str) -> tuple[str, str]:
    """Split a link into its path part and fragment (without '#')."""
    path, _, fragment = url.partition("#")
    return path, fragment


def resolve_link(url: str, source_path: Path) -> Path | None:
    """Resolve a relative link written inside a document.

    Args:
        url: Link target as written (e.g., "../sorting.md#merge")
        source_path: Path of the linking document, relative to source dir

    Returns:
        Target path relative to source dir, or None for anchors, external
        links, and links escaping the source dir
    """
    if not url or url.startswith("#") or is_external(url):
        return None

    target = unquote(urlsplit(url).path)
    if not target:
        return None

    base = PurePosixPath(source_path.as_posix()).parent
    joined = posixpath.normpath(posixpath.join(base.as_posix(), target))
    if joined == ".." or joined.startswith("../"):
        return None
    return Path(joined)


def page_url(base_url: str, path: str) -> str:
    """Build the public URL of a page.

    Args:
        base_url: Site base URL, starting and ending with "/"
        path: Page URL path (e.g., "/graphs/bfs")

    Returns:
        URL with trailing slash (e.g., "/graphs/bfs/")
    """
    stripped = path.strip("/")
    if not stripped:
        return base_url
    return f"{base_url}{stripped}/"


def title_from_filename(source_path: Path) -> str:
    """Derive a title from a file or directory name.

    "setup-guide.md" becomes "Setup Guide"; for index.md the parent
    directory name is used.
    """
    stem = source_path.stem
    if stem == INDEX_STEM and source_path.parent.name:
        stem = source_path.parent.name
    words = stem.replace("_", " ").replace("-", " ").split()
    return " ".join(word[:1].upper() + word[1:] for word in words) or stem


def normalize_source_path(target: str) -> Path | None:
    """Normalize a source-relative path such as a navigation target.

    Returns:
        Normalized path, or None when it is absolute or climbs out of the
        source dir ("../x.md")
    """
    joined = posixpath.normpath(target.replace("\\", "/"))
    if joined.startswith("/") or joined == ".." or joined.startswith("../"):
        return None
    return Path(joined)
