"""Navigation file parsing.

Reads the ``nav`` tree from a YAML file in the MkDocs format, either a
dedicated ``nav.yml`` or an existing ``mkdocs.yml``:

    nav:
      - index.md
      - Arrays: arrays.md
      - Graphs:
          - graphs/index.md
          - BFS: graphs/bfs.md
      - cppreference: https://en.cppreference.com/

Entries are composed as YAML nodes rather than loaded as plain data so that
every entry keeps its line number for error reporting.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from yaml.nodes import MappingNode, Node, ScalarNode, SequenceNode

from docshelf.core.links import is_external

NAV_KEY = "nav"


class NavFileError(ValueError):
    """Raised when a navigation file cannot be read or is malformed."""


@dataclass
class NavEntry:
    """Single entry of the navigation file."""

    title: str | None
    target: str | None = None
    children: list[NavEntry] = field(default_factory=list)
    line: int | None = None

    @property
    def is_section(self) -> bool:
        """Entry groups children and has no document of its own."""
        return self.target is None

    @property
    def is_external(self) -> bool:
        """Entry links outside the documentation tree."""
        return self.target is not None and is_external(self.target)


def load_nav_file(path: Path) -> list[NavEntry]:
    """Load navigation entries from a YAML file.

    Args:
        path: Path to nav.yml or mkdocs.yml

    Returns:
        Top-level navigation entries in file order

    Raises:
        NavFileError: If the file is missing, unreadable or malformed
    """
    if not path.exists():
        raise NavFileError(f"Navigation file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise NavFileError(f"Cannot read navigation file {path}: {e}") from e

    try:
        root = yaml.compose(text, Loader=yaml.SafeLoader)
    except yaml.YAMLError as e:
        raise NavFileError(f"Invalid YAML in {path}: {e}") from e

    return parse_nav(root, source=str(path))


def parse_nav(root: Node | None, source: str = "<nav>") -> list[NavEntry]:
    """Parse a composed YAML document into navigation entries.

    Args:
        root: Root YAML node of the document
        source: Name used in error messages

    Returns:
        Top-level navigation entries

    Raises:
        NavFileError: If the document has no valid ``nav`` list
    """
    if not isinstance(root, MappingNode):
        raise NavFileError(f"{source}: expected a mapping with a '{NAV_KEY}' key")

    nav_node: Node | None = None
    for key_node, value_node in root.value:
        if isinstance(key_node, ScalarNode) and key_node.value == NAV_KEY:
            nav_node = value_node
            break

    if nav_node is None:
        raise NavFileError(f"{source}: missing '{NAV_KEY}' key")
    if not isinstance(nav_node, SequenceNode):
        raise NavFileError(f"{source}:{_line(nav_node)}: '{NAV_KEY}' must be a list")

    return [_parse_entry(node, source) for node in nav_node.value]


def iter_entries(entries: list[NavEntry]) -> Iterator[NavEntry]:
    """Iterate over entries depth-first, parents before children."""
    for entry in entries:
        yield entry
        yield from iter_entries(entry.children)


def _parse_entry(node: Node, source: str) -> NavEntry:
    line = _line(node)

    if isinstance(node, ScalarNode):
        target = node.value.strip()
        if not target:
            raise NavFileError(f"{source}:{line}: empty navigation entry")
        return NavEntry(title=None, target=target, line=line)

    if not isinstance(node, MappingNode) or len(node.value) != 1:
        raise NavFileError(
            f"{source}:{line}: navigation entry must be a path or a single-key mapping"
        )

    key_node, value_node = node.value[0]
    if not isinstance(key_node, ScalarNode) or not key_node.value.strip():
        raise NavFileError(f"{source}:{line}: navigation title must be a string")
    title = key_node.value.strip()

    if isinstance(value_node, ScalarNode):
        target = value_node.value.strip()
        if not target:
            raise NavFileError(f"{source}:{line}: '{title}' has an empty target")
        return NavEntry(title=title, target=target, line=line)

    if isinstance(value_node, SequenceNode):
        children = [_parse_entry(child, source) for child in value_node.value]
        return NavEntry(title=title, children=children, line=line)

    raise NavFileError(f"{source}:{line}: '{title}' must map to a path or a list")


def _line(node: Node) -> int:
    return node.start_mark.line + 1
