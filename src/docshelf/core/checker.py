"""Documentation checks.

Verifies that every navigation entry resolves to an existing document,
that every document is reachable from the navigation, and that relative
links inside documents point to existing files.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any
from urllib.parse import unquote

import mistune

from docshelf.core.links import MARKDOWN_SUFFIX, normalize_source_path, resolve_link
from docshelf.core.nav_file import NavEntry, iter_entries
from docshelf.core.renderer import MARKDOWN_PLUGINS
from docshelf.core.site import is_ignored_name

logger = logging.getLogger(__name__)


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


class IssueCode(StrEnum):
    NAV_MISSING_FILE = "nav-missing-file"
    NAV_NOT_MARKDOWN = "nav-not-markdown"
    NAV_DUPLICATE = "nav-duplicate"
    NAV_ORPHAN = "nav-orphan"
    MISSING_SOURCE_DIR = "missing-source-dir"
    BROKEN_LINK = "broken-link"
    EMPTY_DOCUMENT = "empty-document"
    UNREADABLE_DOCUMENT = "unreadable-document"
    MISSING_HEADING = "missing-heading"


@dataclass(frozen=True)
class Issue:
    """Single problem found in the documentation tree."""

    code: IssueCode
    severity: Severity
    message: str
    source: Path | None = None
    line: int | None = None

    def location(self) -> str:
        """Human-readable "file:line" location, empty when unknown."""
        if self.source is None:
            return ""
        if self.line is None:
            return self.source.as_posix()
        return f"{self.source.as_posix()}:{self.line}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": str(self.code),
            "severity": str(self.severity),
            "message": self.message,
            "source": self.source.as_posix() if self.source else None,
            "line": self.line,
        }


@dataclass
class CheckReport:
    """All issues found by a check run."""

    issues: list[Issue] = field(default_factory=list)

    @property
    def errors(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]

    @property
    def ok(self) -> bool:
        return not self.errors

    def has_failures(self, *, strict: bool = False) -> bool:
        """Errors always fail; warnings fail only in strict mode."""
        if strict:
            return bool(self.issues)
        return bool(self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "errors": len(self.errors),
            "warnings": len(self.warnings),
            "issues": [issue.to_dict() for issue in self.issues],
        }


def check_site(
    source_dir: Path,
    nav_entries: list[NavEntry] | None = None,
    *,
    nav_source: Path | None = None,
) -> CheckReport:
    """Check documentation sources and navigation.

    Args:
        source_dir: Root directory containing markdown sources
        nav_entries: Parsed navigation file, None when navigation follows
                     the directory layout
        nav_source: Navigation file path reported in navigation issues

    Returns:
        CheckReport with issues sorted by source and line
    """
    if not source_dir.is_dir():
        return CheckReport(
            issues=[
                Issue(
                    IssueCode.MISSING_SOURCE_DIR,
                    Severity.ERROR,
                    f"Source directory not found: {source_dir}",
                )
            ]
        )

    issues: list[Issue] = []
    documents = list(iter_documents(source_dir))

    if nav_entries is not None:
        issues.extend(_check_navigation(source_dir, nav_entries, documents, nav_source))

    for document in documents:
        issues.extend(_check_document(source_dir, document))

    issues.sort(key=_sort_key)
    logger.info(
        "Checked %d documents: %d errors, %d warnings",
        len(documents),
        sum(1 for i in issues if i.severity == Severity.ERROR),
        sum(1 for i in issues if i.severity == Severity.WARNING),
    )
    return CheckReport(issues=issues)


def iter_documents(source_dir: Path) -> Iterator[Path]:
    """Yield markdown documents relative to source_dir, skipping ignored names."""
    if not source_dir.is_dir():
        return
    for path in sorted(source_dir.rglob(f"*{MARKDOWN_SUFFIX}")):
        relative = path.relative_to(source_dir)
        if any(is_ignored_name(part) for part in relative.parts):
            continue
        if path.is_file():
            yield relative


def extract_links(markdown_text: str) -> list[tuple[str, int | None]]:
    """Extract link and image targets with their line numbers.

    Args:
        markdown_text: Markdown source

    Returns:
        List of (url, line) tuples in document order
    """
    return _links_from_tokens(markdown_text, _parse(markdown_text))


def _parse(markdown_text: str) -> list[dict[str, Any]]:
    parse = mistune.create_markdown(renderer="ast", plugins=MARKDOWN_PLUGINS)
    return parse(markdown_text)  # type: ignore[return-value]


def _links_from_tokens(
    markdown_text: str, tokens: list[dict[str, Any]]
) -> list[tuple[str, int | None]]:
    urls: list[str] = []
    _collect_urls(tokens, urls)

    links: list[tuple[str, int | None]] = []
    offset = 0
    for url in urls:
        position = _find(markdown_text, url, offset)
        if position < 0:
            links.append((url, None))
            continue
        offset = position + 1
        links.append((url, markdown_text.count("\n", 0, position) + 1))
    return links


def _collect_urls(tokens: Any, urls: list[str]) -> None:
    if isinstance(tokens, list):
        for token in tokens:
            _collect_urls(token, urls)
        return
    if not isinstance(tokens, dict):
        return

    if tokens.get("type") in ("link", "image"):
        url = tokens.get("attrs", {}).get("url")
        if isinstance(url, str):
            urls.append(url)
    _collect_urls(tokens.get("children"), urls)


def _find(text: str, url: str, start: int) -> int:
    position = text.find(url, start)
    if position < 0:
        position = text.find(unquote(url), start)
    return position


def _check_navigation(
    source_dir: Path,
    entries: list[NavEntry],
    documents: list[Path],
    nav_source: Path | None,
) -> list[Issue]:
    issues: list[Issue] = []
    seen: dict[Path, int | None] = {}

    for entry in iter_entries(entries):
        if entry.is_section or entry.is_external or entry.target is None:
            continue

        label = entry.title or entry.target
        target = normalize_source_path(entry.target)
        if target is None:
            issues.append(
                Issue(
                    IssueCode.NAV_MISSING_FILE,
                    Severity.ERROR,
                    f"Navigation entry '{label}' points outside the source directory: "
                    f"{entry.target}",
                    nav_source,
                    entry.line,
                )
            )
            continue

        full_path = source_dir / target

        if not full_path.exists():
            issues.append(
                Issue(
                    IssueCode.NAV_MISSING_FILE,
                    Severity.ERROR,
                    f"Navigation entry '{label}' points to missing file {target.as_posix()}",
                    nav_source,
                    entry.line,
                )
            )
            continue

        if target.suffix != MARKDOWN_SUFFIX or not full_path.is_file():
            issues.append(
                Issue(
                    IssueCode.NAV_NOT_MARKDOWN,
                    Severity.ERROR,
                    f"Navigation entry '{label}' is not a markdown document: {target.as_posix()}",
                    nav_source,
                    entry.line,
                )
            )
            continue

        if target in seen:
            issues.append(
                Issue(
                    IssueCode.NAV_DUPLICATE,
                    Severity.WARNING,
                    f"{target.as_posix()} is listed more than once in navigation "
                    f"(first at line {seen[target]})",
                    nav_source,
                    entry.line,
                )
            )
            continue
        seen[target] = entry.line

    for document in documents:
        if document not in seen:
            issues.append(
                Issue(
                    IssueCode.NAV_ORPHAN,
                    Severity.WARNING,
                    "Document is not included in navigation",
                    document,
                )
            )

    return issues


def _check_document(source_dir: Path, document: Path) -> list[Issue]:
    try:
        text = (source_dir / document).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return [
            Issue(
                IssueCode.UNREADABLE_DOCUMENT,
                Severity.ERROR,
                f"Cannot read document: {e}",
                document,
            )
        ]

    if not text.strip():
        return [Issue(IssueCode.EMPTY_DOCUMENT, Severity.WARNING, "Document is empty", document)]

    tokens = _parse(text)
    issues: list[Issue] = []
    if not _starts_with_title(tokens):
        issues.append(
            Issue(
                IssueCode.MISSING_HEADING,
                Severity.WARNING,
                "Document does not start with a top-level heading",
                document,
                1,
            )
        )

    for url, line in _links_from_tokens(text, tokens):
        target = resolve_link(url, document)
        if target is None:
            continue
        if not (source_dir / target).exists():
            issues.append(
                Issue(
                    IssueCode.BROKEN_LINK,
                    Severity.ERROR,
                    f"Broken link: {url}",
                    document,
                    line,
                )
            )

    return issues


def _starts_with_title(tokens: list[dict[str, Any]]) -> bool:
    """The first block is a level-one heading, ATX or setext."""
    for token in tokens:
        if token.get("type") == "blank_line":
            continue
        return token.get("type") == "heading" and token.get("attrs", {}).get("level") == 1
    return False


def _sort_key(issue: Issue) -> tuple[str, int]:
    source = issue.source.as_posix() if issue.source else ""
    return (source, issue.line or 0)
